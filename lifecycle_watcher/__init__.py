"""
Autoscaling lifecycle hook watcher.

This package consumes lifecycle notifications from an SQS queue, hands each
launch or termination event to a user decision callback while keeping the
message's visibility lease alive, and completes the lifecycle action once a
decision has been reached.
"""

__version__ = "0.1.0"
