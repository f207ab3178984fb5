class LifecycleWatcherError(Exception):
    """Base class for errors raised by the lifecycle watcher."""


class DecodeError(LifecycleWatcherError):
    """A queue message body could not be decoded into a lifecycle event."""


class QueueAttributeError(LifecycleWatcherError):
    """A required queue attribute is missing or malformed."""


class LifecycleHookNotFoundError(LifecycleWatcherError):
    """No lifecycle hook of the group publishes to an SQS queue."""

    def __init__(self, group_name):
        super().__init__(f"cannot find a suitable lifecycle hook for {group_name}")
        self.group_name = group_name


class LifecycleCallbackError(LifecycleWatcherError):
    """
    Raised by decision callbacks to signal a business failure.

    The message is left in the queue and redelivered once its visibility
    timeout expires.
    """
