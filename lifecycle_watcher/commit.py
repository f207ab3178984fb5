import logging

from botocore.exceptions import BotoCoreError, ClientError

from lifecycle_watcher.messages import LifecycleEvent
from lifecycle_watcher.queue import delete_message
from lifecycle_watcher.sandbox import Decision

log = logging.getLogger(__name__)


def complete_lifecycle_action(autoscaling_client, event: LifecycleEvent, decision: Decision,
                              logger: logging.Logger = None) -> bool:
    """
    Tell the autoscaling group to continue or abandon the pending transition.

    Failures are logged and not raised: the hook may already have timed out
    server side, and retrying it forever would block the queue.

    Args:
        autoscaling_client: Boto3 autoscaling client
        event: The lifecycle event being completed
        decision: The callback's decision
        logger: Optional logger

    Returns:
        bool: Whether the completion call succeeded
    """
    logger = logger or log
    try:
        autoscaling_client.complete_lifecycle_action(
            AutoScalingGroupName=event.auto_scaling_group_name,
            LifecycleActionResult=decision.result,
            LifecycleHookName=event.lifecycle_hook_name,
            InstanceId=event.ec2_instance_id,
            LifecycleActionToken=event.lifecycle_action_token
        )
    except (ClientError, BotoCoreError) as e:
        logger.error(f"CompleteLifecycleAction failed for instance {event.ec2_instance_id}: {e}")
        return False

    logger.info(f"Completed lifecycle action {decision.result} for instance {event.ec2_instance_id} "
                f"in group {event.auto_scaling_group_name}")
    return True


def commit_decision(sqs_client, autoscaling_client, queue_url: str, receipt_handle: str,
                    event: LifecycleEvent, decision: Decision, logger: logging.Logger = None) -> bool:
    """
    Complete the lifecycle action, then delete the message.

    The message is deleted whether or not the completion succeeded. A delete
    failure is raised to the caller.

    Returns:
        bool: Whether the completion call succeeded
    """
    logger = logger or log
    completed = complete_lifecycle_action(autoscaling_client, event, decision, logger=logger)

    try:
        delete_message(sqs_client, queue_url, receipt_handle)
    except Exception as e:
        logger.error(f"Error deleting message for instance {event.ec2_instance_id}: {e}", exc_info=True)
        raise

    return completed
