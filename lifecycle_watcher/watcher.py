import logging
import threading
from typing import Any, Dict, Tuple, Type

from botocore.exceptions import BotoCoreError, ClientError

from lifecycle_watcher.aws.wrapper import AWSWrapper
from lifecycle_watcher.commit import commit_decision
from lifecycle_watcher.lease import LeaseRenewer
from lifecycle_watcher.messages import decode_event
from lifecycle_watcher.queue import delete_message, get_visibility_timeout, receive_messages
from lifecycle_watcher.sandbox import BUSINESS_ERRORS, LifecycleEventCallback, run_callback

log = logging.getLogger(__name__)


def process_message(sqs_client, autoscaling_client, queue_url: str, message: Dict[str, Any],
                    callback: LifecycleEventCallback, visibility_timeout: int,
                    business_errors: Tuple[Type[BaseException], ...] = BUSINESS_ERRORS,
                    logger: logging.Logger = None) -> None:
    """
    Drive a single received message through decode, decision and commit.

    Args:
        sqs_client: Boto3 SQS client
        autoscaling_client: Boto3 autoscaling client
        queue_url: SQS queue URL
        message: Message as returned by receive_message
        callback: Decision callback
        visibility_timeout: The queue's visibility timeout in seconds
        business_errors: Callback exceptions treated as business failures
        logger: Optional logger

    Raises:
        DecodeError: If the message body is malformed
        ClientError: If the message cannot be deleted after a commit
    """
    logger = logger or log
    receipt_handle = message['ReceiptHandle']

    try:
        event = decode_event(message.get('Body'))
    except Exception as e:
        logger.error(f"Malformed lifecycle message {message.get('MessageId')}: {e}")
        raise

    if not event.is_actionable:
        logger.info(f"Discarding message {message.get('MessageId')} with transition {event.lifecycle_transition}")
        try:
            delete_message(sqs_client, queue_url, receipt_handle)
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"DeleteMessage: {e}")
        return

    logger.info(f"Received {event.kind} event for instance {event.ec2_instance_id} "
                f"in group {event.auto_scaling_group_name}")

    renewer = LeaseRenewer(sqs_client, queue_url, receipt_handle, visibility_timeout, logger=logger)
    renewer.start()
    try:
        decision = run_callback(callback, event, business_errors=business_errors, logger=logger)
    finally:
        renewer.stop()

    if renewer.error is not None:
        logger.warning(f"Lease for instance {event.ec2_instance_id} stopped being renewed "
                       f"after {renewer.renewals} renewal(s): {renewer.error}")

    if decision.failed:
        logger.info(f"Leaving message for instance {event.ec2_instance_id} in the queue for redelivery")
        return

    commit_decision(sqs_client, autoscaling_client, queue_url, receipt_handle, event, decision, logger=logger)


def watch_lifecycle_events(aws_wrapper: AWSWrapper, queue_url: str, callback: LifecycleEventCallback,
                           stop_event: threading.Event = None,
                           business_errors: Tuple[Type[BaseException], ...] = BUSINESS_ERRORS,
                           logger: logging.Logger = None) -> None:
    """
    Watch a lifecycle event queue and invoke the callback for each event.

    Launch and terminate events are passed to the callback. If it returns a
    truthy value the lifecycle action is completed with CONTINUE, otherwise
    with ABANDON. If it raises a business error the message stays in the
    queue and is redelivered after its visibility timeout. Other events are
    deleted without invoking the callback.

    Runs until stop_event is set or a fatal error occurs.

    Args:
        aws_wrapper: AWS API wrapper instance
        queue_url: SQS queue URL receiving the lifecycle notifications
        callback: Decision callback
        stop_event: Optional event requesting a graceful stop between receives
        business_errors: Callback exceptions treated as business failures
        logger: Optional logger

    Raises:
        ClientError: On receive, queue attribute or post-commit delete failures
        DecodeError: If a message body is malformed
        QueueAttributeError: If the queue has no visibility timeout attribute
    """
    logger = logger or log
    sqs_client = aws_wrapper.create_aws_client('sqs')
    autoscaling_client = aws_wrapper.create_aws_client('autoscaling')

    try:
        visibility_timeout = get_visibility_timeout(sqs_client, queue_url)
    except Exception as e:
        logger.error(f"Error reading visibility timeout of {queue_url}: {e}", exc_info=True)
        raise

    logger.info(f"Watching lifecycle events on {queue_url} (visibility timeout {visibility_timeout}s)")

    while stop_event is None or not stop_event.is_set():
        try:
            messages = receive_messages(sqs_client, queue_url)
        except Exception as e:
            logger.error(f"Error receiving messages from {queue_url}: {e}", exc_info=True)
            raise

        for message in messages:
            process_message(sqs_client, autoscaling_client, queue_url, message, callback,
                            visibility_timeout, business_errors=business_errors, logger=logger)

    logger.info(f"Stopped watching lifecycle events on {queue_url}")
