import logging
from typing import Any, Dict, List

from lifecycle_watcher.errors import QueueAttributeError

RECEIVE_MAX_MESSAGES = 1
RECEIVE_WAIT_SECONDS = 20

log = logging.getLogger(__name__)


def get_visibility_timeout(sqs_client, queue_url: str) -> int:
    """
    Read the queue's configured visibility timeout.

    Args:
        sqs_client: Boto3 SQS client
        queue_url: SQS queue URL

    Returns:
        int: Visibility timeout in seconds

    Raises:
        QueueAttributeError: If the attribute is missing or not an integer
    """
    response = sqs_client.get_queue_attributes(
        QueueUrl=queue_url,
        AttributeNames=['VisibilityTimeout']
    )
    attributes = response.get('Attributes') or {}
    if 'VisibilityTimeout' not in attributes:
        raise QueueAttributeError("VisibilityTimeout attribute not found")
    try:
        timeout = int(attributes['VisibilityTimeout'])
    except (TypeError, ValueError) as e:
        raise QueueAttributeError(f"Invalid VisibilityTimeout: {attributes['VisibilityTimeout']!r}") from e

    log.debug(f"Queue {queue_url} has a visibility timeout of {timeout}s")
    return timeout


def receive_messages(sqs_client, queue_url: str) -> List[Dict[str, Any]]:
    """Long-poll the queue for a single message. Returns an empty list on timeout."""
    response = sqs_client.receive_message(
        QueueUrl=queue_url,
        MaxNumberOfMessages=RECEIVE_MAX_MESSAGES,
        WaitTimeSeconds=RECEIVE_WAIT_SECONDS
    )
    return response.get('Messages', [])


def delete_message(sqs_client, queue_url: str, receipt_handle: str) -> None:
    sqs_client.delete_message(
        QueueUrl=queue_url,
        ReceiptHandle=receipt_handle
    )


def change_message_visibility(sqs_client, queue_url: str, receipt_handle: str, visibility_timeout: int) -> None:
    sqs_client.change_message_visibility(
        QueueUrl=queue_url,
        ReceiptHandle=receipt_handle,
        VisibilityTimeout=visibility_timeout
    )
