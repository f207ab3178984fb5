import logging
from typing import NamedTuple

from lifecycle_watcher.aws.wrapper import AWSWrapper
from lifecycle_watcher.errors import LifecycleHookNotFoundError

log = logging.getLogger(__name__)


class Arn(NamedTuple):
    """The components of an Amazon Resource Name."""
    partition: str
    service: str
    region: str
    account_id: str
    resource: str


def parse_arn(text: str) -> Arn:
    """
    Split an ARN into its components.

    Args:
        text: ARN such as 'arn:aws:sqs:us-east-1:123456789012:my-queue'

    Returns:
        Arn: The parsed ARN

    Raises:
        ValueError: If the text is not a well-formed ARN
    """
    parts = text.split(':', 5)
    if len(parts) != 6 or parts[0] != 'arn' or not parts[1] or not parts[2] or not parts[5]:
        raise ValueError(f"Malformed ARN: {text}")
    return Arn(partition=parts[1], service=parts[2], region=parts[3], account_id=parts[4], resource=parts[5])


def lifecycle_event_queue_url(aws_wrapper: AWSWrapper, group_name: str) -> str:
    """
    Find the SQS queue receiving lifecycle notifications for an autoscaling group.

    The first lifecycle hook whose notification target is an SQS queue wins.

    Args:
        aws_wrapper: AWS API wrapper instance
        group_name: Autoscaling group name

    Returns:
        str: The queue URL

    Raises:
        LifecycleHookNotFoundError: If no hook publishes to an SQS queue
    """
    autoscaling_client = aws_wrapper.create_aws_client('autoscaling')
    response = autoscaling_client.describe_lifecycle_hooks(AutoScalingGroupName=group_name)

    for hook in response.get('LifecycleHooks', []):
        target = hook.get('NotificationTargetARN')
        if not target:
            continue
        try:
            arn = parse_arn(target)
        except ValueError:
            log.debug(f"Skipping hook {hook.get('LifecycleHookName')} with target {target}")
            continue
        if arn.service != 'sqs':
            continue

        sqs_client = aws_wrapper.create_aws_client('sqs', region_name=arn.region or None)
        queue = sqs_client.get_queue_url(QueueName=arn.resource, QueueOwnerAWSAccountId=arn.account_id)
        log.info(f"Using queue {queue['QueueUrl']} of lifecycle hook {hook.get('LifecycleHookName')}")
        return queue['QueueUrl']

    raise LifecycleHookNotFoundError(group_name)
