import unittest
from unittest import mock

from lifecycle_watcher.discovery import Arn, lifecycle_event_queue_url, parse_arn
from lifecycle_watcher.errors import LifecycleHookNotFoundError


class TestParseArn(unittest.TestCase):
    """Tests for ARN parsing."""

    def test_parses_queue_arn(self):
        self.assertEqual(
            parse_arn('arn:aws:sqs:us-east-1:123456789012:lifecycle-events'),
            Arn(partition='aws', service='sqs', region='us-east-1', account_id='123456789012',
                resource='lifecycle-events')
        )

    def test_resource_keeps_colons(self):
        arn = parse_arn('arn:aws:sns:us-east-1:123456789012:topic:subscription-id')

        self.assertEqual(arn.resource, 'topic:subscription-id')

    def test_other_partitions(self):
        self.assertEqual(parse_arn('arn:aws-cn:sqs:cn-north-1:123456789012:q').partition, 'aws-cn')

    def test_malformed_arn_raises(self):
        for text in ('', 'not-an-arn', 'arn:aws:sqs', 'urn:aws:sqs:us-east-1:1:q', 'arn:aws:sqs:us-east-1:1:'):
            with self.assertRaises(ValueError):
                parse_arn(text)


class TestLifecycleEventQueueUrl(unittest.TestCase):
    """Tests for discovering the lifecycle event queue of a group."""

    def setUp(self):
        self.sqs_client = mock.MagicMock()
        self.autoscaling_client = mock.MagicMock()
        clients = {'sqs': self.sqs_client, 'autoscaling': self.autoscaling_client}
        self.aws_wrapper = mock.MagicMock()
        self.aws_wrapper.create_aws_client.side_effect = lambda service_name, **kwargs: clients[service_name]

    def test_first_sqs_hook_wins(self):
        """Test that hooks publishing to SNS are skipped in favour of the SQS one."""
        self.autoscaling_client.describe_lifecycle_hooks.return_value = {'LifecycleHooks': [
            {'LifecycleHookName': 'no-target'},
            {'LifecycleHookName': 'sns', 'NotificationTargetARN': 'arn:aws:sns:us-east-1:111111111111:topic'},
            {'LifecycleHookName': 'sqs', 'NotificationTargetARN': 'arn:aws:sqs:us-east-1:222222222222:events'},
            {'LifecycleHookName': 'sqs-2', 'NotificationTargetARN': 'arn:aws:sqs:us-east-1:333333333333:other'},
        ]}
        self.sqs_client.get_queue_url.return_value = {
            'QueueUrl': 'https://sqs.us-east-1.amazonaws.com/222222222222/events'}

        queue_url = lifecycle_event_queue_url(self.aws_wrapper, 'workers')

        self.assertEqual(queue_url, 'https://sqs.us-east-1.amazonaws.com/222222222222/events')
        self.autoscaling_client.describe_lifecycle_hooks.assert_called_once_with(AutoScalingGroupName='workers')
        self.sqs_client.get_queue_url.assert_called_once_with(
            QueueName='events', QueueOwnerAWSAccountId='222222222222')

    def test_queue_resolved_in_its_own_region(self):
        """Test that a hook targeting another region's queue is looked up in that region."""
        self.autoscaling_client.describe_lifecycle_hooks.return_value = {'LifecycleHooks': [
            {'LifecycleHookName': 'sqs', 'NotificationTargetARN': 'arn:aws:sqs:eu-west-1:222222222222:events'},
        ]}
        self.sqs_client.get_queue_url.return_value = {
            'QueueUrl': 'https://sqs.eu-west-1.amazonaws.com/222222222222/events'}

        lifecycle_event_queue_url(self.aws_wrapper, 'workers')

        self.aws_wrapper.create_aws_client.assert_any_call('sqs', region_name='eu-west-1')

    def test_no_sqs_hook_raises(self):
        self.autoscaling_client.describe_lifecycle_hooks.return_value = {'LifecycleHooks': [
            {'LifecycleHookName': 'sns', 'NotificationTargetARN': 'arn:aws:sns:us-east-1:111111111111:topic'},
            {'LifecycleHookName': 'garbage', 'NotificationTargetARN': 'sqs-queue'},
        ]}

        with self.assertRaises(LifecycleHookNotFoundError) as ctx:
            lifecycle_event_queue_url(self.aws_wrapper, 'workers')

        self.assertEqual(ctx.exception.group_name, 'workers')
        self.sqs_client.get_queue_url.assert_not_called()

    def test_group_without_hooks_raises(self):
        self.autoscaling_client.describe_lifecycle_hooks.return_value = {'LifecycleHooks': []}

        with self.assertRaises(LifecycleHookNotFoundError):
            lifecycle_event_queue_url(self.aws_wrapper, 'workers')


if __name__ == '__main__':
    unittest.main()
