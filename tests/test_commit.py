import unittest
from unittest import mock

from botocore.exceptions import ClientError

from lifecycle_watcher.commit import commit_decision, complete_lifecycle_action
from lifecycle_watcher.messages import EC2_INSTANCE_TERMINATING, LifecycleEvent
from lifecycle_watcher.sandbox import Decision

EVENT = LifecycleEvent(
    auto_scaling_group_name='workers',
    lifecycle_transition=EC2_INSTANCE_TERMINATING,
    lifecycle_action_token='token-1',
    ec2_instance_id='i-789',
    lifecycle_hook_name='drain-hook'
)


def client_error(operation):
    return ClientError({'Error': {'Code': 'ValidationError', 'Message': 'No active Lifecycle Action'}}, operation)


class TestCommit(unittest.TestCase):
    """Tests for completing lifecycle actions and acknowledging messages."""

    def setUp(self):
        self.sqs_client = mock.MagicMock()
        self.autoscaling_client = mock.MagicMock()
        self.logger = mock.MagicMock()

    def test_complete_sends_event_fields(self):
        completed = complete_lifecycle_action(self.autoscaling_client, EVENT, Decision(False), logger=self.logger)

        self.assertTrue(completed)
        self.autoscaling_client.complete_lifecycle_action.assert_called_once_with(
            AutoScalingGroupName='workers',
            LifecycleActionResult='ABANDON',
            LifecycleHookName='drain-hook',
            InstanceId='i-789',
            LifecycleActionToken='token-1'
        )

    def test_complete_failure_is_logged(self):
        self.autoscaling_client.complete_lifecycle_action.side_effect = client_error('CompleteLifecycleAction')

        completed = complete_lifecycle_action(self.autoscaling_client, EVENT, Decision(True), logger=self.logger)

        self.assertFalse(completed)
        self.logger.error.assert_called_once()

    def test_commit_deletes_after_failed_completion(self):
        """Test that the message is deleted even if the hook could not be completed."""
        self.autoscaling_client.complete_lifecycle_action.side_effect = client_error('CompleteLifecycleAction')

        completed = commit_decision(self.sqs_client, self.autoscaling_client, 'queue-url', 'handle',
                                    EVENT, Decision(True), logger=self.logger)

        self.assertFalse(completed)
        self.sqs_client.delete_message.assert_called_once_with(QueueUrl='queue-url', ReceiptHandle='handle')

    def test_commit_delete_failure_raises(self):
        self.sqs_client.delete_message.side_effect = client_error('DeleteMessage')

        with self.assertRaises(ClientError):
            commit_decision(self.sqs_client, self.autoscaling_client, 'queue-url', 'handle',
                            EVENT, Decision(True), logger=self.logger)

        self.autoscaling_client.complete_lifecycle_action.assert_called_once()


if __name__ == '__main__':
    unittest.main()
