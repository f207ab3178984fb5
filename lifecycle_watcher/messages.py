import json
import re
from datetime import datetime
from typing import Any, Dict, NamedTuple, Optional

from lifecycle_watcher.errors import DecodeError

EC2_INSTANCE_LAUNCHING = 'autoscaling:EC2_INSTANCE_LAUNCHING'
EC2_INSTANCE_TERMINATING = 'autoscaling:EC2_INSTANCE_TERMINATING'

ACTIONABLE_TRANSITIONS = {
    EC2_INSTANCE_LAUNCHING: 'LAUNCHING',
    EC2_INSTANCE_TERMINATING: 'TERMINATING',
}

# Notification key -> LifecycleEvent field
_FIELDS = {
    'autoscalinggroupname': 'auto_scaling_group_name',
    'service': 'service',
    'accountid': 'account_id',
    'lifecycletransition': 'lifecycle_transition',
    'requestid': 'request_id',
    'lifecycleactiontoken': 'lifecycle_action_token',
    'ec2instanceid': 'ec2_instance_id',
    'lifecyclehookname': 'lifecycle_hook_name',
}

_FRACTION = re.compile(r'\.(\d+)')


class LifecycleEvent(NamedTuple):
    """A lifecycle notification published by an autoscaling lifecycle hook."""
    auto_scaling_group_name: Optional[str] = None
    service: Optional[str] = None
    time: Optional[datetime] = None
    account_id: Optional[str] = None
    lifecycle_transition: Optional[str] = None
    request_id: Optional[str] = None
    lifecycle_action_token: Optional[str] = None
    ec2_instance_id: Optional[str] = None
    lifecycle_hook_name: Optional[str] = None

    @property
    def kind(self) -> Optional[str]:
        """'LAUNCHING', 'TERMINATING' or None for any other transition."""
        return ACTIONABLE_TRANSITIONS.get(self.lifecycle_transition)

    @property
    def is_actionable(self) -> bool:
        return self.kind is not None


def _parse_time(value: str) -> datetime:
    # fromisoformat() wants an explicit offset and at most microseconds
    text = value.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    text = _FRACTION.sub(lambda m: '.' + m.group(1)[:6].ljust(6, '0'), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp has no UTC offset: {value}")
    return parsed


def decode_event(body: str) -> LifecycleEvent:
    """
    Decode an SQS message body into a LifecycleEvent.

    Keys are matched case-insensitively and unknown keys are ignored, so both
    'EC2InstanceId' and 'EC2InstanceID' are accepted.

    Args:
        body: Raw message body

    Returns:
        LifecycleEvent: The decoded event

    Raises:
        DecodeError: If the body is not a JSON object or a field has the wrong type
    """
    try:
        payload = json.loads(body)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"cannot unmarshal event: {e}") from e

    if not isinstance(payload, dict):
        raise DecodeError(f"cannot unmarshal event: expected an object, got {type(payload).__name__}")

    values: Dict[str, Any] = {}
    for key, value in payload.items():
        lowered = key.lower()
        if value is None:
            continue
        if lowered == 'time':
            if not isinstance(value, str):
                raise DecodeError(f"cannot unmarshal event: Time must be a string, got {value!r}")
            try:
                values['time'] = _parse_time(value)
            except ValueError as e:
                raise DecodeError(f"cannot unmarshal event: invalid Time {value!r}: {e}") from e
            continue
        field = _FIELDS.get(lowered)
        if field is None:
            continue
        if not isinstance(value, str):
            raise DecodeError(f"cannot unmarshal event: {key} must be a string, got {value!r}")
        values[field] = value

    return LifecycleEvent(**values)
