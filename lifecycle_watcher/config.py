import os
from typing import Dict, Any, Optional, NamedTuple

DEFAULT_CALLBACK = 'lifecycle_watcher.callbacks:log_and_continue'


class Config(NamedTuple):
    """Configuration for the lifecycle watcher."""
    # Queue configuration; discovered from the group's hooks when empty
    queue_url: Optional[str]
    autoscaling_group_name: Optional[str]

    # Decision callback as 'package.module:function'
    callback: str

    # AWS configuration
    region: str
    sso_profile: Optional[str]


def load_config(overrides: Dict[str, Any] = None) -> Config:
    """
    Load configuration from environment variables and optional overrides.

    Override values take precedence over environment variables when present.

    Args:
        overrides: Optional mapping of Config field names to values

    Returns:
        Config: Configuration object with all watcher settings
    """
    overrides = overrides or {}

    queue_url = overrides.get('queue_url') or os.environ.get('LIFECYCLE_QUEUE_URL')
    autoscaling_group_name = overrides.get('autoscaling_group_name') or os.environ.get('AUTOSCALING_GROUP_NAME')

    callback = overrides.get('callback') or os.environ.get('LIFECYCLE_CALLBACK') or DEFAULT_CALLBACK

    region = overrides.get('region') or os.environ.get('AWS_REGION', 'us-east-1')
    sso_profile = overrides.get('sso_profile') or os.environ.get('SSO_PROFILE')

    return Config(
        queue_url=queue_url,
        autoscaling_group_name=autoscaling_group_name,
        callback=callback,
        region=region,
        sso_profile=sso_profile
    )
