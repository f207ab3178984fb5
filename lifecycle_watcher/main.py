import logging
import signal
import threading
from typing import Dict, Any

from lifecycle_watcher.aws.wrapper import AWSWrapper
from lifecycle_watcher.callbacks import resolve_callback
from lifecycle_watcher.config import load_config, Config
from lifecycle_watcher.discovery import lifecycle_event_queue_url
from lifecycle_watcher.watcher import watch_lifecycle_events


def resolve_queue_url(aws_wrapper: AWSWrapper, config: Config) -> str:
    """
    Use the configured queue URL, or discover it from the group's lifecycle hooks.

    Args:
        aws_wrapper: AWS API wrapper instance
        config: Configuration object

    Returns:
        str: The lifecycle event queue URL
    """
    if config.queue_url:
        return config.queue_url

    logging.info(f"Discovering lifecycle event queue for group {config.autoscaling_group_name}")
    return lifecycle_event_queue_url(aws_wrapper, config.autoscaling_group_name)


def install_signal_handlers(stop_event: threading.Event) -> None:
    """Stop the watch loop after the current receive on SIGTERM or SIGINT."""
    if threading.current_thread() is not threading.main_thread():
        return

    def _handle(signum, frame):
        logging.info(f"Received signal {signum}, stopping after the current message")
        stop_event.set()

    signal.signal(signal.SIGTERM, _handle)
    signal.signal(signal.SIGINT, _handle)


def run(overrides: Dict[str, Any] = None, stop_event: threading.Event = None) -> None:
    """
    Watch the configured lifecycle event queue until stopped or a fatal error occurs.

    Args:
        overrides: Optional configuration overrides
        stop_event: Optional event used to request a graceful stop

    Raises:
        ValueError: If neither a queue URL nor an autoscaling group is configured
    """
    config = load_config(overrides)

    if not config.queue_url and not config.autoscaling_group_name:
        logging.error("LIFECYCLE_QUEUE_URL or AUTOSCALING_GROUP_NAME must be configured")
        raise ValueError("LIFECYCLE_QUEUE_URL or AUTOSCALING_GROUP_NAME must be configured")

    callback = resolve_callback(config.callback)

    aws_wrapper = AWSWrapper(
        sso_profile_name=config.sso_profile,
        region_name=config.region
    )
    queue_url = resolve_queue_url(aws_wrapper, config)

    if stop_event is None:
        stop_event = threading.Event()
        install_signal_handlers(stop_event)

    logging.info(f"Starting lifecycle watcher on {queue_url} with callback {config.callback}")
    watch_lifecycle_events(aws_wrapper, queue_url, callback, stop_event=stop_event)
