import importlib
import logging

from lifecycle_watcher.messages import LifecycleEvent
from lifecycle_watcher.sandbox import LifecycleEventCallback


def resolve_callback(path: str) -> LifecycleEventCallback:
    """
    Import a decision callback from a 'package.module:function' path.

    Args:
        path: Dotted module path and attribute name separated by a colon

    Returns:
        The callable found at path

    Raises:
        ValueError: If the path is malformed
        TypeError: If the attribute is not callable
    """
    module_name, sep, attribute = (path or '').partition(':')
    if not sep or not module_name or not attribute:
        raise ValueError(f"Callback must look like 'package.module:function', got {path!r}")

    target = importlib.import_module(module_name)
    for name in attribute.split('.'):
        target = getattr(target, name)

    if not callable(target):
        raise TypeError(f"Callback {path} is not callable")
    return target


def log_and_continue(event: LifecycleEvent) -> bool:
    """Default callback: record the event and let the transition proceed."""
    logging.info(f"{event.kind} {event.ec2_instance_id} in {event.auto_scaling_group_name}, continuing")
    return True
