import logging
from typing import Callable, NamedTuple, Optional, Tuple, Type

from botocore.exceptions import BotoCoreError, ClientError

from lifecycle_watcher.errors import LifecycleCallbackError
from lifecycle_watcher.messages import LifecycleEvent

# Faults a callback may raise to signal a business failure. Anything else is a
# programming error and is re-raised.
BUSINESS_ERRORS = (LifecycleCallbackError, ClientError, BotoCoreError, OSError)

# Returns True to CONTINUE the transition, False to ABANDON it. Any other
# return value is a TypeError.
LifecycleEventCallback = Callable[[LifecycleEvent], bool]

log = logging.getLogger(__name__)


class Decision(NamedTuple):
    """Outcome of a decision callback."""
    should_continue: bool
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def result(self) -> str:
        """Lifecycle action result sent to the autoscaling API."""
        return 'CONTINUE' if self.should_continue else 'ABANDON'


def run_callback(callback: LifecycleEventCallback, event: LifecycleEvent,
                 business_errors: Tuple[Type[BaseException], ...] = BUSINESS_ERRORS,
                 logger: logging.Logger = None) -> Decision:
    """
    Invoke a decision callback with fault isolation.

    Args:
        callback: User decision function, returns True to continue the transition
        event: The lifecycle event to decide on
        business_errors: Exception types converted into a failed Decision
        logger: Optional logger

    Returns:
        Decision: The callback's decision, or a failed Decision for a business error

    Raises:
        Exception: Any exception not listed in business_errors, unchanged
    """
    logger = logger or log
    try:
        should_continue = callback(event)
    except business_errors as e:
        logger.warning(f"Callback failed for instance {event.ec2_instance_id}: {e}")
        return Decision(should_continue=False, error=e)
    except Exception:
        logger.critical(f"Unrecoverable fault in callback for instance {event.ec2_instance_id}",
                        exc_info=True)
        raise

    if not isinstance(should_continue, bool):
        logger.critical(f"Callback for instance {event.ec2_instance_id} returned {should_continue!r}, expected a bool")
        raise TypeError(f"Decision callback must return a bool, got {type(should_continue).__name__}")

    return Decision(should_continue=should_continue)
