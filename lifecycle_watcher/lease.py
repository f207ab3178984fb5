"""
Background renewal of a message's visibility lease.

While a decision callback runs, the message it belongs to must stay invisible
to other consumers. LeaseRenewer resets the visibility timeout on a fixed
interval, ahead of expiry, until it is stopped or a renewal request fails.
"""

import logging
import threading
from typing import Optional

from lifecycle_watcher.queue import change_message_visibility

SAFETY_MARGIN_SECONDS = 10
STOP_JOIN_TIMEOUT = 1.0

log = logging.getLogger(__name__)


def renewal_interval(visibility_timeout: int) -> int:
    """
    Compute how often the lease must be renewed.

    Args:
        visibility_timeout: The queue's visibility timeout in seconds

    Returns:
        int: Interval in seconds, 0 when renewal is disabled
    """
    if visibility_timeout <= 0:
        return 0
    if visibility_timeout < SAFETY_MARGIN_SECONDS:
        interval = visibility_timeout // 2
    else:
        interval = visibility_timeout - SAFETY_MARGIN_SECONDS
    # Timeouts of 1s and 10s would otherwise give a zero tick
    return max(interval, 1)


class LeaseRenewer:
    """
    Periodically extends the visibility timeout of one in-flight message.

    The first failed renewal ends the background thread. The failure is kept
    on ``error`` and logged; it never interrupts the callback being protected.
    """

    def __init__(self, sqs_client, queue_url: str, receipt_handle: str, visibility_timeout: int,
                 interval: Optional[float] = None, logger: logging.Logger = None):
        self._sqs_client = sqs_client
        self._queue_url = queue_url
        self._receipt_handle = receipt_handle
        self.visibility_timeout = visibility_timeout
        self.interval = renewal_interval(visibility_timeout) if interval is None else interval
        self._logger = logger or log
        self._stop_event = threading.Event()
        self._thread = None
        self.error = None
        self.renewals = 0

    @property
    def enabled(self) -> bool:
        return self.visibility_timeout > 0 and self.interval > 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> 'LeaseRenewer':
        if not self.enabled:
            self._logger.debug("Visibility timeout is 0, lease renewal disabled")
            return self
        if self._thread is not None:
            raise RuntimeError("LeaseRenewer already started")

        self._thread = threading.Thread(target=self._run, name="lease_renewer", daemon=True)
        self._thread.start()
        self._logger.debug(f"Renewing lease every {self.interval}s for {self.visibility_timeout}s")
        return self

    def stop(self, timeout: float = STOP_JOIN_TIMEOUT) -> None:
        """
        Signal the renewal thread to exit.

        A renewal request already in flight is allowed to finish; the join is
        bounded by ``timeout``.
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                change_message_visibility(self._sqs_client, self._queue_url, self._receipt_handle,
                                          self.visibility_timeout)
            except Exception as e:
                self.error = e
                if self._stop_event.is_set():
                    # Lease no longer needed, the message may already be deleted
                    self._logger.debug(f"Lease renewal failed after stop: {e}")
                else:
                    self._logger.warning(f"Lease renewal failed, message may be redelivered: {e}")
                return
            self.renewals += 1
            self._logger.debug(f"Lease renewed for {self.visibility_timeout}s (renewal #{self.renewals})")

    def __enter__(self) -> 'LeaseRenewer':
        return self.start()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.stop()
