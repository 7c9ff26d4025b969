"""
Cooperative cancellation for reconciliation calls.
"""
import time
from typing import Optional

from mysql_operator.exceptions import ReconcileCancelledError


class CancelToken:
    """
    Cancellation flag with an optional deadline.

    The reconciler checks the token between resource syncs, never in the
    middle of one.
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Seconds from now after which the token counts as cancelled
        """
        self._cancelled = False
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancelled or self.expired

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise ReconcileCancelledError("Reconciliation cancelled")
        if self.expired:
            raise ReconcileCancelledError("Reconciliation deadline exceeded")
