"""
Deadline / cancellation token threaded through repository operations
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Optional

from tasklist.utils.errors import OperationCancelledError

logger = logging.getLogger(__name__)


class Deadline:
    """
    Cancellation token with an optional time limit

    A single Deadline can be shared by several operations; the clock starts
    when the token is created, not when each operation starts.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        self._expires_at = None if timeout is None else time.monotonic() + timeout
        self._cancelled = asyncio.Event()

    def remaining(self) -> Optional[float]:
        """Seconds left before expiry, or None when there is no time limit"""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Trip the token; in-flight and later operations abort"""
        self._cancelled.set()

    def check(self) -> None:
        if self.cancelled:
            raise OperationCancelledError("operation cancelled")
        if self.expired:
            raise OperationCancelledError(f"deadline of {self.timeout}s exceeded")

    async def run(self, awaitable: Awaitable[Any]) -> Any:
        """
        Await one unit of store work under this deadline

        Raises OperationCancelledError if the token is cancelled or the time
        limit passes first. The work's task is cancelled in that case and
        awaited, so a pending pool acquire is abandoned, asyncpg aborts the
        in-flight query on the server, and an open transaction is rolled back
        before this returns.
        """
        try:
            self.check()
        except OperationCancelledError:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise

        statement = asyncio.ensure_future(awaitable)
        cancel_signal = asyncio.ensure_future(self._cancelled.wait())
        try:
            done, _ = await asyncio.wait(
                {statement, cancel_signal},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            statement.cancel()
            cancel_signal.cancel()
            raise

        cancel_signal.cancel()
        if statement in done:
            return statement.result()

        statement.cancel()
        try:
            await statement
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug(f"Statement failed while being cancelled: {e}")

        self.check()
        # Timer fired a hair before the monotonic clock crossed the limit
        raise OperationCancelledError(f"deadline of {self.timeout}s exceeded")
