"""
Cooperative cancellation for in-flight requests.

A ``CancellationToken`` carries an optional deadline and can be cancelled
explicitly. The transport adapter races each round trip against its token
and reports which of the two ended it.
"""

import asyncio
import time
from typing import Awaitable, Optional, TypeVar

from accountapi_client.exceptions import DeadlineExceededError, RequestCancelledError

T = TypeVar("T")


class CancellationToken:
    """
    Deadline and cancellation signal threaded through a call.

    Example usage:
        ```python
        token = CancellationToken.with_timeout(2.5)
        response = await client.fetch(account_id, token=token)
        ```
    """

    def __init__(self, deadline: Optional[float] = None):
        """
        Args:
            deadline: Absolute deadline on the ``time.monotonic()`` clock,
                or None for no deadline
        """
        self._deadline = deadline
        self._cancelled = False
        self._event: Optional[asyncio.Event] = None

    @classmethod
    def background(cls) -> "CancellationToken":
        """A token that never expires and is never cancelled by itself."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancellationToken":
        """A token whose deadline is ``seconds`` from now."""
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline, never negative; None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self) -> None:
        """Abort every round trip currently guarded by this token."""
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    def raise_if_done(self) -> None:
        """Raise the matching transport error if the token already fired."""
        if self._cancelled:
            raise RequestCancelledError()
        if self.expired:
            raise DeadlineExceededError("context deadline exceeded")

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Await ``awaitable`` unless the token fires first.

        On cancellation or deadline the pending work is cancelled and awaited
        before the error is raised, so any resources it holds are released.

        Raises:
            RequestCancelledError: If ``cancel()`` was called
            DeadlineExceededError: If the deadline elapsed
        """
        task = asyncio.ensure_future(awaitable)
        if self._cancelled or self.expired:
            await _discard(task)
            self.raise_if_done()

        if self._event is None:
            self._event = asyncio.Event()
        waiter = asyncio.ensure_future(self._event.wait())

        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        except BaseException:
            await _discard(task)
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        await _discard(task)
        self.raise_if_done()
        # asyncio.wait timed out a hair before the monotonic clock caught up
        raise DeadlineExceededError("context deadline exceeded")


async def _discard(task: "asyncio.Future") -> None:
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
