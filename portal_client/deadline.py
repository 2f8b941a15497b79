"""Per-attempt deadline and cancellation."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from .exceptions import RequestAbortedError, RequestTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AbortSignal:
    """
    Externally controlled cancellation signal.

    Aborting cancels whatever attempt is currently in flight; the request then
    fails with the abort reason instead of a timeout.
    """

    def __init__(self):
        self._aborted = False
        self._reason: Optional[BaseException] = None
        self._listeners: List[Callable[[], Any]] = []

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def reason(self) -> Optional[BaseException]:
        return self._reason

    def abort(self, reason: Optional[BaseException] = None) -> None:
        """Abort once; later calls are ignored."""
        if self._aborted:
            return
        self._aborted = True
        self._reason = reason if reason is not None else RequestAbortedError()
        for listener in list(self._listeners):
            listener()

    def add_listener(self, listener: Callable[[], Any]) -> Callable[[], None]:
        """Register a callback fired on abort. Returns a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def raise_if_aborted(self) -> None:
        if self._aborted:
            raise self._reason


async def run_with_deadline(
    attempt: Callable[[], Awaitable[T]],
    timeout_ms: int,
    signal: Optional[AbortSignal] = None,
) -> T:
    """
    Run one attempt under a deadline.

    Args:
        attempt: Coroutine factory performing the network call
        timeout_ms: Deadline in milliseconds, 0 disables it
        signal: Optional external abort signal

    Returns:
        The attempt's result

    Raises:
        RequestTimeoutError: The deadline expired and the attempt was cancelled
        BaseException: The signal's abort reason, unchanged
    """
    if signal is not None:
        signal.raise_if_aborted()

    loop = asyncio.get_running_loop()
    task = loop.create_task(attempt())
    expired = False

    def _expire() -> None:
        nonlocal expired
        expired = True
        task.cancel()

    timer = loop.call_later(timeout_ms / 1000.0, _expire) if timeout_ms else None
    remove_listener = signal.add_listener(task.cancel) if signal is not None else None

    try:
        return await task
    except asyncio.CancelledError:
        if expired:
            logger.debug(f"Attempt cancelled after {timeout_ms}ms deadline")
            raise RequestTimeoutError(timeout_ms=timeout_ms) from None
        if signal is not None and signal.aborted:
            raise signal.reason from None
        raise
    finally:
        if timer is not None:
            timer.cancel()
        if remove_listener is not None:
            remove_listener()
