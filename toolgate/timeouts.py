"""Timeout and cancellation race for outbound calls."""

import asyncio
from typing import Awaitable, Callable, TypeVar

from .exceptions import OperationCancelledError, OperationTimeoutError

T = TypeVar("T")


async def run_with_timeout(
    operation: Callable[[], Awaitable[T]],
    *,
    timeout_seconds: float,
    timeout_message: str,
    cancel_event: asyncio.Event | None = None,
) -> T:
    """Run an operation raced against a timer and an optional cancel signal.

    Whichever of the timer or the caller's event fires first cancels the
    in-flight operation. Pending waiters are cancelled and awaited on every
    exit path, so nothing keeps running in the background.

    Args:
        operation: Zero-argument coroutine factory performing the request.
        timeout_seconds: Fixed per-call timeout.
        timeout_message: Message for the timeout error, naming the operation.
        cancel_event: Optional caller-owned cancellation signal.

    Returns:
        The operation's result.

    Raises:
        OperationTimeoutError: If the timer fires first.
        OperationCancelledError: If the caller's event fires first.
    """
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError()

    task = asyncio.ensure_future(operation())
    waiters: set[asyncio.Future] = {task}
    cancel_waiter: asyncio.Future | None = None
    if cancel_event is not None:
        cancel_waiter = asyncio.ensure_future(cancel_event.wait())
        waiters.add(cancel_waiter)

    try:
        done, _ = await asyncio.wait(
            waiters,
            timeout=timeout_seconds,
            return_when=asyncio.FIRST_COMPLETED,
        )
        if task in done:
            return task.result()
        if cancel_waiter is not None and cancel_waiter in done:
            raise OperationCancelledError()
        raise OperationTimeoutError(timeout_message, timeout_seconds)
    finally:
        pending = [waiter for waiter in waiters if not waiter.done()]
        for waiter in pending:
            waiter.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
