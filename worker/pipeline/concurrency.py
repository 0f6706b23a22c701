"""All-succeed-or-abort fan-out for pipeline stages."""

import asyncio
from collections.abc import Awaitable
from typing import Any


async def gather_or_abort(*aws: Awaitable[Any]) -> list[Any]:
    """
    Run awaitables concurrently and return their results in argument order.

    As soon as one fails, the others are cancelled and awaited so nothing
    keeps running in the background, and the failure is re-raised. When
    several have already failed by then, the earliest argument wins. If the
    caller is cancelled, every child is cancelled too.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        await _cancel_all(tasks)
        raise

    if pending:
        await _cancel_all(pending)

    for task in tasks:
        if task in done and not task.cancelled() and task.exception() is not None:
            raise task.exception()  # type: ignore[misc]

    # A child cancelled from outside surfaces as cancellation of the whole group
    for task in tasks:
        if task.cancelled():
            raise asyncio.CancelledError()

    return [task.result() for task in tasks]


async def _cancel_all(tasks: Any) -> None:
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
