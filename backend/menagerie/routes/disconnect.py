"""
Menagerie Backend: Client Disconnect Cancellation
==================================================

What:  Runs a request's work while watching for the client to go away.
Why:   Without it, a statement keeps its pooled connection busy until it
       finishes even though nobody is waiting for the answer.
How:   The work and a watcher polling `Request.is_disconnected()` run in one
       anyio task group, the same shape as Starlette's StreamingResponse
       disconnect listener. Whichever finishes first cancels the group's
       scope. `is_disconnected()` opens its own cancel scope, so stopping the
       watcher must go through anyio; a bare `Task.cancel()` is absorbed
       there and the watcher keeps polling.

       Cancelling the work unwinds the gateway's `async with engine.begin()`
       and returns the connection to the pool.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, TypeVar

import anyio
from starlette.requests import Request

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ClientDisconnected(Exception):
    """The client disconnected before the work finished; the work was cancelled."""


async def cancel_on_disconnect(
    request: Request, work: Callable[[], Awaitable[T]], poll_interval: float = 0.25
) -> T:
    """
    Run `work()`, cancelling it if the client disconnects first.

    Exceptions raised by `work` propagate unchanged. A watcher that fails
    (no receive channel, say) stops watching and lets the work finish.

    Raises:
        ClientDisconnected: the client went away and `work` was cancelled.
    """
    outcome: Dict[str, Any] = {}

    async with anyio.create_task_group() as tg:

        async def run_work() -> None:
            try:
                outcome["result"] = await work()
            except Exception as exc:
                outcome["error"] = exc
            tg.cancel_scope.cancel()

        async def watch() -> None:
            try:
                while not await request.is_disconnected():
                    await anyio.sleep(poll_interval)
            except Exception as exc:
                logger.debug("Disconnect watcher failed: %r", exc)
                return
            outcome["disconnected"] = True
            tg.cancel_scope.cancel()

        tg.start_soon(run_work)
        tg.start_soon(watch)

    if "error" in outcome:
        raise outcome["error"]
    if "result" in outcome:
        return outcome["result"]
    raise ClientDisconnected()
