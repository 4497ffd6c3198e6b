import asyncio
import threading
from typing import Any, Awaitable, Callable, Iterable, TypeVar

T = TypeVar("T")

_loop: asyncio.AbstractEventLoop | None = None
_loop_thread: threading.Thread | None = None
_loop_lock = threading.Lock()


def _ensure_loop() -> asyncio.AbstractEventLoop:
    global _loop, _loop_thread
    with _loop_lock:
        if _loop and not _loop.is_closed():
            return _loop

        _loop = asyncio.new_event_loop()

        def _run_loop():
            asyncio.set_event_loop(_loop)
            _loop.run_forever()

        _loop_thread = threading.Thread(
            target=_run_loop, name="ghostpanel-loop", daemon=True
        )
        _loop_thread.start()
        return _loop


def run_async(func: Callable[..., Any], *args, **kwargs):
    return asyncio.to_thread(func, *args, **kwargs)


def run_sync(afunc: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
    loop = _ensure_loop()

    coro = afunc(*args, **kwargs)
    future = asyncio.run_coroutine_threadsafe(coro, loop)
    return future.result()


async def bounded(
    semaphore: asyncio.Semaphore,
    afunc: Callable[..., Awaitable[T]],
    *args,
    **kwargs,
) -> T:
    async with semaphore:
        return await afunc(*args, **kwargs)


async def gather_settled(
    awaitables: Iterable[Awaitable[T]],
) -> list[T | Exception]:
    """Await all, returning exceptions in place of results.

    Anything that is not an `Exception` (cancellation, interrupts) is
    re-raised rather than collected.
    """
    outcomes = await asyncio.gather(*awaitables, return_exceptions=True)
    for outcome in outcomes:
        if isinstance(outcome, BaseException) and not isinstance(
            outcome, Exception
        ):
            raise outcome
    return outcomes
