"""
Debounce combinator for "run after the input settles" lookups.
"""
import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Optional


class Debouncer:
    """Run `fn` once the calls stop arriving for `delay` seconds.

    A newer `trigger` cancels both a pending and an in-flight run, so a slow
    stale result can never land after a newer one.
    """

    def __init__(self, fn: Callable[..., Awaitable[Any]], delay: float):
        self.fn = fn
        self.delay = delay
        self._task: Optional[asyncio.Task] = None

    async def _run(self, args: tuple, kwargs: dict) -> Any:
        await asyncio.sleep(self.delay)
        return await self.fn(*args, **kwargs)

    def trigger(self, *args, **kwargs) -> asyncio.Task:
        """Schedule a run with these arguments, superseding the previous one."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(args, kwargs))
        return self._task

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    async def latest(self) -> Any:
        """Await the current run; None when nothing was triggered."""
        if self._task is None:
            return None
        return await self._task

    def cancel(self) -> None:
        """Cancel the current run, if any."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def aclose(self) -> None:
        """Cancel and wait for the current run to unwind."""
        task = self._task
        self.cancel()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
