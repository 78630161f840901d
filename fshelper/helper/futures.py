"""
FSHelper Future Adapters.

Turns blocking OS calls into awaitables and defines the handle
returned by watch operations.
Requires Python 3.11+.
"""

import asyncio
from collections.abc import Awaitable, Callable, Generator
from dataclasses import dataclass
from typing import Any, Generic, ParamSpec, TypeVar

T = TypeVar("T")
P = ParamSpec("P")


async def run_blocking(func: Callable[P, T], /, *args: P.args, **kwargs: P.kwargs) -> T:
    """
    Run a blocking call on the loop's default executor and await it.

    Every async one-shot operation goes through here, so the sync and
    async variants share the exact same resolution logic.
    """
    return await asyncio.to_thread(func, *args, **kwargs)


@dataclass(frozen=True)
class AbortableFuture(Generic[T]):
    """
    A pending single-shot result bundled with its cancel action.

    Calling ``abort()`` releases the underlying watch and stops further
    notifications. It does not resolve or reject ``future``: if abort
    happens before the first event, ``future`` stays pending forever,
    so race it against the abort instead of awaiting it afterwards.
    """

    future: asyncio.Future[T]
    abort: Callable[[], Awaitable[None]]

    def __await__(self) -> Generator[Any, None, T]:
        return self.future.__await__()

    def done(self) -> bool:
        return self.future.done()
