"""Bridge between click's synchronous callbacks and the async gateway."""

import asyncio
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any


def coro[T](f: Callable[..., Awaitable[T]]) -> Callable[..., T]:
    """Run an async click command to completion on a fresh event loop.

    Place it below the ``@command``/``@option`` decorators so click sees the
    wrapped signature. ``SystemExit`` raised inside the command propagates
    unchanged, which keeps the storage commands' exit codes intact.
    """

    @wraps(f)
    def run_command(*args: Any, **kwargs: Any) -> T:
        return asyncio.run(f(*args, **kwargs))

    return run_command
