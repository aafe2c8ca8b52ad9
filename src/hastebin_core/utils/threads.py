"""Thread pool for blocking I/O (filesystem, boto3)."""

import asyncio
import atexit
import functools
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, TypeVar

T = TypeVar("T")

# Thread pool for blocking calls - configurable via environment
_max_workers = int(os.environ.get("HASTEBIN_IO_WORKERS", "16"))
_executor = ThreadPoolExecutor(max_workers=_max_workers)

# Ensure executor is cleaned up on process exit
atexit.register(_executor.shutdown, wait=False)


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking callable on the shared thread pool.

    Args:
        func: Callable to run
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Whatever func returns
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(_executor, functools.partial(func, *args, **kwargs))
