import asyncio
import functools
import time

from .logger import logger


def time_it(func):
    """Log how long a sync or async function took."""
    if asyncio.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                logger.debug(f"⏱️ {func.__qualname__} took {time.perf_counter() - start:.3f}s")

        return async_wrapper

    @functools.wraps(func)
    def sync_wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            logger.debug(f"⏱️ {func.__qualname__} took {time.perf_counter() - start:.3f}s")

    return sync_wrapper
