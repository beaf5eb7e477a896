"""Thread pool for blocking vision SDK calls.

Architecture:
    FastAPI (async) -> ThreadPoolExecutor(N) -> boto3 DetectLabels

boto3 is synchronous; running it in the executor keeps the event loop free.
There is no admission limit: extra calls wait in the executor queue.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

    from imagelabeler.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DetectorPool:
    """Runs synchronous detector calls off the event loop."""

    def __init__(self, settings: Settings) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=settings.max_workers,
            thread_name_prefix="vision-call",
        )
        self._in_flight: int = 0
        self._counter_lock = threading.Lock()

    async def run(self, func: Callable[..., T], *args: object) -> T:
        """Submit a synchronous function to the thread pool and await its result."""
        with self._counter_lock:
            self._in_flight += 1
        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(self._executor, func, *args)
        finally:
            with self._counter_lock:
                self._in_flight -= 1

    @property
    def in_flight(self) -> int:
        """Number of submitted calls that have not finished."""
        with self._counter_lock:
            return self._in_flight

    def shutdown(self) -> None:
        """Shut down the thread pool executor."""
        self._executor.shutdown(wait=True)
