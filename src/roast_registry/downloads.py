# SPDX-License-Identifier: MIT
"""Background download counting."""

from __future__ import annotations

import asyncio
import logging

from .middleware.errors import PackageNotFoundError
from .store.base import PackageStore

logger = logging.getLogger(__name__)

RETRY_DELAY = 0.05


class DownloadCounter:
    """Dispatches download-counter increments off the response path.

    Each increment runs as its own task. A failed increment is retried
    once and then logged; counts are eventually consistent.
    """

    def __init__(self, store: PackageStore, retries: int = 1, retry_delay: float = RETRY_DELAY) -> None:
        self.store = store
        self.retries = retries
        self.retry_delay = retry_delay
        self._tasks: set[asyncio.Task] = set()

    def schedule(self, name: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._increment(name))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _increment(self, name: str) -> bool:
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                await self.store.increment_downloads(name)
                return True
            except PackageNotFoundError:
                logger.warning("Dropped download count for unknown package %s", name)
                return False
            except Exception:
                if attempt == attempts:
                    logger.exception("Failed to record download for %s after %d attempts", name, attempt)
                    return False
                logger.warning("Retrying download count for %s", name)
                await asyncio.sleep(self.retry_delay)
        return False

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every scheduled increment to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
