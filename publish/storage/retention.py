"""
Delayed expiry of stored uploads.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from pathlib import Path

import anyio.to_thread

logger = logging.getLogger(__name__)


class RetentionScheduler:
    """Deletes ``<data_dir>/<upload_id>`` a fixed delay after the upload finished.

    Timers live on the running event loop and are only touched from it; the
    deletion itself runs in a worker thread.  Pending deletions are dropped
    on shutdown.
    """

    def __init__(self, data_dir: Path, delay_s: float) -> None:
        if delay_s < 0:
            raise ValueError(f"retention delay must be non-negative, got {delay_s}")
        self.data_dir = Path(data_dir)
        self.delay_s = delay_s
        self._pending: dict[int, asyncio.TimerHandle] = {}
        self._running: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule(self, upload_id: int) -> None:
        loop = asyncio.get_running_loop()
        previous = self._pending.pop(upload_id, None)
        if previous is not None:
            previous.cancel()
        self._pending[upload_id] = loop.call_later(self.delay_s, self._start_expiry, upload_id)

    def _start_expiry(self, upload_id: int) -> None:
        self._pending.pop(upload_id, None)
        task = asyncio.get_running_loop().create_task(self._expire(upload_id))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _expire(self, upload_id: int) -> None:
        path = self.data_dir / str(upload_id)
        try:
            await anyio.to_thread.run_sync(functools.partial(path.unlink, missing_ok=True))
        except OSError as exc:
            logger.error("Could not expire upload %d (%s): %s", upload_id, path, exc)
            return
        logger.info("Expired upload %d", upload_id)

    def cancel_all(self) -> None:
        if self._pending:
            logger.info("Dropping %d pending upload expiries", len(self._pending))
        for handle in self._pending.values():
            handle.cancel()
        for task in self._running:
            task.cancel()
        self._pending.clear()
