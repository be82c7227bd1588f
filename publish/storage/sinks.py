"""
Storage sinks for uploaded payloads.

A sink is a per-upload, append-only byte destination that becomes durable
once closed.  The request pipeline only depends on the two protocols below,
so swapping the local filesystem for another medium means providing a new
``SinkFactory``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

import anyio
import anyio.to_thread
from anyio import AsyncFile

logger = logging.getLogger(__name__)


class Sink(Protocol):
    async def write(self, chunk: bytes) -> None: ...

    async def aclose(self) -> None:
        """Flush and persist everything written so far."""
        ...

    async def abort(self) -> None:
        """Release the sink, keeping whatever was already written."""
        ...


class SinkFactory(Protocol):
    async def open(self, upload_id: int) -> Sink:
        """Create a fresh sink for ``upload_id``.  Raises ``OSError`` on failure."""
        ...


class FileSink:
    """Sink backed by one file; blocking file calls run in a worker thread."""

    def __init__(self, path: Path, file: AsyncFile[bytes]) -> None:
        self.path = path
        self._file = file
        self._closed = False

    async def write(self, chunk: bytes) -> None:
        await self._file.write(chunk)

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._file.flush()
            await anyio.to_thread.run_sync(os.fsync, self._file.wrapped.fileno())
        finally:
            await self._file.aclose()

    async def abort(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._file.aclose()
        except OSError as exc:
            logger.warning("Dropping unflushed data for %s: %s", self.path, exc)


class FileSinkFactory:
    """Writes each upload to ``<data_dir>/<upload_id>``."""

    def __init__(self, data_dir: Path, buffer_bytes: int = 64 * 1024) -> None:
        self.data_dir = Path(data_dir)
        self.buffer_bytes = buffer_bytes

    def path_for(self, upload_id: int) -> Path:
        return self.data_dir / str(upload_id)

    def ensure_data_dir(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)

    async def open(self, upload_id: int) -> FileSink:
        path = self.path_for(upload_id)
        file = await anyio.open_file(path, "wb", buffering=self.buffer_bytes)
        logger.debug("Opened sink %s", path)
        return FileSink(path, file)
