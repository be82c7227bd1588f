"""
Process-wide upload context.

One instance is created per application and handed to every request
handler.  It owns the identifier sequence shared by all in-flight uploads.
"""

from __future__ import annotations

import itertools


class UploadContext:
    """Shared state of the upload pipeline.

    ``allocate`` is the only mutation.  It advances an ``itertools.count``
    with a single ``next()`` call, which runs as one C-level step and never
    interleaves with another caller, so identifiers stay unique under any
    number of concurrent threads or tasks without a lock.
    """

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError(f"start must be non-negative, got {start}")
        self._ids = itertools.count(start)

    def allocate(self) -> int:
        """Return the next upload identifier (0, 1, 2, ...)."""
        return next(self._ids)
