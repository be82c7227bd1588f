"""
Request dependencies resolving the objects shared by all uploads.

They are created once by ``create_app`` and kept on ``app.state``.
"""

from __future__ import annotations

from fastapi import Request

from publish.core.context import UploadContext
from publish.storage.retention import RetentionScheduler
from publish.storage.sinks import SinkFactory


def get_context(request: Request) -> UploadContext:
    return request.app.state.context


def get_sinks(request: Request) -> SinkFactory:
    return request.app.state.sinks


def get_retention(request: Request) -> RetentionScheduler | None:
    return request.app.state.retention
