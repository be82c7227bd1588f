"""
Upload endpoint.

Accepts a POST with an arbitrary body on any path, assigns it the next
upload id, streams the body to storage under that id and answers with the
id as plain text.  Every failure is turned into a plain-text 400 or 500
response here and never escapes the request.
"""

from __future__ import annotations

import logging

import anyio
from fastapi import APIRouter, Depends, Request, Response
from starlette.requests import ClientDisconnect

from publish.api.dependencies import get_context, get_retention, get_sinks
from publish.core.context import UploadContext
from publish.models.schemas import UploadFailure, UploadReceipt
from publish.storage.retention import RetentionScheduler
from publish.storage.sinks import SinkFactory

logger = logging.getLogger(__name__)
router = APIRouter()

# Methods outside this list are answered by `reject_unrouted_method`.
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


async def handle_upload(
    context: UploadContext,
    sinks: SinkFactory,
    request: Request,
    retention: RetentionScheduler | None = None,
) -> Response:
    """Run one request through validate → allocate → open → stream → respond."""
    result = await _store_upload(context, sinks, request)

    if isinstance(result, UploadFailure):
        return result.to_response()

    if retention is not None:
        retention.schedule(result.upload_id)
    return result.to_response()


async def _store_upload(
    context: UploadContext,
    sinks: SinkFactory,
    request: Request,
) -> UploadReceipt | UploadFailure:
    if request.method != "POST":
        logger.warning("Rejected %s %s: invalid method", request.method, request.url.path)
        return UploadFailure.invalid_method()

    upload_id = context.allocate()

    try:
        sink = await sinks.open(upload_id)
    except OSError as exc:
        logger.error("Upload %d: could not open sink: %s", upload_id, exc)
        return UploadFailure.from_exception(exc)

    size = 0
    completed = False
    try:
        async for chunk in request.stream():
            if chunk:
                await sink.write(chunk)
                size += len(chunk)
        await sink.aclose()
        completed = True
    except (OSError, ClientDisconnect) as exc:
        logger.error("Upload %d failed after %d bytes: %r", upload_id, size, exc)
        return UploadFailure.from_exception(exc)
    finally:
        if not completed:
            with anyio.CancelScope(shield=True):
                await sink.abort()

    logger.info("Upload %d stored (%d bytes)", upload_id, size)
    return UploadReceipt(upload_id=upload_id, size_bytes=size)


async def reject_unrouted_method(request: Request, exc: Exception) -> Response:
    """405 handler: methods the router does not list are invalid uploads too."""
    logger.warning("Rejected %s %s: invalid method", request.method, request.url.path)
    return UploadFailure.invalid_method().to_response()


@router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
async def upload(
    request: Request,
    context: UploadContext = Depends(get_context),
    sinks: SinkFactory = Depends(get_sinks),
    retention: RetentionScheduler | None = Depends(get_retention),
) -> Response:
    return await handle_upload(context, sinks, request, retention)
