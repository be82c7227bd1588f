"""
Pydantic models for the outcome of an upload request.
"""

from __future__ import annotations

from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field


class UploadFailure(BaseModel):
    """A failed upload step: the HTTP status and the text sent to the client."""

    status_code: int = Field(..., ge=400, le=599)
    message: str

    @classmethod
    def invalid_method(cls) -> UploadFailure:
        return cls(status_code=400, message="invalid method")

    @classmethod
    def from_exception(cls, exc: BaseException) -> UploadFailure:
        """Server-side failure carrying the exception's description."""
        return cls(status_code=500, message=str(exc) or type(exc).__name__)

    def to_response(self) -> PlainTextResponse:
        return PlainTextResponse(self.message, status_code=self.status_code)


class UploadReceipt(BaseModel):
    """A completed upload."""

    upload_id: int = Field(..., ge=0)
    size_bytes: int = Field(..., ge=0)

    def to_response(self) -> PlainTextResponse:
        return PlainTextResponse(str(self.upload_id), status_code=200)
