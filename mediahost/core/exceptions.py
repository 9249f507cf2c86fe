"""
Exception Taxonomy and Error-Handler Integration

Every failure the library reports is a MediaHostError subclass carrying the
operation name and target id as context. register_exception_handlers()
lets a host FastAPI application turn them into structured JSON responses.
"""

import traceback
from typing import Optional, Dict, Any
from datetime import datetime
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mediahost.core.logging import get_logger, operation_var, target_id_var

logger = get_logger(__name__)


# =============================================================================
# Custom Exceptions
# =============================================================================

class MediaHostError(Exception):
    """Base exception for the media host library."""

    def __init__(
        self,
        message: str,
        code: int = 500,
        operation: Optional[str] = None,
        target_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.operation = operation or operation_var.get()
        self.target_id = target_id or target_id_var.get()
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "code": self.code,
            "operation": self.operation,
            "target_id": self.target_id,
            "details": self.details,
        }


class InvalidInputError(MediaHostError):
    """Raised when a local argument is unusable (e.g. an empty buffer)."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code=400, **kwargs)


class UploadFailedError(MediaHostError):
    """Raised when the media host rejects or fails an upload."""

    def __init__(self, message: str, http_status: Optional[int] = None, **kwargs):
        super().__init__(message, code=502, **kwargs)
        self.details["http_status"] = http_status


class DeletionFailedError(MediaHostError):
    """Raised when the media host fails a destroy call."""

    def __init__(self, message: str, http_status: Optional[int] = None, **kwargs):
        super().__init__(message, code=502, **kwargs)
        self.details["http_status"] = http_status


class MissingUrlError(MediaHostError):
    """Raised when an upload response carries no secure URL."""

    def __init__(self, message: str = "No secure_url returned from media host upload", **kwargs):
        super().__init__(message, code=502, **kwargs)


class RecordNotFoundError(MediaHostError):
    """Raised when no persisted record matches the given id."""

    def __init__(self, record_type: str, record_id: Any, **kwargs):
        super().__init__(
            f"Record with ID {record_id} not found in {record_type}",
            code=404,
            target_id=str(record_id),
            **kwargs
        )
        self.details["record_type"] = record_type
        self.details["record_id"] = str(record_id)


class RecordUpdateError(MediaHostError):
    """
    Raised when a record update fails after the upload already succeeded.

    The uploaded asset is left in place; details["public_id"] names it so
    the caller can clean up.
    """

    def __init__(self, message: str, record_type: str, public_id: Optional[str] = None, **kwargs):
        super().__init__(message, code=422, **kwargs)
        self.details["record_type"] = record_type
        self.details["public_id"] = public_id


# =============================================================================
# FastAPI Integration
# =============================================================================

def _error_response(exc: MediaHostError) -> JSONResponse:
    content = exc.to_dict()
    content["timestamp"] = datetime.utcnow().isoformat() + "Z"
    return JSONResponse(status_code=exc.code, content=content)


def register_exception_handlers(app: FastAPI):
    """Register media host exception handlers with a FastAPI app."""

    @app.exception_handler(MediaHostError)
    async def media_host_exception_handler(request: Request, exc: MediaHostError):
        logger.error(
            "media_host_exception",
            error=exc.message,
            code=exc.code,
            operation=exc.operation,
            target_id=exc.target_id,
            details=exc.details,
            path=str(request.url.path)
        )
        return _error_response(exc)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=str(request.url.path),
            traceback=traceback.format_exc()
        )

        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "code": 500,
                "timestamp": datetime.utcnow().isoformat() + "Z"
            }
        )
