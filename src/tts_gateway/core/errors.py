"""
Conversion Error Taxonomy.

Every failure that crosses the conversion boundary is one of:

    ValidationError  (INVALID_INPUT, 400)  - missing/empty text, bad upload
    EngineFailure    (SYNTHESIS_FAILED, 500) - backend rejected, unreachable
                                               or returned malformed audio
    StorageFailure   (STORAGE_FAILED, 500) - artifact/upload write failed

None of these is retried. The API layer maps ``status_code`` straight onto
the HTTP response and serializes ``to_dict()`` as the body:

    {"ok": false, "error": "SYNTHESIS_FAILED", "message": "..."}
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class ErrorCode:
    """Standardized error codes returned in API error bodies."""
    INVALID_INPUT = "INVALID_INPUT"         # Bad request data
    SYNTHESIS_FAILED = "SYNTHESIS_FAILED"   # Engine error
    STORAGE_FAILED = "STORAGE_FAILED"       # Filesystem write error
    INTERNAL_ERROR = "INTERNAL_ERROR"       # Unexpected error


class ConversionError(Exception):
    """
    Base exception for gateway errors.

    Attributes:
        message: Human-readable error message.
        code: Error code from ErrorCode class.
        details: Optional dictionary with additional context.
        status_code: HTTP status the API layer should answer with.
    """
    status_code = 500

    def __init__(self, message: str, code: str = ErrorCode.INTERNAL_ERROR, details: Optional[Dict] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to standardized error response dict for API."""
        result: Dict[str, Any] = {
            "ok": False,
            "error": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(ConversionError):
    """Raised when caller input is missing or unacceptable."""
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.INVALID_INPUT, details)


class EngineFailure(ConversionError):
    """Raised when a synthesis backend fails; the cause is chained."""
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.SYNTHESIS_FAILED, details)

    @classmethod
    def wrap(cls, engine: str, exc: BaseException) -> "EngineFailure":
        """Build an EngineFailure carrying the underlying message."""
        return cls(
            f"{engine} synthesis failed: {exc}",
            {"engine": engine, "error_type": type(exc).__name__},
        )


class StorageFailure(ConversionError):
    """Raised when writing to the audio or uploads directory fails."""
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.STORAGE_FAILED, details)
