"""
Error taxonomy for the HL7 processor.

Codec failures carry a structured error code so the HTTP layer and the logs
can report them consistently.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """
    Structured error codes.

    Format: {AREA}_{SPECIFIC_CODE}
    """

    PARSE_INVALID_SEGMENT = "PARSE_001"
    PARSE_READ_FAILED = "PARSE_002"

    HTTP_NOT_FOUND = "HTTP_404"
    HTTP_METHOD_NOT_ALLOWED = "HTTP_405"
    HTTP_PAYLOAD_TOO_LARGE = "HTTP_413"
    HTTP_INVALID_BODY = "HTTP_422"


ERROR_MESSAGES = {
    ErrorCode.PARSE_INVALID_SEGMENT: "invalid segment format",
    ErrorCode.PARSE_READ_FAILED: "failed to read HL7 input",
    ErrorCode.HTTP_NOT_FOUND: "Not found",
    ErrorCode.HTTP_METHOD_NOT_ALLOWED: "Method not allowed",
    ErrorCode.HTTP_PAYLOAD_TOO_LARGE: "Request body too large",
    ErrorCode.HTTP_INVALID_BODY: "Invalid request body",
}


def get_error_message(code: ErrorCode) -> str:
    """Get standard error message for error code."""
    return ERROR_MESSAGES.get(code, f"Unknown error: {code.value}")


class HL7Error(Exception):
    """
    Base class for codec errors.

    Callers that only care whether a message could be handled catch this.
    """

    code: ErrorCode = ErrorCode.PARSE_INVALID_SEGMENT

    def __init__(self, detail: Optional[str] = None, code: Optional[ErrorCode] = None):
        if code is not None:
            self.code = code
        self.detail = detail or get_error_message(self.code)
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {"error_code": self.code.value, "message": self.detail}


class FormatError(HL7Error):
    """Raised when a segment chunk cannot be split into a type and fields."""

    code = ErrorCode.PARSE_INVALID_SEGMENT

    def __init__(self, detail: Optional[str] = None, segment_index: Optional[int] = None):
        super().__init__(detail)
        self.segment_index = segment_index

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.segment_index is not None:
            result["segment_index"] = self.segment_index
        return result


class ScanError(HL7Error):
    """Raised when the raw input cannot be read or decoded.

    The underlying exception is always chained as ``__cause__``.
    """

    code = ErrorCode.PARSE_READ_FAILED
