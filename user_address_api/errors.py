from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException


class ApiError(HTTPException):
    """HTTPException rendered as ``{"message": ..., "error": ...}``."""

    status_code_default = 500
    message_default = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, error: Optional[str] = None) -> None:
        self.message = message or self.message_default
        self.error = error
        super().__init__(self.status_code_default, self.message)

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message}
        if self.error:
            body["error"] = self.error
        return body


class BadRequest(ApiError):
    status_code_default = 400
    message_default = "Bad request"


class ValidationFailed(ApiError):
    status_code_default = 400
    message_default = "Validation failed"


class DuplicateAddress(ApiError):
    status_code_default = 409
    message_default = "An identical address already exists for this user"
    code = "DUPLICATE_ADDRESS"

    def __init__(self) -> None:
        super().__init__(error=self.code)


class Unauthorized(ApiError):
    status_code_default = 401
    message_default = "Unauthorized"

    def __init__(self, reason: str = "") -> None:
        # reason is for logs only and never rendered
        self.reason = reason
        super().__init__()


class StorageError(ApiError):
    status_code_default = 500
    message_default = "Internal server error"

    def __init__(self, raw: str = "") -> None:
        super().__init__(error=raw or None)
