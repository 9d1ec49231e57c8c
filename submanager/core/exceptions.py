# submanager/core/exceptions.py
"""Domain error taxonomy mapped to HTTP responses by the exception handlers."""

from typing import Dict, Optional


class AppError(Exception):
    """Base class for errors that are safe to show to the client."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, object]:
        return {"error": self.message}


class ValidationError(AppError):
    """Missing or malformed input; shown as an inline form error."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, fields: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.fields = fields or {}

    def to_dict(self) -> Dict[str, object]:
        body = super().to_dict()
        if self.fields:
            body["fields"] = self.fields
        return body


class DuplicateEntity(AppError):
    """Unique-constraint violation on name, phone or email."""

    status_code = 409
    default_message = "Duplicate entry"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, object]:
        body = super().to_dict()
        if self.field:
            body["fields"] = {self.field: self.message}
        return body


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(AppError):
    status_code = 403
    default_message = "Insufficient privileges"


class StorageError(AppError):
    """Backend connectivity or transaction failure; the caller may retry."""

    status_code = 500
    default_message = "A storage error occurred, please try again"
