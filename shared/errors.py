"""
Shared error handling for the Model Comments service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from .logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class CommentServiceException(Exception):
    """Base exception for the comments service."""

    status_code: int = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class InvalidIdentifierError(CommentServiceException):
    """Malformed model or namespace identifier."""

    def __init__(self, message: str = "Invalid identifier", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_IDENTIFIER", message, details)


class AuthenticationError(CommentServiceException):
    """No authenticated user is acting."""

    status_code = 401

    def __init__(self, message: str = "Authentication required", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_REQUIRED", message, details)


class ForbiddenError(CommentServiceException):
    """The acting user may not perform the operation."""

    status_code = 403

    def __init__(self, message: str = "Operation forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__("FORBIDDEN", message, details)


class DoesNotExistError(CommentServiceException):
    """A referenced resource does not exist."""

    status_code = 404
    code_name = "DOES_NOT_EXIST"

    def __init__(self, message: str = "Resource does not exist", details: Optional[Dict[str, Any]] = None):
        super().__init__(self.code_name, message, details)


class NamespaceNotFoundError(DoesNotExistError):
    """Namespace cannot be resolved to a workspace."""

    code_name = "NAMESPACE_NOT_FOUND"


class ModelNotFoundError(DoesNotExistError):
    """Model is not present in its workspace."""

    code_name = "MODEL_NOT_FOUND"


class CommentNotFoundError(DoesNotExistError):
    """Comment id is unknown."""

    code_name = "COMMENT_NOT_FOUND"


class CommentAlreadyExistsError(CommentServiceException):
    """A comment with the same id is already stored."""

    status_code = 409

    def __init__(self, message: str = "Comment already exists", details: Optional[Dict[str, Any]] = None):
        super().__init__("COMMENT_ALREADY_EXISTS", message, details)


class ServiceError(CommentServiceException):
    """Service-related errors."""

    status_code = 500

    def __init__(self, message: str = "Service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("SERVICE_ERROR", message, details)


class ExternalServiceError(CommentServiceException):
    """External service errors."""

    status_code = 502

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)
