"""
Custom exceptions for the StatusMaker application.
"""
from typing import Optional


class StatusMakerException(Exception):
    """Base exception for all StatusMaker errors"""
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(StatusMakerException):
    """Raised when input validation fails"""
    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message, status_code=400)


class NotFoundError(StatusMakerException):
    """Raised when a requested resource is not found"""
    def __init__(self, resource: str, identifier):
        self.resource = resource
        self.identifier = identifier
        message = f"{resource} with identifier '{identifier}' not found"
        super().__init__(message, status_code=404)


class ConflictError(StatusMakerException):
    """Raised when a write violates a database uniqueness constraint"""
    def __init__(self, message: str = "The resource was modified concurrently. Please try again."):
        super().__init__(message, status_code=409)


class AuthenticationError(StatusMakerException):
    """Raised when credentials are missing or invalid"""
    def __init__(self, message: str = "Invalid authentication credentials"):
        super().__init__(message, status_code=401)


class PermissionDeniedError(StatusMakerException):
    """Raised when the acting admin lacks a required permission"""
    def __init__(self, message: str):
        super().__init__(message, status_code=403)


class FileUploadError(StatusMakerException):
    """Raised when file upload fails"""
    def __init__(self, message: str):
        super().__init__(message, status_code=400)
