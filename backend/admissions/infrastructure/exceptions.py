"""
Custom Exceptions for the Admissions Backend

Hierarchical exception classes for proper error handling across layers.
"""

from typing import Optional, Dict, Any


class AdmissionsError(Exception):
    """Base exception for all admissions backend errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ValidationError(AdmissionsError):
    """Raised when input validation fails."""
    pass


class ParseError(AdmissionsError):
    """Raised when pasted application text yields no usable record."""
    pass


class AuthorizationError(AdmissionsError):
    """Raised when the caller lacks the role an operation requires."""

    def __init__(
        self,
        message: str = "Not authorized",
        required_role: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if required_role:
            details["required_role"] = required_role
        super().__init__(message, details, original_error)


class InvalidTransitionError(AdmissionsError):
    """Raised when a review item is moved out of a terminal state."""

    def __init__(
        self,
        message: str,
        current_status: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if current_status:
            details["current_status"] = current_status
        super().__init__(message, details, original_error)


class DatabaseError(AdmissionsError):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class NotFoundError(DatabaseError):
    """Raised when a requested resource is not found."""
    pass


class DuplicateError(DatabaseError):
    """Raised when attempting to create a duplicate resource."""
    pass


class AuthServiceError(AdmissionsError):
    """Raised when a Supabase auth admin operation fails."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        user_id: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if user_id:
            details["user_id"] = user_id
        super().__init__(message, details, original_error)


class ConfigurationError(AdmissionsError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(message, details, original_error)
