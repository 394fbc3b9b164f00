"""Custom exception classes"""

import enum
from typing import Any, Optional


class ErrorCategory(str, enum.Enum):
    """How a failed remote call should be presented to the user"""
    CONNECTIVITY = "connectivity"
    BUSINESS_RULE = "business_rule"
    AUTHENTICATION = "authentication"
    SERVER = "server"
    LOCAL = "local"


class PortalException(Exception):
    """Base exception for the candidate lifecycle engine"""

    category: ErrorCategory = ErrorCategory.SERVER

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ConnectivityException(PortalException):
    """The remote service could not be reached"""

    category = ErrorCategory.CONNECTIVITY

    def __init__(self, message: str = "Could not reach the server"):
        super().__init__(message, status_code=0)


class BusinessRuleException(PortalException):
    """The remote service refused the request (duplicate application, bad data...)"""

    category = ErrorCategory.BUSINESS_RULE

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        details: Optional[dict[str, Any]] = None
    ):
        super().__init__(message, status_code=status_code, details=details)


class AuthenticationException(PortalException):
    """Missing, expired or conflicting session"""

    category = ErrorCategory.AUTHENTICATION

    def __init__(self, message: str = "Authentication failed", status_code: int = 401):
        super().__init__(message, status_code=status_code)
        self.requires_sign_in = True


class ExternalServiceException(PortalException):
    """The remote service failed on its side"""

    category = ErrorCategory.SERVER

    def __init__(self, service: str, message: str, status_code: int = 502):
        full_message = f"External service error ({service}): {message}"
        super().__init__(full_message, status_code=status_code)


class IllegalTransitionException(PortalException):
    """A stage transition that the hiring pipeline does not allow"""

    category = ErrorCategory.LOCAL

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, status_code=409, details=details)


class InvalidDecisionException(PortalException):
    """A reviewer decision that is incomplete or no longer editable"""

    category = ErrorCategory.LOCAL

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)


def user_message(exc: Exception) -> str:
    """
    Convert an exception raised by a remote call into text for the user

    Args:
        exc: Exception caught at the call site

    Returns:
        Human readable message, never a traceback
    """
    if isinstance(exc, ConnectivityException):
        return "Unable to reach the server. Please check your connection and try again."
    if isinstance(exc, AuthenticationException):
        return "Your session has expired or is active elsewhere. Please sign in again."
    if isinstance(exc, BusinessRuleException):
        return exc.message
    if isinstance(exc, PortalException) and exc.category == ErrorCategory.LOCAL:
        return exc.message
    return "Something went wrong on our side. Please try again later."


def error_category(exc: Exception) -> ErrorCategory:
    """Category of an exception, SERVER for anything unknown"""
    if isinstance(exc, PortalException):
        return exc.category
    return ErrorCategory.SERVER
