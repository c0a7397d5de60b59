"""
Custom exception classes for error handling and consistency.

HTTP-facing errors subclass HTTPException and are rendered by the handlers
in main.py as ``{"error": ..., "details": ...}``. Domain errors raised by the
MFA services are plain exceptions that routes translate.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class BaseAppException(HTTPException):
    """Base exception class for all application exceptions."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        details: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.details = details
        self.extra = extra or {}

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = dict(self.extra)
        body["error"] = self.detail
        if self.details:
            body["details"] = self.details
        return body


class BadRequestError(BaseAppException):
    """Raised when a request is missing fields or has the wrong shape."""

    def __init__(self, detail: str, details: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            details=details,
        )


class VerificationFailedError(BaseAppException):
    """Raised when a submitted one-time code is rejected."""

    def __init__(self, detail: str = "Invalid verification code"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            extra={"success": False},
        )


class InternalServiceError(BaseAppException):
    """Raised when an operation fails for reasons outside the caller's control."""

    def __init__(self, detail: str, details: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            details=details,
        )


# Domain errors

class MfaError(Exception):
    """Base exception for MFA registry failures."""
    pass


class MfaSetupError(MfaError):
    """Raised when provisioning material cannot be generated."""
    pass


class MfaStoreError(MfaError):
    """Raised when the MFA storage backend fails."""
    pass
