from __future__ import annotations

from .enums import ErrorCode


class DomainError(Exception):
    """Base exception for business rule violations."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: ErrorCode | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ValidationError(DomainError):
    """Raised when input data is missing or malformed."""

    code = ErrorCode.MISSING_REQUIRED_FIELD


class AlreadyRecordedError(DomainError):
    """Raised when a stage was already submitted for the day."""

    code = ErrorCode.ALREADY_RECORDED


class StageLockedError(DomainError):
    """Raised when a stage is not submittable in the current workflow state."""

    code = ErrorCode.STAGE_LOCKED


class WriteFailedError(DomainError):
    """Raised when a persistence mutation did not apply."""

    code = ErrorCode.WRITE_FAILED


class ConcurrentUpdateError(WriteFailedError):
    """Raised when a record changed between read and write (stale version)."""


class NotFoundError(DomainError):
    code = ErrorCode.NOT_FOUND


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = ErrorCode.UNAUTHORIZED


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = ErrorCode.FORBIDDEN
