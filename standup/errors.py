"""
Stand-up Room – error taxonomy.

Services and routers raise ``AppError``; the handlers registered in
``standup.main`` turn it into ``{"ok": false, "code": ..., "error": ...}``.
"""

import enum


class ErrorCode(str, enum.Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    UNAUTHORIZED = "UNAUTHORIZED"
    CONFLICT = "CONFLICT"
    NAME_TAKEN = "NAME_TAKEN"
    NO_PRESENT_PARTICIPANTS = "NO_PRESENT_PARTICIPANTS"
    INCOMPLETE_VOTES = "INCOMPLETE_VOTES"
    INVALID_STATE = "INVALID_STATE"
    DATABASE_UNAVAILABLE = "DATABASE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


STATUS_CODES = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.NO_PRESENT_PARTICIPANTS: 400,
    ErrorCode.INCOMPLETE_VOTES: 400,
    ErrorCode.INVALID_STATE: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.NAME_TAKEN: 409,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.DATABASE_UNAVAILABLE: 503,
}


class AppError(Exception):
    """Base exception for all expected, client-visible failures."""

    def __init__(self, code: ErrorCode, message: str, status_code: int | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code or STATUS_CODES[code]


# ── Helpers ──

def validation_error(message: str) -> AppError:
    return AppError(ErrorCode.VALIDATION_ERROR, message)


def not_found(message: str = "Resource not found") -> AppError:
    return AppError(ErrorCode.NOT_FOUND, message)


def forbidden(message: str = "Access denied") -> AppError:
    return AppError(ErrorCode.FORBIDDEN, message)


def unauthorized(message: str = "Invalid or expired session") -> AppError:
    return AppError(ErrorCode.UNAUTHORIZED, message)


def conflict(message: str) -> AppError:
    return AppError(ErrorCode.CONFLICT, message)


def database_unavailable() -> AppError:
    return AppError(
        ErrorCode.DATABASE_UNAVAILABLE,
        "Database temporarily unavailable. Please try again shortly.",
    )
