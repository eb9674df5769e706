"""
Authorization error taxonomy.

Every error is recoverable at the request boundary. ``kind`` is the stable,
machine-checkable category; ``reason`` says *why* a request was refused
(missing authentication vs. missing capability vs. failing ownership).
"""

from __future__ import annotations


class AuthzError(Exception):
    kind = "error"
    status_code = 500
    default_reason = "error"

    def __init__(self, message: str, reason: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason or self.default_reason

    def to_dict(self) -> dict[str, object]:
        return {
            "success": False,
            "kind": self.kind,
            "reason": self.reason,
            "message": self.message,
        }


class UnauthorizedError(AuthzError):
    kind = "unauthorized"
    status_code = 401
    default_reason = "missing_authentication"


class ForbiddenError(AuthzError):
    kind = "forbidden"
    status_code = 403
    default_reason = "insufficient_role"


class ReservedRoleError(ForbiddenError):
    """Raised when a lifecycle operation targets a reserved role name."""

    default_reason = "reserved_role"


class NotFoundError(AuthzError):
    kind = "not_found"
    status_code = 404
    default_reason = "not_found"


class ConflictError(AuthzError):
    kind = "conflict"
    status_code = 409
    default_reason = "duplicate_role"


class InvalidNameError(AuthzError):
    kind = "invalid_name"
    status_code = 400
    default_reason = "invalid_role_name"


class ValidationError(AuthzError):
    kind = "validation_error"
    status_code = 400
    default_reason = "malformed_body"
