"""
Authorization core: database-defined roles, capability evaluation, ownership
checks and role administration.

This package has no dependency on the web layer (ticketdesk.routers,
ticketdesk.security). Every check takes the caller's context explicitly.
"""

from .admin import RenameResult, RoleAdministration
from .capabilities import RESERVED_ROLES, SUPER_ROLE, Capability
from .context import AuthzContext, SessionIdentity
from .errors import (
    AuthzError,
    ConflictError,
    ForbiddenError,
    InvalidNameError,
    NotFoundError,
    ReservedRoleError,
    UnauthorizedError,
    ValidationError,
)
from .evaluator import PermissionEvaluator
from .gate import AuthorizationGate, EditDecision, edit_decision
from .ownership import OwnershipResolver
from .store import IdentityDirectory, RoleStore

__all__ = [
    "AuthorizationGate",
    "AuthzContext",
    "AuthzError",
    "Capability",
    "ConflictError",
    "EditDecision",
    "ForbiddenError",
    "IdentityDirectory",
    "InvalidNameError",
    "NotFoundError",
    "OwnershipResolver",
    "PermissionEvaluator",
    "RESERVED_ROLES",
    "RenameResult",
    "ReservedRoleError",
    "RoleAdministration",
    "RoleStore",
    "SUPER_ROLE",
    "SessionIdentity",
    "UnauthorizedError",
    "ValidationError",
    "edit_decision",
]
