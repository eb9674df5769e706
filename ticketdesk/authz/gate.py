"""
Request-level authorization gate.

Per request the caller moves through::

    Unauthenticated -> Authenticated -> {AdminChecked, SuperChecked}

The coarse gates are composable. A route first requires authentication, then
optionally elevation, then consults a specific capability, and finally, for
edit/delete-style actions on assigned resources, combines the edit-all /
edit-own pair with ownership of the instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ticketdesk.authz.capabilities import ELEVATED_ROLES, SUPER_ROLE, Capability
from ticketdesk.authz.context import AuthzContext, SessionIdentity
from ticketdesk.authz.errors import ForbiddenError, UnauthorizedError
from ticketdesk.authz.evaluator import PermissionEvaluator
from ticketdesk.authz.ownership import OwnershipResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditDecision:
    granted: bool
    reason: str
    message: str = ""


def edit_decision(
    edit_all: bool,
    edit_own: bool,
    owns: bool,
    *,
    assignees: list[str] | None = None,
    caller: str | None = None,
    resource_label: str = "ticket",
) -> EditDecision:
    """
    Edit-all grants outright; edit-own grants only on owned instances.

    Denials name the assignees that would have had to match.
    """

    if edit_all:
        return EditDecision(granted=True, reason="edit_all")
    if edit_own and owns:
        return EditDecision(granted=True, reason="owner")

    if not edit_own:
        return EditDecision(
            granted=False,
            reason="no_edit_capability",
            message=f"You do not have permission to edit {resource_label}s. Please contact your administrator.",
        )

    assigned = ", ".join(assignees) if assignees else "none"
    return EditDecision(
        granted=False,
        reason="not_owner",
        message=(
            f"You can only edit {resource_label}s assigned to you. "
            f"This {resource_label} is assigned to: {assigned}. Your email: {caller or 'unknown'}"
        ),
    )


class AuthorizationGate:
    def __init__(self, evaluator: PermissionEvaluator, ownership: OwnershipResolver | None = None) -> None:
        self.evaluator = evaluator
        self.ownership = ownership or OwnershipResolver()

    def snapshot(self, identity: SessionIdentity) -> AuthzContext:
        """Evaluate the caller's permissions against the current role definition."""

        return AuthzContext(identity=identity, permissions=self.evaluator.effective_permissions(identity.role))

    # ---- Coarse gates ----------------------------------------------------------------

    def require_authenticated(self, ctx: AuthzContext | None) -> AuthzContext:
        if ctx is None:
            raise UnauthorizedError("Authentication required. Please log in.")
        return ctx

    def require_elevated(self, ctx: AuthzContext | None) -> AuthzContext:
        ctx = self.require_authenticated(ctx)
        if ctx.role not in ELEVATED_ROLES:
            logger.info("Elevation denied identity=%s role=%s", ctx.identity.identity_id, ctx.role)
            raise ForbiddenError("Administrator privileges required.", reason="insufficient_role")
        return ctx

    def require_super(self, ctx: AuthzContext | None) -> AuthzContext:
        ctx = self.require_authenticated(ctx)
        if ctx.role != SUPER_ROLE:
            logger.info("Super-role gate denied identity=%s role=%s", ctx.identity.identity_id, ctx.role)
            raise ForbiddenError("System administrator privileges required.", reason="super_role_only")
        return ctx

    # ---- Fine-grained checks ---------------------------------------------------------

    def require_capability(self, ctx: AuthzContext | None, capability: Capability) -> AuthzContext:
        ctx = self.require_authenticated(ctx)
        if not ctx.can(capability):
            logger.info(
                "Capability denied identity=%s role=%s capability=%s",
                ctx.identity.identity_id,
                ctx.role,
                capability.value,
            )
            raise ForbiddenError(
                f"You do not have the '{capability.value}' permission.",
                reason="missing_capability",
            )
        return ctx

    def authorize_edit(
        self,
        ctx: AuthzContext | None,
        resource: Any,
        edit_all: Capability = Capability.EDIT_ALL_TICKETS,
        edit_own: Capability = Capability.EDIT_OWN_TICKETS,
        resource_label: str = "ticket",
    ) -> EditDecision:
        ctx = self.require_authenticated(ctx)
        decision = edit_decision(
            ctx.can(edit_all),
            ctx.can(edit_own),
            self.ownership.owns(ctx.identity, resource),
            assignees=self.ownership.assignee_identifiers(resource),
            caller=ctx.email,
            resource_label=resource_label,
        )
        if not decision.granted:
            logger.info(
                "Edit denied identity=%s role=%s reason=%s",
                ctx.identity.identity_id,
                ctx.role,
                decision.reason,
            )
            raise ForbiddenError(decision.message, reason=decision.reason)
        return decision
