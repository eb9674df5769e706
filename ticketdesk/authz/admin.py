"""
Role administration: lifecycle of custom roles and edits to permission maps.

Only already-gated elevated callers reach this module. Reserved roles are
never created, renamed or deleted here, whatever the caller's role.

Rename is two committed writes: the role record first, then every identity
still on the old name. There is no transaction spanning both. If the second
write fails the role keeps its new name, the failure is logged, and the
result reports how many identities were actually moved so the caller can
finish the job with ``migrate_identities``. Identities left behind resolve to
no permissions in the meantime.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from ticketdesk.authz.capabilities import (
    CAPABILITY_NAMES,
    SUPER_ROLE,
    baseline_permissions,
    default_role_permissions,
    is_reserved,
)
from ticketdesk.authz.context import AuthzContext
from ticketdesk.authz.errors import (
    ConflictError,
    ForbiddenError,
    InvalidNameError,
    NotFoundError,
    ReservedRoleError,
    ValidationError,
)
from ticketdesk.authz.evaluator import PermissionEvaluator
from ticketdesk.authz.store import IdentityDirectory, RoleStore
from ticketdesk.models.security import Identity, Role

logger = logging.getLogger(__name__)
audit = logging.getLogger("ticketdesk.audit")

ROLE_NAME_MAX_LENGTH = 50
_ROLE_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class RenameResult:
    role: Role
    users_updated: int


def validate_role_name(name: str) -> str:
    if not name or len(name) > ROLE_NAME_MAX_LENGTH or not _ROLE_NAME_RE.match(name):
        raise InvalidNameError(
            f"Invalid role name '{name}'. Use letters, digits, underscores or hyphens "
            f"(at most {ROLE_NAME_MAX_LENGTH} characters)."
        )
    return name


def validate_permission_changes(changes: Mapping[str, object]) -> dict[str, bool]:
    if not isinstance(changes, Mapping):
        raise ValidationError("Invalid permissions data")

    unknown = sorted(k for k in changes if k not in CAPABILITY_NAMES)
    if unknown:
        raise ValidationError(f"Unknown permissions: {unknown}", reason="unknown_capability")

    not_bool = sorted(k for k, v in changes.items() if not isinstance(v, bool))
    if not_bool:
        raise ValidationError(f"Permission values must be true or false: {not_bool}")

    return {str(k): bool(v) for k, v in changes.items()}


def _actor_label(actor: AuthzContext | None) -> str:
    if actor is None:
        return "system"
    return actor.email or str(actor.identity.identity_id)


class RoleAdministration:
    def __init__(self, store: RoleStore, identities: IdentityDirectory, evaluator: PermissionEvaluator | None = None):
        self.store = store
        self.identities = identities
        self.evaluator = evaluator or PermissionEvaluator(store)

    # ---- Custom role lifecycle -------------------------------------------------------

    def create_role(self, name: str, based_on: str | None = None, actor: AuthzContext | None = None) -> Role:
        name = validate_role_name(name)
        if is_reserved(name):
            raise ReservedRoleError(f"'{name}' is a reserved role name")

        # Copy the template's map as it is right now; later edits to the
        # template do not flow into the new role.
        if based_on and (based_on == SUPER_ROLE or self.store.exists(based_on)):
            permissions = self.evaluator.effective_permissions(based_on)
            source = based_on
        else:
            permissions = baseline_permissions()
            source = "baseline"

        role = self.store.upsert(Role(name=name, is_custom=True, permissions=dict(permissions)))
        audit.info("ROLE_CREATED role=%s based_on=%s actor=%s", name, source, _actor_label(actor))
        return role

    def rename_role(self, old_name: str, new_name: str, actor: AuthzContext | None = None) -> RenameResult:
        if is_reserved(old_name):
            raise ReservedRoleError(f"Cannot rename reserved role '{old_name}'")
        new_name = validate_role_name(new_name)
        if is_reserved(new_name):
            raise ReservedRoleError(f"'{new_name}' is a reserved role name")

        role = self.store.get(old_name)
        if role is None or not role.is_custom:
            raise NotFoundError(f"Custom role '{old_name}' not found")
        if self.store.exists(new_name):
            raise ConflictError(f"Role '{new_name}' already exists")

        expected = self.identities.count_with_role(old_name)

        role.name = new_name
        role = self.store.upsert(role)
        audit.info("ROLE_RENAMED role=%s new_name=%s actor=%s", old_name, new_name, _actor_label(actor))

        try:
            updated = self.identities.reassign_role(old_name, new_name)
        except SQLAlchemyError:
            self.store.db.rollback()
            logger.exception(
                "Role renamed but identity migration failed old=%s new=%s pending=%d",
                old_name,
                new_name,
                expected,
            )
            updated = 0

        if updated < expected:
            logger.warning(
                "Identity migration incomplete after rename old=%s new=%s updated=%d expected=%d",
                old_name,
                new_name,
                updated,
                expected,
            )
        audit.info("ROLE_USERS_MIGRATED role=%s users_updated=%d actor=%s", new_name, updated, _actor_label(actor))
        return RenameResult(role=role, users_updated=updated)

    def delete_role(self, name: str, actor: AuthzContext | None = None) -> None:
        if is_reserved(name):
            raise ReservedRoleError(f"Cannot delete reserved role '{name}'")

        role = self.store.get(name)
        if role is None or not role.is_custom:
            raise NotFoundError(f"Custom role '{name}' not found")

        still_assigned = self.identities.count_with_role(name)
        self.store.delete(name)
        audit.info("ROLE_DELETED role=%s actor=%s", name, _actor_label(actor))

        if still_assigned:
            # Not reassigned; these identities now resolve to no permissions.
            logger.warning("Deleted role=%s is still referenced by %d identities", name, still_assigned)

    def migrate_identities(self, from_role: str, to_role: str, actor: AuthzContext | None = None) -> int:
        """Move identities off a role name that no longer has a definition."""

        if is_reserved(from_role):
            raise ReservedRoleError(f"Cannot migrate identities off reserved role '{from_role}'")
        if self.store.exists(from_role):
            raise ForbiddenError(
                f"Role '{from_role}' still exists; only dangling role references can be migrated",
                reason="source_role_exists",
            )

        target = self.store.get(to_role)
        if target is None or not target.is_custom:
            raise NotFoundError(f"Custom role '{to_role}' not found")

        updated = self.identities.reassign_role(from_role, to_role)
        audit.info(
            "ROLE_USERS_MIGRATED role=%s from=%s users_updated=%d actor=%s",
            to_role,
            from_role,
            updated,
            _actor_label(actor),
        )
        return updated

    def orphaned_identities(self) -> list[Identity]:
        return self.identities.list_orphaned()

    # ---- Permission maps -------------------------------------------------------------

    def update_permissions(self, role_name: str, changes: Mapping[str, object], actor: AuthzContext) -> Role:
        """
        Overlay ``changes`` on the role's current map.

        Capabilities not mentioned keep their current value. Only the super-role
        may edit the super-role's stored map.
        """

        if role_name == SUPER_ROLE and actor.role != SUPER_ROLE:
            raise ForbiddenError("Only sysadmin can modify sysadmin permissions", reason="super_role_only")

        validated = validate_permission_changes(changes)
        role = self.store.require(role_name)

        before = dict(role.permissions)
        role.permissions = {**before, **validated}
        role = self.store.upsert(role)

        diff = {k: v for k, v in validated.items() if before.get(k) != v}
        audit.info("ROLE_PERMISSIONS_UPDATED role=%s changes=%s actor=%s", role_name, diff, _actor_label(actor))
        return role

    def reset_permissions(self, role_name: str, actor: AuthzContext) -> Role:
        if role_name == SUPER_ROLE and actor.role != SUPER_ROLE:
            raise ForbiddenError("Only sysadmin can reset sysadmin permissions", reason="super_role_only")

        defaults = default_role_permissions(role_name)
        if defaults is None:
            raise NotFoundError(f"No default permissions exist for role '{role_name}'")

        role = self.store.get(role_name)
        if role is None:
            role = Role(name=role_name, is_custom=False, permissions=defaults)
        else:
            role.permissions = defaults
        role = self.store.upsert(role)

        audit.info("ROLE_PERMISSIONS_RESET role=%s actor=%s", role_name, _actor_label(actor))
        return role
