"""
Database-backed stores used by the authorization core.

``RoleStore`` owns role-name uniqueness and the reserved-name protection.
``IdentityDirectory`` is the narrow slice of identity management the core
needs: counting and migrating identities by role name.

Neither class caches anything. Each call goes to the database so that a write
by one administrator is visible to every other request on its next read.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ticketdesk.authz.capabilities import SUPER_ROLE, is_reserved
from ticketdesk.authz.errors import ConflictError, NotFoundError, ReservedRoleError
from ticketdesk.models.security import Identity, Role

logger = logging.getLogger(__name__)


class RoleStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, role_name: str) -> Role | None:
        return self.db.execute(select(Role).where(Role.name == role_name)).scalar_one_or_none()

    def require(self, role_name: str) -> Role:
        role = self.get(role_name)
        if role is None:
            raise NotFoundError(f"Permissions not found for role '{role_name}'")
        return role

    def exists(self, role_name: str) -> bool:
        return self.db.execute(select(Role.id).where(Role.name == role_name)).first() is not None

    def list_all(self) -> list[Role]:
        return list(self.db.scalars(select(Role).order_by(Role.name)).all())

    def upsert(self, role: Role) -> Role:
        """
        Insert a new role or write back changes to an existing one.

        A role that is not yet persisted must not reuse an existing name. The
        unique constraint backs up the pre-check when two administrators create
        the same name concurrently.
        """

        creating = role.id is None
        if creating:
            existing = self.get(role.name)
            if existing is not None:
                raise ConflictError(f"Role '{role.name}' already exists")
            self.db.add(role)

        role.updated_at = datetime.utcnow()
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info("Role write rejected by unique constraint name=%s", role.name)
            raise ConflictError(f"Role '{role.name}' already exists") from exc

        self.db.refresh(role)
        return role

    def delete(self, role_name: str) -> None:
        if is_reserved(role_name):
            raise ReservedRoleError(f"Cannot delete reserved role '{role_name}'")

        role = self.require(role_name)
        self.db.delete(role)
        self.db.commit()


class IdentityDirectory:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, identity_id: int) -> Identity | None:
        return self.db.get(Identity, identity_id)

    def count_with_role(self, role_name: str) -> int:
        return self.db.execute(select(func.count(Identity.id)).where(Identity.role == role_name)).scalar_one()

    def reassign_role(self, old_name: str, new_name: str) -> int:
        """Move every identity on ``old_name`` to ``new_name``; returns rows changed."""

        result = self.db.execute(
            update(Identity).where(Identity.role == old_name).values(role=new_name),
            execution_options={"synchronize_session": "evaluate"},
        )
        changed = result.rowcount or 0
        self.db.commit()
        return changed

    def list_orphaned(self) -> list[Identity]:
        """Identities whose role has no stored definition (the super-role never counts)."""

        defined = select(Role.name)
        stmt = (
            select(Identity)
            .where(Identity.role != SUPER_ROLE, Identity.role.not_in(defined))
            .order_by(Identity.id)
        )
        return list(self.db.scalars(stmt).all())
