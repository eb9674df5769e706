from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from ticketdesk.authz.capabilities import RESERVED_ROLES, SUPER_ROLE, default_role_permissions
from ticketdesk.db.base import Base
from ticketdesk.db.session import SessionLocal, engine
from ticketdesk.models.security import Identity, Role
from ticketdesk.models.tickets import Technician, Ticket

logger = logging.getLogger(__name__)


def init_db(seed_demo_data: bool = True) -> None:
    """
    Create tables, seed the reserved roles, and optionally seed demo data.

    Reserved roles are created once; an existing definition is never
    overwritten so administrator edits survive restarts.
    """

    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        seed_reserved_roles(db)
        if seed_demo_data and not _has_demo_data(db):
            _seed_demo(db)


def seed_reserved_roles(db: Session) -> None:
    existing = set(db.scalars(select(Role.name).where(Role.name.in_(RESERVED_ROLES))).all())
    for name in sorted(RESERVED_ROLES - existing):
        db.add(Role(name=name, is_custom=False, permissions=default_role_permissions(name)))
        logger.info("Created default permissions for %s role", name)
    db.commit()


def _has_demo_data(db: Session) -> bool:
    return db.execute(select(Identity.id).limit(1)).first() is not None


def _seed_demo(db: Session) -> None:
    root = Identity(display_name="System Administrator", email="root@ticketdesk.local", role=SUPER_ROLE, approved=True)
    ada = Identity(display_name="Ada Admin", email="ada.admin@example.com", role="administrator", approved=True)
    tom = Identity(display_name="Tom Tech", email="tom.tech@example.com", role="technician", approved=True)
    tina = Identity(display_name="Tina Tech", email="tina.tech@example.com", role="technician", approved=True)
    uma = Identity(display_name="Uma User", email="uma.user@example.com", role="user", approved=True)
    pending = Identity(display_name="Pete Pending", email="pete@example.com", role="user", approved=False)
    db.add_all([root, ada, tom, tina, uma, pending])
    db.flush()

    tech_tom = Technician(name="Tom Tech", email="Tom.Tech@example.com")
    tech_tina = Technician(name="Tina Tech", email="tina.tech@example.com")
    db.add_all([tech_tom, tech_tina])
    db.flush()

    t1 = Ticket(title="Replace router in building A", status="open")
    t1.assignees.append(tech_tom)
    t2 = Ticket(title="Printer jam, floor 3", status="open")
    t2.assignees.extend([tech_tom, tech_tina])
    t3 = Ticket(title="Unassigned network audit", status="open")
    db.add_all([t1, t2, t3])

    db.commit()
