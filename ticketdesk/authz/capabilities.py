"""
Capability vocabulary and reserved role names.

Capabilities are a fixed, enumerable set of boolean flags. A role's permission
map is keyed by the capability's wire name (camelCase, e.g. ``editAllTickets``)
so stored documents and HTTP bodies share one representation.
"""

from __future__ import annotations

from enum import Enum


class Capability(str, Enum):
    # Page visibility
    VIEW_DASHBOARD = "viewDashboard"
    VIEW_CALENDAR = "viewCalendar"
    VIEW_TICKETS = "viewTickets"
    VIEW_ADMINISTRATOR = "viewAdministrator"
    VIEW_ABSENCES = "viewAbsences"
    VIEW_SKILLS = "viewSkills"

    # Tickets
    CREATE_TICKETS = "createTickets"
    EDIT_OWN_TICKETS = "editOwnTickets"
    EDIT_ALL_TICKETS = "editAllTickets"
    DELETE_TICKETS = "deleteTickets"
    ASSIGN_TICKETS = "assignTickets"

    # User management
    VIEW_USERS = "viewUsers"
    MANAGE_USERS = "manageUsers"
    APPROVE_USERS = "approveUsers"

    # Bug reports
    SUBMIT_BUG_REPORT = "submitBugReport"
    VIEW_BUG_REPORTS = "viewBugReports"

    # Administrative
    MANAGE_DEPARTMENTS = "manageDepartments"
    MANAGE_TECHNICIANS = "manageTechnicians"
    VIEW_SYSTEM_STATUS = "viewSystemStatus"
    MANAGE_PERMISSIONS = "managePermissions"


CAPABILITY_NAMES: frozenset[str] = frozenset(c.value for c in Capability)

SUPER_ROLE = "sysadmin"
ADMIN_ROLE = "administrator"
TECHNICIAN_ROLE = "technician"
USER_ROLE = "user"

RESERVED_ROLES: frozenset[str] = frozenset({USER_ROLE, TECHNICIAN_ROLE, ADMIN_ROLE, SUPER_ROLE})
ELEVATED_ROLES: frozenset[str] = frozenset({ADMIN_ROLE, SUPER_ROLE})


def is_reserved(role_name: str) -> bool:
    # Case-sensitive on purpose: "Sysadmin" is an ordinary custom name.
    return role_name in RESERVED_ROLES


def permission_map(granted: set[Capability] | frozenset[Capability]) -> dict[str, bool]:
    """Full map over the vocabulary with only ``granted`` switched on."""

    return {c.value: c in granted for c in Capability}


def all_granted() -> dict[str, bool]:
    return permission_map(frozenset(Capability))


# Initial map for a custom role created without (or with an unknown) template.
BASELINE_GRANTS = frozenset(
    {
        Capability.VIEW_DASHBOARD,
        Capability.VIEW_CALENDAR,
        Capability.VIEW_TICKETS,
        Capability.EDIT_OWN_TICKETS,
    }
)


def baseline_permissions() -> dict[str, bool]:
    return permission_map(BASELINE_GRANTS)


_USER_GRANTS = frozenset(
    {
        Capability.VIEW_DASHBOARD,
        Capability.VIEW_CALENDAR,
        Capability.SUBMIT_BUG_REPORT,
    }
)

_TECHNICIAN_GRANTS = frozenset(
    {
        Capability.VIEW_DASHBOARD,
        Capability.VIEW_CALENDAR,
        Capability.VIEW_TICKETS,
        Capability.CREATE_TICKETS,
        Capability.EDIT_OWN_TICKETS,
        Capability.SUBMIT_BUG_REPORT,
    }
)


def default_role_permissions(role_name: str) -> dict[str, bool] | None:
    """
    Bootstrap map for a reserved role, or ``None`` for anything else.

    Used when seeding the database and when an administrator resets a reserved
    role back to its defaults.
    """

    if role_name == USER_ROLE:
        return permission_map(_USER_GRANTS)
    if role_name == TECHNICIAN_ROLE:
        return permission_map(_TECHNICIAN_GRANTS)
    if role_name in ELEVATED_ROLES:
        return all_granted()
    return None
