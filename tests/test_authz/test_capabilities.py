"""Tests for the capability vocabulary and reserved-role defaults."""
from __future__ import annotations

from ticketdesk.authz.capabilities import (
    CAPABILITY_NAMES,
    RESERVED_ROLES,
    Capability,
    baseline_permissions,
    default_role_permissions,
    is_reserved,
)


def test_vocabulary_uses_wire_names():
    assert Capability.EDIT_ALL_TICKETS.value == "editAllTickets"
    assert len(CAPABILITY_NAMES) == len(Capability) == 20


def test_reserved_names():
    assert RESERVED_ROLES == {"user", "technician", "administrator", "sysadmin"}
    assert is_reserved("sysadmin")
    assert not is_reserved("SysAdmin")


def test_defaults_cover_the_whole_vocabulary():
    for role in RESERVED_ROLES:
        assert set(default_role_permissions(role)) == CAPABILITY_NAMES
    assert default_role_permissions("field-tech") is None


def test_technician_defaults_edit_own_but_not_all():
    perms = default_role_permissions("technician")
    assert perms["editOwnTickets"] is True
    assert perms["editAllTickets"] is False
    assert perms["managePermissions"] is False


def test_baseline_is_default_deny_for_administration():
    perms = baseline_permissions()
    granted = {k for k, v in perms.items() if v}
    assert granted == {"viewDashboard", "viewCalendar", "viewTickets", "editOwnTickets"}
