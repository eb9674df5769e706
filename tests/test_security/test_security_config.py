"""Tests for route-gate configuration loading and matching."""
from __future__ import annotations

from pathlib import Path

import pytest

from ticketdesk.authz.capabilities import Capability
from ticketdesk.security.config import Gate, load_security_config
from ticketdesk.security.decorators import require_capability, require_gate

SECURITY_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "security_config.yaml"


@pytest.fixture
def config():
    return load_security_config(SECURITY_CONFIG_PATH)


def test_exact_rules(config):
    assert config.match("/health", "GET").gate is Gate.PUBLIC
    assert config.match("/permissions", "get").gate is Gate.ELEVATED
    assert config.match("/permissions/roles", "POST").gate is Gate.ELEVATED


def test_template_rules(config):
    assert config.match("/permissions/technician", "GET").gate is Gate.AUTHENTICATED
    assert config.match("/permissions/technician", "PUT").gate is Gate.ELEVATED
    assert config.match("/permissions/roles/field-tech/rename", "PUT").gate is Gate.ELEVATED
    assert config.match("/permissions/roles/orphans", "GET").gate is Gate.ELEVATED
    assert config.match("/permissions/orphans", "GET").gate is Gate.AUTHENTICATED


def test_unmatched_routes_fall_back_to_default(config):
    rule = config.match("/tickets/1", "DELETE")
    assert rule.gate is Gate.AUTHENTICATED
    assert config.match("/health", "GET").gate is Gate.PUBLIC


def test_missing_security_key_is_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("routes: []\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_security_config(path)


def test_gate_ordering():
    assert Gate.PUBLIC.at_least(Gate.ELEVATED) is Gate.ELEVATED
    assert Gate.SUPER.at_least(Gate.AUTHENTICATED) is Gate.SUPER


def test_decorators_keep_the_strictest_gate_and_collect_capabilities():
    @require_gate(Gate.SUPER)
    @require_gate("elevated")
    @require_capability(Capability.VIEW_TICKETS)
    @require_capability(Capability.DELETE_TICKETS)
    def handler():
        return None

    assert handler.__security_gate__ is Gate.SUPER
    assert set(handler.__security_capabilities__) == {Capability.VIEW_TICKETS, Capability.DELETE_TICKETS}
