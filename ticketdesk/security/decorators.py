from __future__ import annotations

from collections.abc import Callable

from ticketdesk.authz.capabilities import Capability
from ticketdesk.security.config import Gate


def require_gate(gate: Gate | str) -> Callable:
    """
    Raise the gate for one endpoint above whatever the YAML config says.

    Implementation detail:
    - This decorator does NOT perform auth itself.
    - It attaches metadata that the global security dependency reads
      *after* routing (during dependency resolution). Stacking keeps the
      strictest gate.
    """

    wanted = Gate(gate)

    def decorator(fn: Callable) -> Callable:
        existing = getattr(fn, "__security_gate__", Gate.PUBLIC)
        setattr(fn, "__security_gate__", wanted.at_least(existing))
        return fn

    return decorator


def require_capability(*capabilities: Capability) -> Callable:
    """
    Require the caller's permission snapshot to carry every listed capability.

    Implies the authenticated gate.
    """

    def decorator(fn: Callable) -> Callable:
        existing = tuple(getattr(fn, "__security_capabilities__", ()))
        setattr(fn, "__security_capabilities__", existing + tuple(capabilities))
        return fn

    return decorator
