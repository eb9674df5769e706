"""Per-request identity and permission snapshot passed explicitly to every check."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from ticketdesk.authz.capabilities import Capability


@dataclass(frozen=True)
class SessionIdentity:
    """
    Caller identity as supplied by the session collaborator.

    The core never issues or validates session tokens; it only reads these
    fields.
    """

    identity_id: int | str
    role: str
    email: str | None = None
    display_name: str | None = None


@dataclass(frozen=True)
class AuthzContext:
    """
    Authenticated caller plus the permission snapshot evaluated for this request.

    The snapshot is derived from the role definition at the time of the check
    and is discarded with the request; it is never persisted.
    """

    identity: SessionIdentity
    permissions: Mapping[str, bool] = field(default_factory=dict)

    @property
    def role(self) -> str:
        return self.identity.role

    @property
    def email(self) -> str | None:
        return self.identity.email

    def can(self, capability: Capability | str) -> bool:
        name = capability.value if isinstance(capability, Capability) else capability
        return self.permissions.get(name) is True
