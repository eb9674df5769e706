from __future__ import annotations

import logging

from ticketdesk.authz.capabilities import SUPER_ROLE, Capability, all_granted
from ticketdesk.authz.store import RoleStore

logger = logging.getLogger(__name__)


class PermissionEvaluator:
    """
    Resolves a role name to its effective permission map.

    - ``sysadmin`` is all-true by definition; the store is never consulted.
    - A role with no stored definition grants nothing (fail-closed).
    - Anything else is exactly the stored map.

    Results are never cached: a permission edit applies to the caller's very
    next request.
    """

    def __init__(self, store: RoleStore) -> None:
        self.store = store

    def effective_permissions(self, role_name: str | None) -> dict[str, bool]:
        if role_name == SUPER_ROLE:
            return all_granted()
        if not role_name:
            return {}

        role = self.store.get(role_name)
        if role is None:
            logger.debug("No definition for role=%s; granting nothing", role_name)
            return {}
        return dict(role.permissions)

    def has(self, role_name: str | None, capability: Capability | str) -> bool:
        name = capability.value if isinstance(capability, Capability) else capability
        return self.effective_permissions(role_name).get(name) is True
