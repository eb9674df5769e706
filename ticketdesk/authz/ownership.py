"""
Instance-level ownership.

A resource is owned by whoever appears in its assignee list. Identities are
compared by a stable identifier (email), never by display name. Assignees may
be objects carrying an ``email`` attribute (ORM rows, dataclasses), mappings
with an ``"email"`` key, or bare identifier strings.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


def normalize_identifier(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    # Emails are case-insensitive in practice; other identifiers are compared as-is.
    return text.lower() if "@" in text else text


def _assignee_identifier(assignee: Any) -> str | None:
    if isinstance(assignee, str):
        return normalize_identifier(assignee)
    if isinstance(assignee, dict):
        return normalize_identifier(assignee.get("email"))
    return normalize_identifier(getattr(assignee, "email", None))


def _assignees(resource: Any) -> Iterable[Any]:
    if resource is None:
        return ()
    raw = resource.get("assignees") if isinstance(resource, dict) else getattr(resource, "assignees", None)
    if raw is None:
        return ()
    if isinstance(raw, (str, dict)) or not isinstance(raw, Iterable):
        # A single assignee stored without a list.
        return (raw,)
    return raw


class OwnershipResolver:
    def assignee_identifiers(self, resource: Any) -> list[str]:
        found: list[str] = []
        for assignee in _assignees(resource):
            ident = _assignee_identifier(assignee)
            if ident is not None:
                found.append(ident)
        return found

    def owns(self, identity: Any, resource: Any) -> bool:
        """True iff ``resource`` has assignees and the caller is one of them."""

        caller = _assignee_identifier(identity) if identity is not None else None
        if caller is None:
            return False
        return caller in self.assignee_identifiers(resource)
