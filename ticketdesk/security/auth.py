from __future__ import annotations

import logging

from fastapi import Request
from sqlalchemy.orm import Session

from ticketdesk.authz.capabilities import SUPER_ROLE
from ticketdesk.authz.context import SessionIdentity
from ticketdesk.authz.errors import UnauthorizedError, ValidationError
from ticketdesk.authz.store import IdentityDirectory
from ticketdesk.security.config import SecurityConfig

logger = logging.getLogger(__name__)


def extract_identity_id(request: Request, config: SecurityConfig) -> int | None:
    """
    Stand-in session collaborator: read the caller's identity id from the request.

    - Input: ``Authorization: Bearer <identity id>``
    - Session issuance, expiry and token validation belong to the real session
      service; this only resolves which identity the request claims to be.
    """

    header_name = config.auth.authorization_header
    bearer_prefix = config.auth.bearer_prefix

    raw = request.headers.get(header_name)
    if not raw:
        logger.info("Missing %s header (auth required) path=%s method=%s", header_name, request.url.path, request.method)
        return None

    prefix = f"{bearer_prefix} "
    if not raw.startswith(prefix):
        logger.warning("Invalid %s header format path=%s method=%s", header_name, request.url.path, request.method)
        raise ValidationError(
            f"Invalid {header_name}. Expected '{bearer_prefix} <session>'.",
            reason="malformed_authorization",
        )

    token = raw[len(prefix) :].strip()
    if not token:
        logger.warning("Empty bearer value path=%s method=%s", request.url.path, request.method)
        raise ValidationError(
            f"Invalid {header_name}. Missing value after '{bearer_prefix}'.",
            reason="malformed_authorization",
        )

    try:
        return int(token)
    except ValueError as exc:
        logger.warning("Bearer value is not an identity id path=%s method=%s", request.url.path, request.method)
        raise ValidationError(
            "Invalid bearer value (expected integer identity id).",
            reason="malformed_authorization",
        ) from exc


def load_identity(db: Session, identity_id: int) -> SessionIdentity:
    identity = IdentityDirectory(db).get(identity_id)

    if identity is None:
        raise UnauthorizedError("Invalid session identity", reason="unknown_identity")

    # The super-role is always allowed in; everyone else needs approval first.
    if not identity.approved and identity.role != SUPER_ROLE:
        raise UnauthorizedError("Account pending approval from administrator.", reason="unapproved_identity")

    return SessionIdentity(
        identity_id=identity.id,
        role=identity.role,
        email=identity.email,
        display_name=identity.display_name,
    )
