from __future__ import annotations

import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ticketdesk.authz.admin import RoleAdministration
from ticketdesk.authz.context import AuthzContext
from ticketdesk.authz.errors import UnauthorizedError
from ticketdesk.authz.evaluator import PermissionEvaluator
from ticketdesk.authz.gate import AuthorizationGate
from ticketdesk.authz.store import IdentityDirectory, RoleStore
from ticketdesk.db.session import get_db
from ticketdesk.security.auth import extract_identity_id, load_identity
from ticketdesk.security.config import Gate, SecurityConfig

logger = logging.getLogger(__name__)


def get_security_config(request: Request) -> SecurityConfig:
    config = getattr(request.app.state, "security_config", None)
    if config is None:
        raise RuntimeError("Security config not loaded. Did app startup run?")
    return config


def get_gate(db: Session = Depends(get_db)) -> AuthorizationGate:
    return AuthorizationGate(PermissionEvaluator(RoleStore(db)))


def get_role_administration(db: Session = Depends(get_db)) -> RoleAdministration:
    store = RoleStore(db)
    return RoleAdministration(store, IdentityDirectory(db), PermissionEvaluator(store))


def get_authz_context(request: Request) -> AuthzContext:
    ctx = getattr(request.state, "authz", None)
    if ctx is None:
        raise UnauthorizedError("Authentication required. Please log in.")
    return ctx


def enforce_security(
    request: Request,
    config: SecurityConfig = Depends(get_security_config),
    gate: AuthorizationGate = Depends(get_gate),
    db: Session = Depends(get_db),
) -> None:
    """
    Global security dependency (configuration-driven, decorators can tighten it).

    Runs after routing so endpoint decorator metadata is visible, and requires
    no changes to route handlers when added globally. On success the request
    carries ``request.state.authz``: the identity plus a permission snapshot
    evaluated against the role definitions as they are right now.
    """

    path = request.url.path
    method = request.method.upper()
    request.state.authz = None

    rule = config.match(path, method)

    endpoint = request.scope.get("endpoint")
    decorator_gate = getattr(endpoint, "__security_gate__", Gate.PUBLIC) if endpoint else Gate.PUBLIC
    capabilities = tuple(getattr(endpoint, "__security_capabilities__", ())) if endpoint else ()

    required = rule.gate.at_least(decorator_gate)
    if capabilities:
        required = required.at_least(Gate.AUTHENTICATED)
    if required is Gate.PUBLIC:
        return

    identity_id = extract_identity_id(request, config)
    ctx = gate.snapshot(load_identity(db, identity_id)) if identity_id is not None else None

    ctx = gate.require_authenticated(ctx)
    if required is Gate.ELEVATED:
        gate.require_elevated(ctx)
    elif required is Gate.SUPER:
        gate.require_super(ctx)

    for capability in capabilities:
        gate.require_capability(ctx, capability)

    logger.debug(
        "Authorized identity=%s role=%s gate=%s path=%s method=%s",
        ctx.identity.identity_id,
        ctx.role,
        required.value,
        path,
        method,
    )
    request.state.authz = ctx
