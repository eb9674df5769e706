from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from ticketdesk.authz.context import AuthzContext
from ticketdesk.authz.errors import UnauthorizedError
from ticketdesk.db.session import get_db
from ticketdesk.models.security import Identity
from ticketdesk.schemas.security import IdentityListResponse, IdentityOut, MeResponse
from ticketdesk.security.config import Gate
from ticketdesk.security.decorators import require_gate
from ticketdesk.security.dependencies import get_authz_context

router = APIRouter(tags=["identities"])


@router.get("/me", response_model=MeResponse)
def me(ctx: AuthzContext = Depends(get_authz_context), db: Session = Depends(get_db)) -> MeResponse:
    identity = db.get(Identity, ctx.identity.identity_id)
    if identity is None:
        raise UnauthorizedError("Invalid session identity", reason="unknown_identity")
    # Snapshot was evaluated for this request, so it reflects the latest role edit.
    return MeResponse(identity=IdentityOut.model_validate(identity), permissions=dict(ctx.permissions))


@router.get("/identities", response_model=IdentityListResponse)
@require_gate(Gate.ELEVATED)
def list_identities(db: Session = Depends(get_db)) -> IdentityListResponse:
    identities = db.scalars(select(Identity).order_by(Identity.id)).all()
    return IdentityListResponse(identities=[IdentityOut.model_validate(i) for i in identities])
