from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ticketdesk.authz.capabilities import Capability
from ticketdesk.authz.context import AuthzContext
from ticketdesk.authz.errors import ForbiddenError, NotFoundError, ValidationError
from ticketdesk.authz.gate import AuthorizationGate
from ticketdesk.db.session import get_db
from ticketdesk.models.tickets import Technician, Ticket
from ticketdesk.schemas.security import MessageResponse
from ticketdesk.schemas.tickets import TicketOut, TicketUpdateIn
from ticketdesk.security.decorators import require_capability
from ticketdesk.security.dependencies import get_authz_context, get_gate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tickets", tags=["tickets"])


def _load_ticket(db: Session, ticket_id: int) -> Ticket:
    ticket = db.execute(
        select(Ticket).where(Ticket.id == ticket_id).options(selectinload(Ticket.assignees))
    ).scalar_one_or_none()
    if ticket is None:
        raise NotFoundError("Ticket not found")
    return ticket


@router.get("/{ticket_id}", response_model=TicketOut)
@require_capability(Capability.VIEW_TICKETS)
def get_ticket(ticket_id: int, db: Session = Depends(get_db)) -> TicketOut:
    return TicketOut.model_validate(_load_ticket(db, ticket_id))


@router.put("/{ticket_id}", response_model=TicketOut)
def update_ticket(
    ticket_id: int,
    body: TicketUpdateIn,
    ctx: AuthzContext = Depends(get_authz_context),
    gate: AuthorizationGate = Depends(get_gate),
    db: Session = Depends(get_db),
) -> TicketOut:
    ticket = _load_ticket(db, ticket_id)

    # Edit-all, or edit-own on a ticket assigned to the caller.
    decision = gate.authorize_edit(ctx, ticket)
    logger.debug("Ticket edit granted ticket=%s identity=%s via=%s", ticket_id, ctx.identity.identity_id, decision.reason)

    if body.assigned_to is not None:
        current = {t.id for t in ticket.assignees}
        wanted = set(body.assigned_to)
        if current != wanted:
            if not ctx.can(Capability.ASSIGN_TICKETS):
                raise ForbiddenError(
                    "You do not have permission to change ticket assignments",
                    reason="missing_capability",
                )
            technicians = list(db.scalars(select(Technician).where(Technician.id.in_(wanted))).all())
            missing = wanted - {t.id for t in technicians}
            if missing:
                raise ValidationError(f"Unknown technicians: {sorted(missing)}", reason="unknown_assignee")
            ticket.assignees = technicians

    if body.title is not None:
        ticket.title = body.title
    if body.description is not None:
        ticket.description = body.description
    if body.status is not None:
        ticket.status = body.status
    ticket.updated_at = datetime.utcnow()

    db.commit()
    return TicketOut.model_validate(_load_ticket(db, ticket_id))


@router.delete("/{ticket_id}", response_model=MessageResponse)
@require_capability(Capability.DELETE_TICKETS)
def delete_ticket(ticket_id: int, db: Session = Depends(get_db)) -> MessageResponse:
    ticket = _load_ticket(db, ticket_id)
    db.delete(ticket)
    db.commit()
    return MessageResponse(message="Ticket deleted")
