from __future__ import annotations

from datetime import datetime

from ticketdesk.schemas.security import CamelModel


class TechnicianOut(CamelModel):
    id: int
    name: str
    email: str


class TicketOut(CamelModel):
    id: int
    title: str
    description: str | None
    status: str
    assignees: list[TechnicianOut]
    created_at: datetime
    updated_at: datetime


class TicketUpdateIn(CamelModel):
    title: str | None = None
    description: str | None = None
    status: str | None = None
    # Technician ids; None leaves assignment untouched.
    assigned_to: list[int] | None = None
