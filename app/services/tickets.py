from __future__ import annotations

from typing import Any, Iterable

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.core.errors import TicketNotFoundError
from app.models.base import utcnow
from app.models.ticket import Ticket
from app.schemas.ticket import EDITABLE_FIELDS

# Columns the board and planner read; mirrors the projection the pages use.
LIST_COLUMNS = (
    Ticket.id,
    Ticket.title,
    Ticket.description,
    Ticket.type,
    Ticket.priority,
    Ticket.story_points,
    Ticket.status,
    Ticket.sprint_id,
    Ticket.created_at,
    Ticket.updated_at,
)


class TicketService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_tickets(self, *, statuses: Iterable[str] | None = None) -> list[dict[str, Any]]:
        stmt = select(*LIST_COLUMNS)
        wanted = list(statuses or [])
        if len(wanted) == 1:
            stmt = stmt.where(Ticket.status == wanted[0])
        elif wanted:
            stmt = stmt.where(Ticket.status.in_(wanted))
        # id breaks ties between rows inserted within the same clock tick
        stmt = stmt.order_by(Ticket.created_at.desc(), Ticket.id.desc())
        logger.debug("Listing tickets statuses={statuses}", statuses=wanted or "all")
        return [dict(row._mapping) for row in self.session.execute(stmt)]

    def get_ticket(self, *, ticket_id: str) -> Ticket | None:
        return self.session.get(Ticket, ticket_id)

    def require_ticket(self, *, ticket_id: str) -> Ticket:
        ticket = self.get_ticket(ticket_id=ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket

    def create_ticket(
        self,
        *,
        title: str,
        type: str,
        priority: str,
        description: str | None = None,
        story_points: int | None = None,
        status: str = "backlog",
    ) -> Ticket:
        ticket = Ticket(
            title=title,
            description=description,
            type=type,
            priority=priority,
            story_points=story_points,
            status=status,
        )
        self.session.add(ticket)
        self.session.flush()
        logger.info("Created ticket id={ticket_id} title={title}", ticket_id=ticket.id, title=title)
        return ticket

    def update_ticket(self, *, ticket_id: str, fields: dict[str, Any]) -> Ticket:
        ticket = self.require_ticket(ticket_id=ticket_id)
        changes = {key: value for key, value in fields.items() if key in EDITABLE_FIELDS}
        for key, value in changes.items():
            setattr(ticket, key, value)
        # Last write wins: whatever committed most recently is authoritative.
        ticket.updated_at = utcnow()
        self.session.flush()
        logger.info("Updated ticket id={ticket_id} fields={fields}", ticket_id=ticket_id, fields=sorted(changes))
        return ticket

    def set_status(self, *, ticket_id: str, status: str) -> Ticket:
        ticket = self.require_ticket(ticket_id=ticket_id)
        previous = ticket.status
        ticket.status = status
        ticket.updated_at = utcnow()
        self.session.flush()
        logger.info(
            "Moved ticket id={ticket_id} {previous} -> {status}",
            ticket_id=ticket_id,
            previous=previous,
            status=status,
        )
        return ticket

    def delete_ticket(self, *, ticket_id: str) -> bool:
        ticket = self.get_ticket(ticket_id=ticket_id)
        if ticket is None:
            logger.debug("Delete requested for missing ticket id={ticket_id}", ticket_id=ticket_id)
            return False
        self.session.delete(ticket)
        self.session.flush()
        logger.info("Deleted ticket id={ticket_id}", ticket_id=ticket_id)
        return True

    def assign_to_sprint(self, *, ticket_ids: list[str], sprint_id: str) -> int:
        stmt = (
            update(Ticket)
            .where(Ticket.id.in_(ticket_ids))
            .values(status="in_sprint", sprint_id=sprint_id, updated_at=utcnow())
        )
        result = self.session.execute(stmt)
        logger.info(
            "Assigned {count} tickets to sprint id={sprint_id}",
            count=result.rowcount,
            sprint_id=sprint_id,
        )
        return result.rowcount


def get_ticket_service(session: Session) -> TicketService:
    return TicketService(session=session)
