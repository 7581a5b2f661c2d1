from __future__ import annotations

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import SprintNotFoundError, TicketNotFoundError
from app.models.sprint import Sprint
from app.models.ticket import Ticket
from app.services.tickets import TicketService


class SprintService:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.tickets = TicketService(session=session)

    def start_sprint(self, *, capacity: int, ticket_ids: list[str]) -> Sprint:
        """Commit a proposed sprint: one sprint row, then flip exactly ``ticket_ids`` to ``in_sprint``.

        The total is computed from the stored story points, not from whatever the
        planning workflow reported, so the sprint row always agrees with its tickets.
        Both writes share the request's session and commit together.
        """
        if capacity <= 0:
            raise ValueError("Capacity must be a positive number")
        if not ticket_ids:
            raise ValueError("At least one ticket is required to start a sprint")

        rows = list(self.session.scalars(select(Ticket).where(Ticket.id.in_(ticket_ids))))
        found = {ticket.id for ticket in rows}
        missing = [ticket_id for ticket_id in ticket_ids if ticket_id not in found]
        if missing:
            raise TicketNotFoundError(", ".join(missing))

        total = sum(ticket.story_points or 0 for ticket in rows)
        if total > capacity:
            logger.warning(
                "Sprint exceeds capacity: {total} points for capacity {capacity}",
                total=total,
                capacity=capacity,
            )

        sprint = Sprint(capacity=capacity, total_story_points=total)
        self.session.add(sprint)
        self.session.flush()

        self.tickets.assign_to_sprint(ticket_ids=ticket_ids, sprint_id=sprint.id)
        logger.info(
            "Started sprint id={sprint_id} tickets={count} points={total}",
            sprint_id=sprint.id,
            count=len(ticket_ids),
            total=total,
        )
        return sprint

    def get_sprint(self, *, sprint_id: str) -> Sprint | None:
        return self.session.get(Sprint, sprint_id)

    def require_sprint(self, *, sprint_id: str) -> Sprint:
        sprint = self.get_sprint(sprint_id=sprint_id)
        if sprint is None:
            raise SprintNotFoundError(sprint_id)
        return sprint

    def sprint_tickets(self, *, sprint_id: str) -> list[Ticket]:
        stmt = select(Ticket).where(Ticket.sprint_id == sprint_id).order_by(Ticket.created_at.desc())
        return list(self.session.scalars(stmt))


def get_sprint_service(session: Session) -> SprintService:
    return SprintService(session=session)
