from __future__ import annotations

from typing import Any, Iterable, Mapping

from app.schemas.board import BoardResponse, Lane
from app.schemas.ticket import TicketRead

LANES: tuple[tuple[str, str], ...] = (
    ("backlog", "Backlog"),
    ("in_sprint", "In Sprint"),
    ("in_progress", "In Progress"),
    ("done", "Done"),
)
LANE_IDS = tuple(lane_id for lane_id, _ in LANES)

PRIORITY_LABELS = {"critical": "P0", "high": "P1", "medium": "P2", "low": "P3"}
PRIORITY_COLORS = {"critical": "red", "high": "orange", "medium": "yellow", "low": "green"}


def _status_of(ticket: Any) -> str | None:
    if isinstance(ticket, Mapping):
        return ticket.get("status")
    return getattr(ticket, "status", None)


def group_into_lanes(tickets: Iterable[Any]) -> tuple[dict[str, list[Any]], list[Any]]:
    """Split tickets into the four lanes, keeping their incoming order.

    Every ticket lands in exactly one lane; anything whose status is not a lane
    id is returned separately instead of being dropped.
    """
    lanes: dict[str, list[Any]] = {lane_id: [] for lane_id in LANE_IDS}
    unplaced: list[Any] = []
    for ticket in tickets:
        status = _status_of(ticket)
        if status in lanes:
            lanes[status].append(ticket)
        else:
            unplaced.append(ticket)
    return lanes, unplaced


def build_board(tickets: Iterable[Any]) -> BoardResponse:
    lanes, unplaced = group_into_lanes(tickets)
    return BoardResponse(
        lanes=[
            Lane(id=lane_id, title=title, tickets=[TicketRead.model_validate(t) for t in lanes[lane_id]])
            for lane_id, title in LANES
        ],
        unplaced=[TicketRead.model_validate(t) for t in unplaced],
    )


def priority_label(priority: str | None) -> str:
    value = (priority or "").lower()
    return PRIORITY_LABELS.get(value, value.upper())


def priority_color(priority: str | None) -> str:
    return PRIORITY_COLORS.get((priority or "").lower(), "slate")
