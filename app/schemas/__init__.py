from .board import BoardResponse, Lane
from .sprint import SprintPlan, SprintRead, StartSprintPayload
from .ticket import (
    TICKET_PRIORITIES,
    TICKET_STATUSES,
    TicketCreate,
    TicketRead,
    TicketStatusUpdate,
    TicketUpdate,
)

__all__ = [
    "BoardResponse",
    "Lane",
    "SprintPlan",
    "SprintRead",
    "StartSprintPayload",
    "TICKET_PRIORITIES",
    "TICKET_STATUSES",
    "TicketCreate",
    "TicketRead",
    "TicketStatusUpdate",
    "TicketUpdate",
]
