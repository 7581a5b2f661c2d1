from __future__ import annotations

from typing import Any


class MomentumError(Exception):
    """Base class for errors raised by the backlog service and its clients."""


class TicketNotFoundError(MomentumError):
    def __init__(self, ticket_id: str) -> None:
        super().__init__(f"Ticket {ticket_id} not found")
        self.ticket_id = ticket_id


class SprintNotFoundError(MomentumError):
    def __init__(self, sprint_id: str) -> None:
        super().__init__(f"Sprint {sprint_id} not found")
        self.sprint_id = sprint_id


class WorkflowNotConfiguredError(MomentumError):
    def __init__(self, setting: str) -> None:
        super().__init__(f"{setting} is not set")
        self.setting = setting


class WorkflowError(MomentumError):
    """The upstream n8n workflow could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, *, status_code: int = 500, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class SprintPlanFormatError(MomentumError, ValueError):
    pass


class BoardSyncError(MomentumError):
    """A board write failed and local state was re-synchronised from the store."""
