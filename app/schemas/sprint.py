from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ticket import TicketRead


class StartSprintPayload(BaseModel):
    capacity: int = Field(gt=0)
    ticket_ids: list[str] = Field(min_length=1)

    @field_validator("ticket_ids")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        seen: dict[str, None] = {}
        for ticket_id in value:
            cleaned = ticket_id.strip()
            if not cleaned:
                raise ValueError("ticket ids must not be empty")
            seen.setdefault(cleaned, None)
        return list(seen)


class SprintRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    capacity: int
    total_story_points: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    tickets: list[TicketRead] = Field(default_factory=list)


class SprintPlan(BaseModel):
    """A proposed sprint as returned by the planning workflow, after normalization."""

    tickets: list[dict[str, Any]] = Field(default_factory=list)
    total_points: int = 0
    source_shape: str

    @property
    def ticket_ids(self) -> list[str]:
        return [str(ticket["id"]) for ticket in self.tickets if ticket.get("id") is not None]
