from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

TICKET_STATUSES: tuple[str, ...] = ("backlog", "in_sprint", "in_progress", "done")
TICKET_PRIORITIES: tuple[str, ...] = ("low", "medium", "high", "critical")

EDITABLE_FIELDS = ("title", "description", "type", "priority", "story_points", "status")


def _normalize_status(value: str) -> str:
    normalized = (value or "").strip().lower()
    if normalized not in TICKET_STATUSES:
        raise ValueError(f"status '{value}' is not one of {', '.join(TICKET_STATUSES)}")
    return normalized


def _normalize_priority(value: str) -> str:
    normalized = (value or "").strip().lower()
    if normalized not in TICKET_PRIORITIES:
        raise ValueError(f"priority '{value}' is not one of {', '.join(TICKET_PRIORITIES)}")
    return normalized


def _parse_story_points(value: object) -> object:
    # Form inputs arrive as text; an empty field means "not estimated".
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    return value


class TicketFields(BaseModel):
    @field_validator("title", "type", check_fields=False)
    @classmethod
    def _ensure_not_empty(cls, value: str | None) -> str:
        if value is None or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("priority", check_fields=False)
    @classmethod
    def _validate_priority(cls, value: str | None) -> str:
        return _normalize_priority(value)

    @field_validator("status", check_fields=False)
    @classmethod
    def _validate_status(cls, value: str | None) -> str:
        return _normalize_status(value)

    @field_validator("story_points", mode="before", check_fields=False)
    @classmethod
    def _story_points(cls, value: object) -> object:
        return _parse_story_points(value)


class TicketCreate(TicketFields):
    title: str
    description: str | None = None
    type: str
    priority: str
    story_points: int | None = Field(default=None, ge=0)
    status: str = "backlog"


class TicketUpdate(TicketFields):
    title: str | None = None
    description: str | None = None
    type: str | None = None
    priority: str | None = None
    story_points: int | None = Field(default=None, ge=0)
    status: str | None = None


class TicketStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def _validate_status(cls, value: str) -> str:
        return _normalize_status(value)


class TicketRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None = None
    type: str
    priority: str
    story_points: int | None = None
    status: str
    sprint_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
