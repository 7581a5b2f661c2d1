from __future__ import annotations

from pydantic import BaseModel, Field

from .ticket import TicketRead


class Lane(BaseModel):
    id: str
    title: str
    tickets: list[TicketRead] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.tickets)


class BoardResponse(BaseModel):
    lanes: list[Lane]
    unplaced: list[TicketRead] = Field(default_factory=list)
