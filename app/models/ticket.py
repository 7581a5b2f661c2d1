from __future__ import annotations

from nanoid import generate
from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class Ticket(TimestampMixin, Base):
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=lambda: generate(size=16))
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    priority: Mapped[str] = mapped_column(String(32), nullable=False, default="medium")
    story_points: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="backlog", index=True)
    sprint_id: Mapped[str | None] = mapped_column(ForeignKey("sprints.id"), nullable=True)
