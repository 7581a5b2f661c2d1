from __future__ import annotations

from nanoid import generate
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class Sprint(TimestampMixin, Base):
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=lambda: generate(size=16))
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    total_story_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
