"""Keno game model.

One row per game instance. Rows are append-only: a game is created in the
`waiting` phase and later moved to `drawing` and `completed`; it is never
deleted.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from keno.models.base import Base
from keno.models.status import GameStatus


class KenoGame(Base):
    """A single game (draw) instance."""

    __tablename__ = "keno_games"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    game_number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    drawn_numbers: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=GameStatus.WAITING.value, index=True)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
