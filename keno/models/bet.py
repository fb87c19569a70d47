"""Keno bet model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from keno.models.base import Base
from keno.models.status import BetStatus


class KenoBet(Base):
    """A wager on a set of numbers for one game."""

    __tablename__ = "keno_bets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    game_id: Mapped[int] = mapped_column(Integer, ForeignKey("keno_games.id"), index=True, nullable=False)
    selected_numbers: Mapped[list[int]] = mapped_column(JSON, nullable=False)
    wager_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    win_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)  # null until settled
    matched_numbers: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=BetStatus.ACTIVE.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
