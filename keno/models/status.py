"""Lifecycle states for games and bets."""

from __future__ import annotations

from enum import Enum


class GameStatus(str, Enum):
    WAITING = "waiting"
    DRAWING = "drawing"
    COMPLETED = "completed"


class BetStatus(str, Enum):
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"
