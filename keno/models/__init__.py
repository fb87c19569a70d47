"""ORM models."""

from keno.models.bet import KenoBet
from keno.models.game import KenoGame
from keno.models.status import BetStatus, GameStatus
from keno.models.user import User

__all__ = ["BetStatus", "GameStatus", "KenoBet", "KenoGame", "User"]
