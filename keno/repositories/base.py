"""Repository contract for players, games and bets.

Records returned by repositories are frozen dataclasses detached from any
database session, so they can be handed across threads (scheduler, request
handlers) safely.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from keno.models.status import BetStatus, GameStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class UserRecord:
    id: int
    username: str
    balance: int


@dataclass(frozen=True)
class GameRecord:
    id: int
    game_number: int
    drawn_numbers: tuple[int, ...]
    status: GameStatus
    started_at: datetime
    completed_at: datetime | None = None


@dataclass(frozen=True)
class BetRecord:
    id: int
    user_id: int
    game_id: int
    selected_numbers: tuple[int, ...]
    wager_amount: int
    status: BetStatus
    created_at: datetime
    win_amount: int | None = None
    matched_numbers: int | None = None


GAME_FIELDS = frozenset({"status", "drawn_numbers", "completed_at"})
BET_FIELDS = frozenset({"status", "win_amount", "matched_numbers"})


def check_fields(fields: dict[str, Any], allowed: frozenset[str], kind: str) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Cannot update {kind} fields: {', '.join(sorted(unknown))}")


def normalize_numbers(numbers: Iterable[int]) -> tuple[int, ...]:
    return tuple(int(n) for n in numbers)


class KenoRepository(ABC):
    """Persistence operations the game core depends on."""

    # Players

    @abstractmethod
    def get_user(self, user_id: int) -> UserRecord | None: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> UserRecord | None: ...

    @abstractmethod
    def create_user(self, username: str, balance: int = 0) -> UserRecord: ...

    @abstractmethod
    def update_user_balance(self, user_id: int, balance: int) -> UserRecord:
        """Overwrite the balance. Raises NotFoundError for unknown users."""

    @abstractmethod
    def debit_user_balance(self, user_id: int, amount: int) -> int | None:
        """Atomically subtract `amount`.

        Returns the new balance, or None when the balance is too low (nothing is
        changed in that case). Raises NotFoundError for unknown users.
        """

    @abstractmethod
    def credit_user_balance(self, user_id: int, amount: int) -> int:
        """Atomically add `amount` and return the new balance."""

    # Games

    @abstractmethod
    def get_game(self, game_id: int) -> GameRecord | None: ...

    @abstractmethod
    def get_current_game(self) -> GameRecord | None:
        """Newest game still waiting or drawing."""

    @abstractmethod
    def get_open_games(self) -> Sequence[GameRecord]:
        """All games still waiting or drawing, oldest first."""

    @abstractmethod
    def create_game(
        self,
        game_number_hint: int,
        drawn_numbers: Iterable[int],
        status: GameStatus,
    ) -> GameRecord:
        """Create a game.

        The game number is the next number in sequence, or the hint if that is
        larger.
        """

    @abstractmethod
    def update_game(self, game_id: int, **fields: Any) -> GameRecord:
        """Update status/drawn_numbers/completed_at.

        Raises ConflictError if the game is already completed.
        """

    @abstractmethod
    def get_game_history(self, limit: int = 10) -> Sequence[GameRecord]:
        """Completed games, newest first."""

    # Bets

    @abstractmethod
    def create_bet(
        self,
        user_id: int,
        game_id: int,
        selected_numbers: Iterable[int],
        wager_amount: int,
    ) -> BetRecord: ...

    @abstractmethod
    def get_bet(self, bet_id: int) -> BetRecord | None: ...

    @abstractmethod
    def get_bets_for_game(self, game_id: int) -> Sequence[BetRecord]: ...

    @abstractmethod
    def get_user_bets(self, user_id: int, game_id: int | None = None) -> Sequence[BetRecord]: ...

    @abstractmethod
    def update_bet(self, bet_id: int, expected_status: BetStatus | None = None, **fields: Any) -> bool:
        """Update status/win_amount/matched_numbers.

        When `expected_status` is given the update only applies if the bet is
        still in that status. Returns whether a row was changed.
        """
