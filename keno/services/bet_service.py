"""Bet placement use-cases."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from keno.config import KenoSettings
from keno.errors import (
    InsufficientBalanceError,
    InvalidSelectionCountError,
    InvalidSelectionError,
    InvalidWagerError,
    NotFoundError,
)
from keno.repositories.base import BetRecord, KenoRepository, UserRecord
from keno.services.game_cycle import GameCycle

logger = logging.getLogger(__name__)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class BetService:
    """Validate and record wagers against the game currently open for bets."""

    def __init__(self, repository: KenoRepository, game_cycle: GameCycle, settings: KenoSettings) -> None:
        self._repo = repository
        self._cycle = game_cycle
        self._settings = settings

    def validate_selection(self, selected_numbers: Iterable[Any]) -> tuple[int, ...]:
        numbers = list(selected_numbers)
        max_spots = self._settings.max_spots
        if not (1 <= len(numbers) <= max_spots):
            raise InvalidSelectionCountError(
                message=f"Must select between 1 and {max_spots} numbers",
                details={"selectedNumbers": [f"Got {len(numbers)} numbers"]},
            )

        universe = self._settings.universe_size
        bad = [n for n in numbers if not _is_int(n) or not (1 <= n <= universe)]
        if bad:
            raise InvalidSelectionError(
                message=f"Numbers must be integers within 1..{universe}",
                details={"selectedNumbers": [f"Invalid: {', '.join(str(n) for n in bad)}"]},
            )
        if len(set(numbers)) != len(numbers):
            raise InvalidSelectionError(
                message="Numbers must be unique",
                details={"selectedNumbers": ["Duplicate numbers selected"]},
            )
        return tuple(sorted(numbers))

    def validate_wager(self, wager_amount: Any) -> int:
        lo, hi = self._settings.min_bet, self._settings.max_bet
        if not _is_int(wager_amount) or not (lo <= wager_amount <= hi):
            raise InvalidWagerError(
                message=f"Invalid bet amount. Must be a whole number between {lo} and {hi}",
                details={"wagerAmount": [repr(wager_amount)]},
            )
        return int(wager_amount)

    def get_user(self, user_id: int) -> UserRecord:
        user = self._repo.get_user(user_id)
        if user is None:
            raise NotFoundError(message=f"User {user_id} not found")
        return user

    def place_bet(self, user_id: int, selected_numbers: Iterable[Any], wager_amount: Any) -> BetRecord:
        """Debit the wager and record the bet on the open game.

        Rejections raise an AppError subclass and leave the balance untouched.
        """

        numbers = self.validate_selection(selected_numbers)
        wager = self.validate_wager(wager_amount)
        user = self.get_user(user_id)

        with self._cycle.betting_window() as game:
            balance = self._repo.debit_user_balance(user.id, wager)
            if balance is None:
                raise InsufficientBalanceError(
                    message="Insufficient balance",
                    details={"wagerAmount": [f"Wager {wager} exceeds balance"]},
                )
            try:
                bet = self._repo.create_bet(user.id, game.id, numbers, wager)
            except Exception:
                self._repo.credit_user_balance(user.id, wager)
                raise

        logger.info(
            "Bet %s placed: user=%s game=%s spots=%s wager=%s balance=%s",
            bet.id,
            user.id,
            game.game_number,
            len(numbers),
            wager,
            balance,
        )
        return bet

    def list_user_bets(self, user_id: int, game_id: int | None = None) -> Sequence[BetRecord]:
        self.get_user(user_id)
        return self._repo.get_user_bets(user_id, game_id)
