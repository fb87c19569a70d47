"""In-process repository backend (DB_BACKEND=memory)."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from threading import RLock
from typing import Any

from keno.errors import ConflictError, NotFoundError
from keno.models.status import BetStatus, GameStatus
from keno.repositories.base import (
    BET_FIELDS,
    GAME_FIELDS,
    BetRecord,
    GameRecord,
    KenoRepository,
    UserRecord,
    check_fields,
    normalize_numbers,
    utcnow,
)

_OPEN_STATUSES = (GameStatus.WAITING, GameStatus.DRAWING)


class InMemoryKenoRepository(KenoRepository):
    """Dict-backed repository. All state is lost when the process exits."""

    def __init__(self, first_game_number: int = 1247) -> None:
        self._lock = RLock()
        self._users: dict[int, UserRecord] = {}
        self._games: dict[int, GameRecord] = {}
        self._bets: dict[int, BetRecord] = {}
        self._next_user_id = 1
        self._next_game_id = 1
        self._next_bet_id = 1
        self._next_game_number = int(first_game_number)

    # Players

    def get_user(self, user_id: int) -> UserRecord | None:
        with self._lock:
            return self._users.get(int(user_id))

    def get_user_by_username(self, username: str) -> UserRecord | None:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return user
            return None

    def create_user(self, username: str, balance: int = 0) -> UserRecord:
        with self._lock:
            if self.get_user_by_username(username) is not None:
                raise ConflictError(message=f"User {username!r} already exists")
            user = UserRecord(id=self._next_user_id, username=str(username), balance=int(balance))
            self._users[user.id] = user
            self._next_user_id += 1
            return user

    def _require_user(self, user_id: int) -> UserRecord:
        user = self._users.get(int(user_id))
        if user is None:
            raise NotFoundError(message=f"User {user_id} not found")
        return user

    def update_user_balance(self, user_id: int, balance: int) -> UserRecord:
        with self._lock:
            user = replace(self._require_user(user_id), balance=int(balance))
            self._users[user.id] = user
            return user

    def debit_user_balance(self, user_id: int, amount: int) -> int | None:
        with self._lock:
            user = self._require_user(user_id)
            if user.balance < amount:
                return None
            user = replace(user, balance=user.balance - int(amount))
            self._users[user.id] = user
            return user.balance

    def credit_user_balance(self, user_id: int, amount: int) -> int:
        with self._lock:
            user = self._require_user(user_id)
            user = replace(user, balance=user.balance + int(amount))
            self._users[user.id] = user
            return user.balance

    # Games

    def get_game(self, game_id: int) -> GameRecord | None:
        with self._lock:
            return self._games.get(int(game_id))

    def get_current_game(self) -> GameRecord | None:
        with self._lock:
            open_games = self.get_open_games()
            return open_games[-1] if open_games else None

    def get_open_games(self) -> Sequence[GameRecord]:
        with self._lock:
            return [g for _, g in sorted(self._games.items()) if g.status in _OPEN_STATUSES]

    def create_game(
        self,
        game_number_hint: int,
        drawn_numbers: Iterable[int],
        status: GameStatus,
    ) -> GameRecord:
        with self._lock:
            number = max(int(game_number_hint or 0), self._next_game_number)
            game = GameRecord(
                id=self._next_game_id,
                game_number=number,
                drawn_numbers=normalize_numbers(drawn_numbers),
                status=GameStatus(status),
                started_at=utcnow(),
            )
            self._games[game.id] = game
            self._next_game_id += 1
            self._next_game_number = number + 1
            return game

    def update_game(self, game_id: int, **fields: Any) -> GameRecord:
        check_fields(fields, GAME_FIELDS, "game")
        with self._lock:
            game = self._games.get(int(game_id))
            if game is None:
                raise NotFoundError(message=f"Game {game_id} not found")
            if game.status is GameStatus.COMPLETED:
                raise ConflictError(message=f"Game {game.game_number} is already completed")

            changes: dict[str, Any] = dict(fields)
            if "status" in changes:
                changes["status"] = GameStatus(changes["status"])
            if "drawn_numbers" in changes:
                changes["drawn_numbers"] = normalize_numbers(changes["drawn_numbers"])
            game = replace(game, **changes)
            self._games[game.id] = game
            return game

    def get_game_history(self, limit: int = 10) -> Sequence[GameRecord]:
        with self._lock:
            completed = [g for g in self._games.values() if g.status is GameStatus.COMPLETED]
            completed.sort(key=lambda g: (g.started_at, g.id), reverse=True)
            return completed[: max(0, int(limit))]

    # Bets

    def create_bet(
        self,
        user_id: int,
        game_id: int,
        selected_numbers: Iterable[int],
        wager_amount: int,
    ) -> BetRecord:
        with self._lock:
            self._require_user(user_id)
            if int(game_id) not in self._games:
                raise NotFoundError(message=f"Game {game_id} not found")
            bet = BetRecord(
                id=self._next_bet_id,
                user_id=int(user_id),
                game_id=int(game_id),
                selected_numbers=normalize_numbers(selected_numbers),
                wager_amount=int(wager_amount),
                status=BetStatus.ACTIVE,
                created_at=utcnow(),
            )
            self._bets[bet.id] = bet
            self._next_bet_id += 1
            return bet

    def get_bet(self, bet_id: int) -> BetRecord | None:
        with self._lock:
            return self._bets.get(int(bet_id))

    def get_bets_for_game(self, game_id: int) -> Sequence[BetRecord]:
        with self._lock:
            return [b for _, b in sorted(self._bets.items()) if b.game_id == int(game_id)]

    def get_user_bets(self, user_id: int, game_id: int | None = None) -> Sequence[BetRecord]:
        with self._lock:
            return [
                b
                for _, b in sorted(self._bets.items(), reverse=True)
                if b.user_id == int(user_id) and (game_id is None or b.game_id == int(game_id))
            ]

    def update_bet(self, bet_id: int, expected_status: BetStatus | None = None, **fields: Any) -> bool:
        check_fields(fields, BET_FIELDS, "bet")
        with self._lock:
            bet = self._bets.get(int(bet_id))
            if bet is None:
                return False
            if expected_status is not None and bet.status is not BetStatus(expected_status):
                return False

            changes: dict[str, Any] = dict(fields)
            if "status" in changes:
                changes["status"] = BetStatus(changes["status"])
            self._bets[bet.id] = replace(bet, **changes)
            return True
