"""Repository layer for SQL persistence (DB_BACKEND=sql)."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, sessionmaker

from keno.db import session_scope
from keno.errors import ConflictError, NotFoundError
from keno.models.bet import KenoBet
from keno.models.game import KenoGame
from keno.models.status import BetStatus, GameStatus
from keno.models.user import User
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

_OPEN_STATUSES = (GameStatus.WAITING.value, GameStatus.DRAWING.value)


def _user_record(user: User) -> UserRecord:
    return UserRecord(id=int(user.id), username=str(user.username), balance=int(user.balance))


def _game_record(game: KenoGame) -> GameRecord:
    return GameRecord(
        id=int(game.id),
        game_number=int(game.game_number),
        drawn_numbers=normalize_numbers(game.drawn_numbers or ()),
        status=GameStatus(game.status),
        started_at=game.started_at,
        completed_at=game.completed_at,
    )


def _bet_record(bet: KenoBet) -> BetRecord:
    return BetRecord(
        id=int(bet.id),
        user_id=int(bet.user_id),
        game_id=int(bet.game_id),
        selected_numbers=normalize_numbers(bet.selected_numbers or ()),
        wager_amount=int(bet.wager_amount),
        status=BetStatus(bet.status),
        created_at=bet.created_at,
        win_amount=None if bet.win_amount is None else int(bet.win_amount),
        matched_numbers=None if bet.matched_numbers is None else int(bet.matched_numbers),
    )


def _column_value(value: Any) -> Any:
    if isinstance(value, (GameStatus, BetStatus)):
        return value.value
    if isinstance(value, tuple):
        return list(value)
    return value


class SqlKenoRepository(KenoRepository):
    """SQLAlchemy-backed repository. Each call runs in its own transaction."""

    def __init__(self, session_factory: sessionmaker[Session], first_game_number: int = 1247) -> None:
        self._session_factory = session_factory
        self._first_game_number = int(first_game_number)

    # Players

    def get_user(self, user_id: int) -> UserRecord | None:
        with session_scope(self._session_factory) as session:
            user = session.get(User, int(user_id))
            return _user_record(user) if user is not None else None

    def get_user_by_username(self, username: str) -> UserRecord | None:
        with session_scope(self._session_factory) as session:
            user = session.scalars(select(User).where(User.username == username)).first()
            return _user_record(user) if user is not None else None

    def create_user(self, username: str, balance: int = 0) -> UserRecord:
        with session_scope(self._session_factory) as session:
            user = User(username=str(username), balance=int(balance))
            session.add(user)
            session.flush()  # assign PK
            return _user_record(user)

    def update_user_balance(self, user_id: int, balance: int) -> UserRecord:
        with session_scope(self._session_factory) as session:
            user = session.get(User, int(user_id))
            if user is None:
                raise NotFoundError(message=f"User {user_id} not found")
            user.balance = int(balance)
            session.flush()
            return _user_record(user)

    def debit_user_balance(self, user_id: int, amount: int) -> int | None:
        with session_scope(self._session_factory) as session:
            result = session.execute(
                update(User)
                .where(User.id == int(user_id), User.balance >= int(amount))
                .values(balance=User.balance - int(amount))
            )
            balance = session.scalar(select(User.balance).where(User.id == int(user_id)))
            if balance is None:
                raise NotFoundError(message=f"User {user_id} not found")
            if result.rowcount == 0:
                return None
            return int(balance)

    def credit_user_balance(self, user_id: int, amount: int) -> int:
        with session_scope(self._session_factory) as session:
            result = session.execute(
                update(User).where(User.id == int(user_id)).values(balance=User.balance + int(amount))
            )
            if result.rowcount == 0:
                raise NotFoundError(message=f"User {user_id} not found")
            return int(session.scalar(select(User.balance).where(User.id == int(user_id))))

    # Games

    def get_game(self, game_id: int) -> GameRecord | None:
        with session_scope(self._session_factory) as session:
            game = session.get(KenoGame, int(game_id))
            return _game_record(game) if game is not None else None

    def get_current_game(self) -> GameRecord | None:
        with session_scope(self._session_factory) as session:
            stmt = (
                select(KenoGame)
                .where(KenoGame.status.in_(_OPEN_STATUSES))
                .order_by(KenoGame.id.desc())
                .limit(1)
            )
            game = session.scalars(stmt).first()
            return _game_record(game) if game is not None else None

    def get_open_games(self) -> Sequence[GameRecord]:
        with session_scope(self._session_factory) as session:
            stmt = select(KenoGame).where(KenoGame.status.in_(_OPEN_STATUSES)).order_by(KenoGame.id.asc())
            return [_game_record(g) for g in session.scalars(stmt).all()]

    def create_game(
        self,
        game_number_hint: int,
        drawn_numbers: Iterable[int],
        status: GameStatus,
    ) -> GameRecord:
        with session_scope(self._session_factory) as session:
            last = session.scalar(select(func.max(KenoGame.game_number)))
            next_number = self._first_game_number if last is None else int(last) + 1
            game = KenoGame(
                game_number=max(int(game_number_hint or 0), next_number),
                drawn_numbers=list(normalize_numbers(drawn_numbers)),
                status=GameStatus(status).value,
                started_at=utcnow(),
            )
            session.add(game)
            session.flush()
            return _game_record(game)

    def update_game(self, game_id: int, **fields: Any) -> GameRecord:
        check_fields(fields, GAME_FIELDS, "game")
        with session_scope(self._session_factory) as session:
            game = session.get(KenoGame, int(game_id), with_for_update=True)
            if game is None:
                raise NotFoundError(message=f"Game {game_id} not found")
            if game.status == GameStatus.COMPLETED.value:
                raise ConflictError(message=f"Game {game.game_number} is already completed")

            for name, value in fields.items():
                setattr(game, name, _column_value(value))
            session.flush()
            return _game_record(game)

    def get_game_history(self, limit: int = 10) -> Sequence[GameRecord]:
        with session_scope(self._session_factory) as session:
            stmt = (
                select(KenoGame)
                .where(KenoGame.status == GameStatus.COMPLETED.value)
                .order_by(KenoGame.started_at.desc(), KenoGame.id.desc())
                .limit(max(0, int(limit)))
            )
            return [_game_record(g) for g in session.scalars(stmt).all()]

    # Bets

    def create_bet(
        self,
        user_id: int,
        game_id: int,
        selected_numbers: Iterable[int],
        wager_amount: int,
    ) -> BetRecord:
        with session_scope(self._session_factory) as session:
            if session.get(User, int(user_id)) is None:
                raise NotFoundError(message=f"User {user_id} not found")
            if session.get(KenoGame, int(game_id)) is None:
                raise NotFoundError(message=f"Game {game_id} not found")
            bet = KenoBet(
                user_id=int(user_id),
                game_id=int(game_id),
                selected_numbers=list(normalize_numbers(selected_numbers)),
                wager_amount=int(wager_amount),
                status=BetStatus.ACTIVE.value,
                created_at=utcnow(),
            )
            session.add(bet)
            session.flush()
            return _bet_record(bet)

    def get_bet(self, bet_id: int) -> BetRecord | None:
        with session_scope(self._session_factory) as session:
            bet = session.get(KenoBet, int(bet_id))
            return _bet_record(bet) if bet is not None else None

    def get_bets_for_game(self, game_id: int) -> Sequence[BetRecord]:
        with session_scope(self._session_factory) as session:
            stmt = select(KenoBet).where(KenoBet.game_id == int(game_id)).order_by(KenoBet.id.asc())
            return [_bet_record(b) for b in session.scalars(stmt).all()]

    def get_user_bets(self, user_id: int, game_id: int | None = None) -> Sequence[BetRecord]:
        with session_scope(self._session_factory) as session:
            stmt = select(KenoBet).where(KenoBet.user_id == int(user_id))
            if game_id is not None:
                stmt = stmt.where(KenoBet.game_id == int(game_id))
            stmt = stmt.order_by(KenoBet.id.desc())
            return [_bet_record(b) for b in session.scalars(stmt).all()]

    def update_bet(self, bet_id: int, expected_status: BetStatus | None = None, **fields: Any) -> bool:
        check_fields(fields, BET_FIELDS, "bet")
        if not fields:
            return False
        with session_scope(self._session_factory) as session:
            stmt = update(KenoBet).where(KenoBet.id == int(bet_id))
            if expected_status is not None:
                stmt = stmt.where(KenoBet.status == BetStatus(expected_status).value)
            values = {name: _column_value(value) for name, value in fields.items()}
            result = session.execute(stmt.values(**values))
            return result.rowcount > 0
