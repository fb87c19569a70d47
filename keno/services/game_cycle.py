"""Timed game cycle: countdown, drawing, settling, break.

The cycle owns a single `GameCycleState`. Only the scheduler thread mutates
it; request handlers go through `snapshot()` and `betting_window()`. Phase
changes happen under the cycle lock and events are published after the lock
is released, so a slow client can never hold up the scheduler.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from keno.config import KenoSettings
from keno.errors import BettingClosedError
from keno.models.status import GameStatus
from keno.repositories.base import GameRecord, KenoRepository, utcnow
from keno.schemas.game import GameSchema
from keno.services.broadcaster import Broadcaster, Event, make_event
from keno.services.draw_generator import DrawGenerator
from keno.services.settlement_service import SettlementEngine, SettlementSummary

logger = logging.getLogger(__name__)

_game_schema = GameSchema()


class CyclePhase(str, Enum):
    IDLE = "idle"
    COUNTDOWN = "countdown"
    DRAWING = "drawing"
    SETTLING = "settling"
    BREAK = "break"


@dataclass
class GameCycleState:
    current_game: GameRecord | None = None
    drawing_sequence: list[int] = field(default_factory=list)
    current_draw_index: int = 0
    is_drawing: bool = False
    phase: CyclePhase = CyclePhase.IDLE
    next_phase_at: float = 0.0  # epoch seconds


class CycleStopped(Exception):
    """Raised inside the loop when `stop()` was requested during a wait."""


class GameCycle:
    """Drives one game at a time through its phases.

    `clock` returns epoch seconds; `sleep(seconds)` returns True when the
    cycle should stop. Both default to wall-clock time and the stop event and
    can be replaced to run the cycle on a simulated clock.
    """

    def __init__(
        self,
        repository: KenoRepository,
        draw_generator: DrawGenerator,
        settlement: SettlementEngine,
        broadcaster: Broadcaster,
        settings: KenoSettings,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], bool | None] | None = None,
    ) -> None:
        self._repo = repository
        self._draws = draw_generator
        self._settlement = settlement
        self._broadcaster = broadcaster
        self._settings = settings
        self._clock = clock or time.time
        self._stop_event = threading.Event()
        self._sleep = sleep or self._stop_event.wait
        self._lock = threading.RLock()
        self._state = GameCycleState()
        self._thread: threading.Thread | None = None
        self.last_settlement: SettlementSummary | None = None

    # Accessors

    @property
    def phase(self) -> CyclePhase:
        with self._lock:
            return self._state.phase

    @property
    def current_game(self) -> GameRecord | None:
        with self._lock:
            return self._state.current_game

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def snapshot(self) -> dict[str, Any]:
        """Complete client-facing state. Unrevealed numbers are never included.

        A subscriber joining mid-reveal may receive a `numberDrawn` whose
        `index` is already covered by `currentDrawIndex`; clients apply
        deltas by `index`, so such a repeat is a no-op.
        """

        with self._lock:
            s = self._state
            game = s.current_game
            return {
                "currentGame": _game_schema.dump(game) if game is not None else None,
                "phase": s.phase.value,
                "drawnNumbers": list(s.drawing_sequence[: s.current_draw_index]),
                "currentDrawIndex": s.current_draw_index,
                "totalNumbers": self._settings.draw_size,
                "isDrawing": s.is_drawing,
                "nextDrawTime": int(s.next_phase_at * 1000),
            }

    def snapshot_event(self) -> Event:
        return make_event("gameState", self.snapshot())

    @contextmanager
    def betting_window(self) -> Iterator[GameRecord]:
        """Hold the betting window open while a bet is recorded.

        Yields the game accepting bets. The drawing phase cannot begin until
        the block exits, so a bet accepted here is always settled with its
        game. Raises BettingClosedError outside the countdown.
        """

        with self._lock:
            game = self._state.current_game
            if self._state.phase is not CyclePhase.COUNTDOWN or game is None:
                raise BettingClosedError(
                    message="Betting closed - drawing in progress",
                    details={"phase": self._state.phase.value},
                )
            yield game

    # Phase transitions

    def begin_countdown(self) -> GameRecord:
        """Create the next game and pre-generate (but do not reveal) its draw."""

        sequence = self._draws.draw()
        game = self._repo.create_game(0, [], GameStatus.WAITING)
        with self._lock:
            self._state = GameCycleState(
                current_game=game,
                drawing_sequence=sequence,
                phase=CyclePhase.COUNTDOWN,
                next_phase_at=self._clock() + self._settings.countdown_seconds,
            )
        logger.info("Game %s (id=%s) open for bets", game.game_number, game.id)
        self._broadcaster.publish("gameState", self.snapshot())
        return game

    def start_drawing(self) -> bool:
        """Close betting and start revealing. No-op if already drawing."""

        with self._lock:
            s = self._state
            if s.is_drawing or s.phase is not CyclePhase.COUNTDOWN or s.current_game is None:
                return False
            game = self._repo.update_game(s.current_game.id, status=GameStatus.DRAWING)
            s.current_game = game
            s.is_drawing = True
            s.phase = CyclePhase.DRAWING
            s.current_draw_index = 0
            s.next_phase_at = self._clock() + self._settings.drawing_seconds

        logger.info("Game %s drawing started", game.game_number)
        self._broadcaster.publish("drawingStarted", {"gameId": game.id})
        return True

    def reveal_next_number(self) -> int | None:
        """Reveal the next pre-generated number, None when all are out."""

        with self._lock:
            s = self._state
            if not s.is_drawing or s.current_draw_index >= len(s.drawing_sequence):
                return None
            number = s.drawing_sequence[s.current_draw_index]
            s.current_draw_index += 1
            index = s.current_draw_index
            total = len(s.drawing_sequence)

        self._broadcaster.publish("numberDrawn", {"number": number, "index": index, "total": total})
        return number

    def complete_game(self) -> GameRecord | None:
        """Settle all bets, then mark the game completed and announce it.

        Runs at most once per game: only a fully revealed drawing phase can
        move to settling.
        """

        with self._lock:
            s = self._state
            game = s.current_game
            if s.phase is not CyclePhase.DRAWING or game is None:
                return None
            if s.current_draw_index < len(s.drawing_sequence):
                logger.warning(
                    "Game %s completion requested with %s/%s numbers revealed",
                    game.game_number,
                    s.current_draw_index,
                    len(s.drawing_sequence),
                )
                return None
            s.phase = CyclePhase.SETTLING
            sequence = list(s.drawing_sequence)

        try:
            self.last_settlement = self._settlement.settle(game.id, sequence)
        except Exception:
            # Bets left active here are reconciled out-of-band; the cycle goes on.
            logger.exception("Settlement of game %s aborted", game.game_number)

        try:
            game = self._repo.update_game(
                game.id,
                status=GameStatus.COMPLETED,
                drawn_numbers=sequence,
                completed_at=utcnow(),
            )
        except Exception:
            # The stored game stays open and is reported as orphaned on restart.
            logger.exception("Could not mark game %s completed", game.game_number)
        with self._lock:
            s.current_game = game
            s.is_drawing = False
            s.phase = CyclePhase.BREAK
            s.next_phase_at = self._clock() + self._settings.break_seconds
            next_game_time = int(s.next_phase_at * 1000)

        logger.info("Game %s completed", game.game_number)
        self._broadcaster.publish(
            "gameCompleted",
            {"gameId": game.id, "drawnNumbers": sequence, "nextGameTime": next_game_time},
        )
        return game

    # Scheduling

    def _wait_until(self, deadline: float) -> None:
        remaining = deadline - self._clock()
        if remaining > 0 and self._sleep(remaining):
            raise CycleStopped()
        if self._stop_event.is_set():
            raise CycleStopped()

    def run_cycle(self) -> GameRecord | None:
        """Run one full game: countdown, drawing, settling, break."""

        self.begin_countdown()
        with self._lock:
            countdown_ends = self._state.next_phase_at
        self._wait_until(countdown_ends)

        self.start_drawing()
        started = self._clock()
        interval = self._settings.draw_interval_seconds
        # Ticks are anchored to the drawing start so reveals do not drift.
        for tick in range(1, self._settings.draw_size + 1):
            self._wait_until(started + interval * tick)
            if self.reveal_next_number() is None:
                break

        game = self.complete_game()
        with self._lock:
            break_ends = self._state.next_phase_at
        self._wait_until(break_ends)
        return game

    def run_forever(self) -> None:
        logger.info("Game cycle started")
        while not self._stop_event.is_set():
            try:
                self.run_cycle()
            except CycleStopped:
                break
            except Exception:
                logger.exception("Game cycle failed; starting a fresh countdown")
                with self._lock:
                    self._state = GameCycleState()
                if self._sleep(self._settings.break_seconds):
                    break
        logger.info("Game cycle stopped")

    def report_orphaned_games(self) -> list[GameRecord]:
        """Log games a previous process left waiting or drawing.

        Cycle state lives in memory only, so such games are not resumed and
        their active bets stay unsettled.
        """

        orphans = list(self._repo.get_open_games())
        for game in orphans:
            bets = self._repo.get_bets_for_game(game.id)
            logger.warning(
                "Game %s (id=%s) was left %s by a previous run; %s bet(s) remain unsettled",
                game.game_number,
                game.id,
                game.status.value,
                len(bets),
            )
        return orphans

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self.report_orphaned_games()
        self._thread = threading.Thread(target=self.run_forever, name="keno-game-cycle", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
