"""Scoring and paying out the bets of a finished game."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from keno.errors import NotFoundError
from keno.models.status import BetStatus
from keno.repositories.base import BetRecord, KenoRepository
from keno.services.payout_table import PayoutTable
from keno.services.rtp_analyzer import win_amount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BetOutcome:
    bet_id: int
    matched_numbers: int
    multiplier: Decimal
    win_amount: int

    @property
    def status(self) -> BetStatus:
        return BetStatus.WON if self.win_amount > 0 else BetStatus.LOST


@dataclass
class SettlementSummary:
    game_id: int
    settled: int = 0
    skipped: int = 0
    failed: int = 0
    winners: int = 0
    total_wagered: int = 0
    total_paid: int = 0


class SettlementEngine:
    """Settle every bet of a game exactly once.

    A bet is only scored while it is still `active`; the status change is a
    compare-and-set in the repository and the balance is credited only when
    that change applied, so running `settle` again for the same game pays
    nothing twice.
    """

    def __init__(self, repository: KenoRepository, payout_table: PayoutTable) -> None:
        self._repo = repository
        self._table = payout_table

    def score(self, bet: BetRecord, drawn_numbers: Iterable[int]) -> BetOutcome:
        drawn = frozenset(int(n) for n in drawn_numbers)
        selected = frozenset(bet.selected_numbers)
        matches = len(selected & drawn)
        multiplier = self._table.get_multiplier(len(selected), matches)
        return BetOutcome(
            bet_id=bet.id,
            matched_numbers=matches,
            multiplier=multiplier,
            win_amount=win_amount(bet.wager_amount, multiplier),
        )

    def _settle_bet(self, bet: BetRecord, drawn: frozenset[int], summary: SettlementSummary) -> None:
        if self._repo.get_user(bet.user_id) is None:
            raise NotFoundError(message=f"User {bet.user_id} not found")

        outcome = self.score(bet, drawn)
        applied = self._repo.update_bet(
            bet.id,
            expected_status=BetStatus.ACTIVE,
            status=outcome.status,
            win_amount=outcome.win_amount,
            matched_numbers=outcome.matched_numbers,
        )
        if not applied:
            summary.skipped += 1
            return

        if outcome.win_amount > 0:
            self._repo.credit_user_balance(bet.user_id, outcome.win_amount)
            summary.winners += 1
            summary.total_paid += outcome.win_amount
        summary.settled += 1
        summary.total_wagered += bet.wager_amount

    def settle(self, game_id: int, drawn_numbers: Iterable[int]) -> SettlementSummary:
        drawn = frozenset(int(n) for n in drawn_numbers)
        summary = SettlementSummary(game_id=int(game_id))

        for bet in self._repo.get_bets_for_game(game_id):
            if bet.status is not BetStatus.ACTIVE:
                summary.skipped += 1
                continue
            try:
                self._settle_bet(bet, drawn, summary)
            except Exception:
                summary.failed += 1
                logger.exception("Failed to settle bet %s of game %s", bet.id, game_id)

        logger.info(
            "Settled game %s: settled=%s skipped=%s failed=%s winners=%s wagered=%s paid=%s",
            game_id,
            summary.settled,
            summary.skipped,
            summary.failed,
            summary.winners,
            summary.total_wagered,
            summary.total_paid,
        )
        return summary
