"""Tests for bet scoring and settlement."""

import unittest
from decimal import Decimal
from unittest import mock

from keno.models.status import BetStatus, GameStatus
from keno.repositories import InMemoryKenoRepository
from keno.services.payout_table import PayoutTable
from keno.services.settlement_service import SettlementEngine

DRAWN = list(range(1, 21))


class SettlementTest(unittest.TestCase):
    def setUp(self):
        self.repo = InMemoryKenoRepository()
        self.engine = SettlementEngine(self.repo, PayoutTable.default())
        self.user = self.repo.create_user("alice", 1000)
        self.game = self.repo.create_game(0, [], GameStatus.DRAWING)

    def _bet(self, numbers, wager, user=None):
        user = user or self.user
        self.repo.debit_user_balance(user.id, wager)
        return self.repo.create_bet(user.id, self.game.id, numbers, wager)

    def test_score_three_of_three(self):
        bet = self._bet([1, 2, 3], 30)
        outcome = self.engine.score(bet, DRAWN)
        self.assertEqual(outcome.matched_numbers, 3)
        self.assertEqual(outcome.multiplier, Decimal(50))
        self.assertEqual(outcome.win_amount, 1500)
        self.assertIs(outcome.status, BetStatus.WON)

    def test_winning_bet_is_credited(self):
        bet = self._bet([1, 2, 3], 30)
        summary = self.engine.settle(self.game.id, DRAWN)

        settled = self.repo.get_bet(bet.id)
        self.assertIs(settled.status, BetStatus.WON)
        self.assertEqual(settled.win_amount, 1500)
        self.assertEqual(settled.matched_numbers, 3)
        self.assertEqual(self.repo.get_user(self.user.id).balance, 1000 - 30 + 1500)
        self.assertEqual((summary.settled, summary.winners, summary.total_paid), (1, 1, 1500))

    def test_losing_bet(self):
        bet = self._bet([41, 42, 43], 100)
        self.engine.settle(self.game.id, DRAWN)

        settled = self.repo.get_bet(bet.id)
        self.assertIs(settled.status, BetStatus.LOST)
        self.assertEqual(settled.win_amount, 0)
        self.assertEqual(settled.matched_numbers, 0)
        self.assertEqual(self.repo.get_user(self.user.id).balance, 900)

    def test_partial_match_with_zero_multiplier_loses(self):
        bet = self._bet([1, 41, 42], 100)
        self.engine.settle(self.game.id, DRAWN)
        settled = self.repo.get_bet(bet.id)
        self.assertIs(settled.status, BetStatus.LOST)
        self.assertEqual(settled.matched_numbers, 1)

    def test_settling_twice_pays_once(self):
        self._bet([1, 2, 3], 30)
        self.engine.settle(self.game.id, DRAWN)
        second = self.engine.settle(self.game.id, DRAWN)
        self.assertEqual(second.settled, 0)
        self.assertEqual(second.skipped, 1)
        self.assertEqual(self.repo.get_user(self.user.id).balance, 2470)

    def test_concurrent_status_change_is_not_paid(self):
        bet = self._bet([1, 2, 3], 30)
        stale = [bet]
        self.repo.update_bet(bet.id, status=BetStatus.LOST, win_amount=0, matched_numbers=0)
        with mock.patch.object(self.repo, "get_bets_for_game", return_value=stale):
            summary = self.engine.settle(self.game.id, DRAWN)
        self.assertEqual(summary.skipped, 1)
        self.assertEqual(self.repo.get_user(self.user.id).balance, 970)

    def test_missing_user_is_logged_and_others_settle(self):
        bet = self._bet([1, 2, 3], 30)
        ghost = self.repo.create_user("ghost", 100)
        orphan = self._bet([4, 5], 20, user=ghost)
        real_get_user = self.repo.get_user

        def get_user(user_id):
            return None if user_id == ghost.id else real_get_user(user_id)

        with mock.patch.object(self.repo, "get_user", side_effect=get_user):
            with self.assertLogs("keno.services.settlement_service", level="ERROR"):
                summary = self.engine.settle(self.game.id, DRAWN)

        self.assertEqual(summary.failed, 1)
        self.assertEqual(summary.settled, 1)
        self.assertIs(self.repo.get_bet(bet.id).status, BetStatus.WON)
        self.assertIs(self.repo.get_bet(orphan.id).status, BetStatus.ACTIVE)


if __name__ == "__main__":
    unittest.main()
