"""Tests for bet placement."""

import threading
import unittest

from keno.errors import (
    BettingClosedError,
    InsufficientBalanceError,
    InvalidSelectionCountError,
    InvalidSelectionError,
    InvalidWagerError,
    NotFoundError,
)
from keno.models.status import BetStatus, GameStatus
from keno.services.game_cycle import CyclePhase

from tests.helpers import make_services


class BetServiceTest(unittest.TestCase):
    def setUp(self):
        self.services, self.clock = make_services()
        self.repo = self.services.repository
        self.bets = self.services.bets
        self.cycle = self.services.game_cycle
        self.user = self.repo.create_user("bob", 1000)
        self.game = self.cycle.begin_countdown()

    def test_place_bet_debits_and_records(self):
        bet = self.bets.place_bet(self.user.id, [7, 3, 5], 100)
        self.assertEqual(bet.selected_numbers, (3, 5, 7))
        self.assertEqual(bet.game_id, self.game.id)
        self.assertIs(bet.status, BetStatus.ACTIVE)
        self.assertEqual(self.repo.get_user(self.user.id).balance, 900)

    def test_insufficient_balance_leaves_balance(self):
        poor = self.repo.create_user("poor", 50)
        with self.assertRaises(InsufficientBalanceError):
            self.bets.place_bet(poor.id, [1, 2], 100)
        self.assertEqual(self.repo.get_user(poor.id).balance, 50)
        self.assertEqual(self.repo.get_bets_for_game(self.game.id), [])

    def test_selection_rules(self):
        cases = [
            ([], InvalidSelectionCountError),
            (list(range(1, 12)), InvalidSelectionCountError),
            ([0, 5], InvalidSelectionError),
            ([81], InvalidSelectionError),
            ([4, 4], InvalidSelectionError),
            (["4"], InvalidSelectionError),
            ([True], InvalidSelectionError),
        ]
        for numbers, error in cases:
            with self.subTest(numbers=numbers):
                with self.assertRaises(error):
                    self.bets.place_bet(self.user.id, numbers, 100)
        self.assertEqual(self.repo.get_user(self.user.id).balance, 1000)

    def test_wager_rules(self):
        for wager in (0, -20, 19, 5001, 25.5, "100", None):
            with self.subTest(wager=wager):
                with self.assertRaises(InvalidWagerError):
                    self.bets.place_bet(self.user.id, [1, 2], wager)

    def test_unknown_user(self):
        with self.assertRaises(NotFoundError):
            self.bets.place_bet(999, [1, 2], 100)

    def test_betting_closed_while_drawing(self):
        self.assertTrue(self.cycle.start_drawing())
        with self.assertRaises(BettingClosedError):
            self.bets.place_bet(self.user.id, [1, 2], 100)
        self.assertEqual(self.repo.get_user(self.user.id).balance, 1000)

    def test_failed_insert_refunds_wager(self):
        def broken(*args, **kwargs):
            raise RuntimeError("insert failed")

        self.repo.create_bet = broken
        with self.assertRaises(RuntimeError):
            self.bets.place_bet(self.user.id, [1, 2], 100)
        self.assertEqual(self.repo.get_user(self.user.id).balance, 1000)

    def test_drawing_waits_for_open_betting_window(self):
        entered = threading.Event()
        release = threading.Event()

        def hold_window():
            with self.cycle.betting_window():
                entered.set()
                release.wait(5)

        holder = threading.Thread(target=hold_window)
        holder.start()
        self.assertTrue(entered.wait(5))

        drawer = threading.Thread(target=self.cycle.start_drawing)
        drawer.start()
        drawer.join(0.2)
        self.assertTrue(drawer.is_alive())
        # Storage is read without the cycle lock the holder owns.
        self.assertIs(self.repo.get_game(self.game.id).status, GameStatus.WAITING)

        release.set()
        holder.join(5)
        drawer.join(5)
        self.assertIs(self.cycle.phase, CyclePhase.DRAWING)

    def test_list_user_bets(self):
        first = self.bets.place_bet(self.user.id, [1, 2], 100)
        second = self.bets.place_bet(self.user.id, [3], 20)
        self.assertEqual([b.id for b in self.bets.list_user_bets(self.user.id)], [second.id, first.id])
        self.assertEqual(len(self.bets.list_user_bets(self.user.id, self.game.id)), 2)
        self.assertEqual(self.bets.list_user_bets(self.user.id, self.game.id + 1), [])


if __name__ == "__main__":
    unittest.main()
