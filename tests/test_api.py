"""HTTP API tests through the Flask test client."""

import random
import unittest

from keno import create_app
from keno import config


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.app = create_app(config.TestingConfig, rng=random.Random(99))
        self.client = self.app.test_client()
        self.services = self.app.extensions["keno"]
        self.cycle = self.services.game_cycle
        self.player = self.services.repository.get_user_by_username("player1")

    def tearDown(self):
        self.cycle.stop()

    def _bet(self, numbers, wager, user_id=None):
        return self.client.post(
            "/api/bet",
            json={"userId": user_id or self.player.id, "selectedNumbers": numbers, "wagerAmount": wager},
        )

    def _play_out(self):
        self.cycle.start_drawing()
        for _ in range(20):
            self.cycle.reveal_next_number()
        return self.cycle.complete_game()


class HealthAndGameTest(ApiTestCase):
    def test_health(self):
        body = self.client.get("/health").get_json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["gameCycle"], "idle")
        self.assertFalse(body["data"]["cycleRunning"])

    def test_current_game(self):
        self.cycle.begin_countdown()
        data = self.client.get("/api/game/current").get_json()["data"]
        self.assertEqual(data["game"]["gameNumber"], 1247)
        self.assertEqual(data["game"]["status"], "waiting")
        self.assertEqual(data["state"]["drawnNumbers"], [])

    def test_history(self):
        self.cycle.begin_countdown()
        game = self._play_out()
        data = self.client.get("/api/game/history?limit=5").get_json()["data"]
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]["id"], game.id)
        self.assertEqual(len(data[0]["drawnNumbers"]), 20)

    def test_history_limit_validated(self):
        resp = self.client.get("/api/game/history?limit=0")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"]["code"], "validation_error")

    def test_event_stream_starts_with_snapshot(self):
        self.cycle.begin_countdown()
        resp = self.client.get("/api/events")
        try:
            self.assertEqual(resp.status_code, 200)
            self.assertEqual(resp.mimetype, "text/event-stream")
            first = next(iter(resp.response))
            if isinstance(first, bytes):
                first = first.decode()
            self.assertTrue(first.startswith("event: gameState\n"))
            self.assertIn('"phase":"countdown"', first)
        finally:
            resp.close()


class BetApiTest(ApiTestCase):
    def test_seeded_player(self):
        data = self.client.get(f"/api/user/{self.player.id}").get_json()["data"]
        self.assertEqual(data, {"id": self.player.id, "username": "player1", "balance": 124550})

    def test_unknown_user(self):
        resp = self.client.get("/api/user/999")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.get_json()["error"]["code"], "not_found")

    def test_place_bet_and_settle(self):
        self.cycle.begin_countdown()
        resp = self._bet([5, 1, 3], 100)
        self.assertEqual(resp.status_code, 201)
        bet = resp.get_json()["data"]
        self.assertEqual(bet["selectedNumbers"], [1, 3, 5])
        self.assertEqual(bet["status"], "active")
        self.assertIsNone(bet["winAmount"])

        balance = self.client.get(f"/api/user/{self.player.id}").get_json()["data"]["balance"]
        self.assertEqual(balance, 124450)

        self._play_out()
        bets = self.client.get(f"/api/user/{self.player.id}/bets").get_json()["data"]
        self.assertEqual(len(bets), 1)
        self.assertIn(bets[0]["status"], ("won", "lost"))
        self.assertIsNotNone(bets[0]["matchedNumbers"])

    def test_betting_closed(self):
        resp = self._bet([1, 2], 100)
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.get_json()["error"]["code"], "betting_closed")

    def test_rejections(self):
        poor = self.services.repository.create_user("poor", 50)
        self.cycle.begin_countdown()
        cases = [
            (self._bet(list(range(1, 12)), 100), "invalid_selection_count"),
            (self._bet([1, 1], 100), "invalid_selection"),
            (self._bet([1, 99], 100), "invalid_selection"),
            (self._bet([1, 2], 10), "invalid_wager_amount"),
            (self._bet([1, 2], 12.5), "invalid_wager_amount"),
            (self._bet([1, 2], 100, user_id=poor.id), "insufficient_balance"),
        ]
        for resp, code in cases:
            with self.subTest(code=code):
                self.assertEqual(resp.status_code, 400)
                self.assertEqual(resp.get_json()["error"]["code"], code)
        self.assertEqual(self.services.repository.get_user(self.player.id).balance, 124550)

    def test_malformed_payload(self):
        self.cycle.begin_countdown()
        resp = self.client.post("/api/bet", json={"selectedNumbers": [1]})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"]["code"], "validation_error")

    def test_user_bets_filter(self):
        game = self.cycle.begin_countdown()
        self._bet([1], 20)
        data = self.client.get(f"/api/user/{self.player.id}/bets?gameId={game.id + 1}").get_json()["data"]
        self.assertEqual(data, [])


class PayoutApiTest(ApiTestCase):
    def test_payout_table(self):
        data = self.client.get("/api/admin/payout-table").get_json()["data"]
        self.assertEqual(len(data["spotAnalysis"]), 10)
        self.assertEqual(len(data["houseEdgeAnalysis"]), 10)
        entry = next(e for e in data["payoutTable"] if e["spots"] == 3 and e["matches"] == 3)
        self.assertEqual(entry["multiplier"], 50)
        self.assertEqual(data["houseEdgeAnalysis"][0]["classification"], "balanced")

    def test_update_payout(self):
        resp = self.client.post("/api/admin/payout-table/update", json={"spots": 1, "matches": 1, "multiplier": 10})
        self.assertEqual(resp.status_code, 200)
        data = resp.get_json()["data"]
        self.assertEqual(data["entry"]["multiplier"], 10)
        self.assertEqual(data["houseEdgeAnalysis"][0]["classification"], "favorsPlayer")

        calc = self.client.get("/api/payout-calculator?spots=1&wagerAmount=20").get_json()["data"]
        self.assertEqual(calc["payouts"][1]["winAmount"], 200)

    def test_update_payout_rejects_bad_values(self):
        for body in (
            {"spots": 11, "matches": 1, "multiplier": 1},
            {"spots": 3, "matches": 3, "multiplier": -5},
            {"spots": 3, "matches": 3},
        ):
            with self.subTest(body=body):
                resp = self.client.post("/api/admin/payout-table/update", json=body)
                self.assertEqual(resp.status_code, 400)
        self.assertEqual(str(self.services.payout_table.get_multiplier(3, 3)), "50")

    def test_payout_analysis(self):
        data = self.client.get("/api/admin/payout-analysis/3").get_json()["data"]
        self.assertEqual(data["spots"], 3)
        self.assertEqual(len(data["detailedAnalysis"]), 4)
        self.assertEqual(len(data["recommendations"]), 4)
        self.assertGreater(data["currentRTP"], 0)

    def test_payout_calculator(self):
        data = self.client.get("/api/payout-calculator?spots=3&wagerAmount=30").get_json()["data"]
        self.assertEqual(data["payouts"][3]["winAmount"], 1500)
        self.assertAlmostEqual(data["houseEdge"], (1 - data["expectedRTP"]) * 100)

    def test_settings(self):
        data = self.client.get("/api/admin/settings").get_json()["data"]
        self.assertEqual((data["minBet"], data["maxBet"]), (20, 5000))
        self.assertEqual(data["countdownSeconds"], 50.0)


if __name__ == "__main__":
    unittest.main()
