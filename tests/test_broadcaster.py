"""Tests for event fan-out."""

import json
import unittest

from keno.services.broadcaster import Broadcaster, format_sse, make_event


class BroadcasterTest(unittest.TestCase):
    def test_initial_event_comes_first(self):
        b = Broadcaster()
        sub = b.subscribe(initial=lambda: make_event("gameState", {"phase": "idle"}))
        b.publish("numberDrawn", {"number": 7})
        self.assertEqual(sub.get(0)["type"], "gameState")
        self.assertEqual(sub.get(0)["data"], {"number": 7})
        self.assertIsNone(sub.get(0))

    def test_slow_subscriber_is_dropped(self):
        b = Broadcaster(queue_size=2)
        slow = b.subscribe()
        fast = b.subscribe()
        for i in range(2):
            b.publish("numberDrawn", {"number": i})
        fast.get(0)
        fast.get(0)

        with self.assertLogs("keno.services.broadcaster", level="WARNING"):
            delivered = b.publish("numberDrawn", {"number": 99})

        self.assertEqual(delivered, 1)
        self.assertTrue(slow.closed)
        self.assertEqual(b.subscriber_count, 1)
        self.assertEqual(fast.get(0)["data"]["number"], 99)

    def test_close_unsubscribes(self):
        b = Broadcaster()
        sub = b.subscribe()
        sub.close()
        self.assertEqual(b.subscriber_count, 0)
        self.assertEqual(b.publish("gameState", {}), 0)

    def test_format_sse(self):
        frame = format_sse(make_event("drawingStarted", {"gameId": 3}))
        self.assertTrue(frame.startswith("event: drawingStarted\ndata: "))
        self.assertTrue(frame.endswith("\n\n"))
        payload = json.loads(frame.split("data: ", 1)[1])
        self.assertEqual(payload, {"type": "drawingStarted", "data": {"gameId": 3}})


if __name__ == "__main__":
    unittest.main()
