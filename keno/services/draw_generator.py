"""Random draw sequences for a game."""

from __future__ import annotations

import random

from keno.config import ConfigurationError


class DrawGenerator:
    """Draw `count` distinct numbers from 1..`universe_size` in reveal order."""

    def __init__(self, count: int = 20, universe_size: int = 80, rng: random.Random | None = None) -> None:
        if count < 1 or universe_size < 1:
            raise ConfigurationError("Draw count and universe size must be positive")
        if count > universe_size:
            raise ConfigurationError(f"Cannot draw {count} unique numbers from a universe of {universe_size}")
        self.count = int(count)
        self.universe_size = int(universe_size)
        self._rng = rng or random.Random()

    def draw(self) -> list[int]:
        # sample() keeps selection order, which is the reveal order.
        return self._rng.sample(range(1, self.universe_size + 1), self.count)


def draw_numbers(count: int, universe_size: int, rng: random.Random | None = None) -> list[int]:
    return DrawGenerator(count, universe_size, rng).draw()
