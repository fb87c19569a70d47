"""Shared test fixtures: a simulated clock and service builders."""

from __future__ import annotations

import random
from collections.abc import Callable

from keno.config import KenoSettings
from keno.container import KenoServices, build_services
from keno.repositories import InMemoryKenoRepository


class FakeClock:
    """Simulated time. `sleep` advances the clock instead of blocking.

    `on_sleep(seconds)` runs before the clock advances; `stop_after` makes
    `sleep` report a stop request once that many sleeps happened.
    """

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = float(start)
        self.sleeps: list[float] = []
        self.on_sleep: Callable[[float], None] | None = None
        self.stop_after: int | None = None

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> bool:
        if self.on_sleep is not None:
            self.on_sleep(seconds)
        self.sleeps.append(seconds)
        self.now += seconds
        return self.stop_after is not None and len(self.sleeps) >= self.stop_after


def make_services(
    settings: KenoSettings | None = None,
    clock: FakeClock | None = None,
    seed: int = 1234,
) -> tuple[KenoServices, FakeClock]:
    clock = clock or FakeClock()
    settings = settings or KenoSettings()
    services = build_services(
        settings,
        InMemoryKenoRepository(first_game_number=settings.first_game_number),
        rng=random.Random(seed),
        clock=clock,
        sleep=clock.sleep,
    )
    return services, clock
