"""Hypergeometric match probabilities for Keno."""

from __future__ import annotations

from dataclasses import dataclass
from math import comb


def combinations(n: int, k: int) -> int:
    """n choose k, 0 when k is outside 0..n."""

    if k < 0 or k > n:
        return 0
    return comb(n, k)


def probability_of_matches(draw_size: int, universe_size: int, spots: int, matches: int) -> float:
    """Probability that exactly `matches` of `spots` picks are among the drawn numbers.

    Ways to pick the matching numbers from the drawn ones, times ways to pick the
    misses from the undrawn ones, over all ways to pick `spots` numbers.
    Impossible outcomes have probability 0.
    """

    if min(draw_size, universe_size, spots, matches) < 0:
        raise ValueError("Arguments must be non-negative")
    if draw_size > universe_size:
        raise ValueError("Draw size cannot exceed universe size")

    misses = spots - matches
    if matches > spots or matches > draw_size or misses > universe_size - draw_size:
        return 0.0

    total = combinations(universe_size, spots)
    if total == 0:
        return 0.0

    # Exact integer arithmetic; int / int rounds once.
    return combinations(draw_size, matches) * combinations(universe_size - draw_size, misses) / total


@dataclass(frozen=True)
class ProbabilityDetails:
    probability: float
    odds: str | None  # "1 in N"; None for impossible outcomes
    frequency: str  # percentage, 4 decimals


class OddsCalculator:
    """Odds bound to one game geometry (draw size and universe size)."""

    def __init__(self, draw_size: int = 20, universe_size: int = 80) -> None:
        if draw_size > universe_size:
            raise ValueError("Draw size cannot exceed universe size")
        self.draw_size = int(draw_size)
        self.universe_size = int(universe_size)

    def probability(self, spots: int, matches: int) -> float:
        return probability_of_matches(self.draw_size, self.universe_size, spots, matches)

    def distribution(self, spots: int) -> list[float]:
        """Probability of each match count 0..spots."""

        return [self.probability(spots, m) for m in range(spots + 1)]

    def total_combinations(self, spots: int) -> int:
        return combinations(self.universe_size, spots)

    def details(self, spots: int, matches: int) -> ProbabilityDetails:
        p = self.probability(spots, matches)
        odds = f"1 in {round(1 / p):,}" if p > 0 else None
        return ProbabilityDetails(probability=p, odds=odds, frequency=f"{p * 100:.4f}%")
