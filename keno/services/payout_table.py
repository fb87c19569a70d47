"""Live payout multipliers keyed by (spots, matches)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from threading import RLock
from typing import Union

from keno.errors import ValidationError

Number = Union[int, float, str, Decimal]

# multiplier per matches, per spots selected
DEFAULT_PAYOUTS: dict[int, dict[int, int]] = {
    1: {1: 3},
    2: {2: 12, 1: 0},
    3: {3: 50, 2: 2, 1: 0},
    4: {4: 100, 3: 5, 2: 1, 1: 0},
    5: {5: 300, 4: 15, 3: 2, 2: 0, 1: 0},
    6: {6: 1000, 5: 50, 4: 5, 3: 1, 2: 0, 1: 0},
    7: {7: 5000, 6: 150, 5: 15, 4: 2, 3: 0, 2: 0, 1: 0},
    8: {8: 10000, 7: 500, 6: 50, 5: 8, 4: 2, 3: 0, 2: 0, 1: 0},
    9: {9: 25000, 8: 2500, 7: 200, 6: 25, 5: 5, 4: 1, 3: 0, 2: 0, 1: 0},
    10: {10: 100000, 9: 10000, 8: 1000, 7: 100, 6: 20, 5: 3, 4: 1, 3: 0, 2: 0, 1: 0},
}


@dataclass(frozen=True)
class PayoutEntry:
    spots: int
    matches: int
    multiplier: Decimal


def to_multiplier(value: Number) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(message="Multiplier must be a number", details={"multiplier": [repr(value)]})
    try:
        multiplier = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(
            message="Multiplier must be a number", details={"multiplier": [repr(value)]}
        ) from exc
    if not multiplier.is_finite():
        raise ValidationError(message="Multiplier must be finite", details={"multiplier": [str(value)]})
    if multiplier < 0:
        raise ValidationError(message="Multiplier must be >= 0", details={"multiplier": [str(value)]})
    return multiplier


class PayoutTable:
    """Mutable payout configuration shared by settlement and analysis.

    Writes are visible to the next lookup. Missing pairs pay 0.
    """

    def __init__(self, entries: Mapping[tuple[int, int], Number] | None = None, max_spots: int = 10) -> None:
        self._lock = RLock()
        self._max_spots = int(max_spots)
        self._entries: dict[tuple[int, int], Decimal] = {}
        for (spots, matches), multiplier in (entries or {}).items():
            self.set_multiplier(spots, matches, multiplier)

    @classmethod
    def default(cls, max_spots: int = 10) -> "PayoutTable":
        entries = {
            (spots, matches): multiplier
            for spots, row in DEFAULT_PAYOUTS.items()
            if spots <= max_spots
            for matches, multiplier in row.items()
        }
        return cls(entries, max_spots=max_spots)

    @property
    def max_spots(self) -> int:
        return self._max_spots

    def _check_key(self, spots: int, matches: int) -> None:
        if not (1 <= spots <= self._max_spots):
            raise ValidationError(
                message="Invalid spots", details={"spots": [f"Must be within 1..{self._max_spots}"]}
            )
        if not (0 <= matches <= spots):
            raise ValidationError(message="Invalid matches", details={"matches": [f"Must be within 0..{spots}"]})

    def get_multiplier(self, spots: int, matches: int) -> Decimal:
        with self._lock:
            return self._entries.get((int(spots), int(matches)), Decimal(0))

    def set_multiplier(self, spots: int, matches: int, multiplier: Number) -> PayoutEntry:
        spots, matches = int(spots), int(matches)
        self._check_key(spots, matches)
        value = to_multiplier(multiplier)
        with self._lock:
            self._entries[(spots, matches)] = value
        return PayoutEntry(spots=spots, matches=matches, multiplier=value)

    def list_all(self) -> list[PayoutEntry]:
        """Snapshot ordered by spots, best match first."""

        with self._lock:
            items = list(self._entries.items())
        items.sort(key=lambda kv: (kv[0][0], -kv[0][1]))
        return [PayoutEntry(spots=s, matches=m, multiplier=x) for (s, m), x in items]

    def entries_for(self, spots: int) -> list[PayoutEntry]:
        return [e for e in self.list_all() if e.spots == int(spots)]
