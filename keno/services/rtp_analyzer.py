"""Return-to-player and house-edge analysis of the payout table.

Read-only over the payout table and odds, so it is safe to call mid-game.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from keno.errors import ValidationError
from keno.services.odds import OddsCalculator
from keno.services.payout_table import PayoutEntry, PayoutTable

RTP_TOLERANCE = 0.05

# Share of the target RTP given to the top three payout tiers.
_TIER_SHARES = (0.6, 0.25, 0.1)


class HouseEdgeClass(str, Enum):
    BALANCED = "balanced"
    FAVORS_PLAYER = "favorsPlayer"
    FAVORS_HOUSE = "favorsHouse"


_RECOMMENDATIONS = {
    HouseEdgeClass.BALANCED: "Balanced",
    HouseEdgeClass.FAVORS_PLAYER: "Reduce payouts - too favorable to players",
    HouseEdgeClass.FAVORS_HOUSE: "Increase payouts - too favorable to house",
}


@dataclass(frozen=True)
class SpotRtp:
    spots: int
    current_rtp: float
    target_rtp: float
    classification: HouseEdgeClass
    recommendation: str


@dataclass(frozen=True)
class SpotAnalysis:
    spots: int
    total_combinations: int
    expected_rtp: float
    house_edge: float
    entries: list[PayoutEntry]


@dataclass(frozen=True)
class MatchDetail:
    matches: int
    multiplier: Decimal
    probability: float
    odds: str | None
    frequency: str


@dataclass(frozen=True)
class PayoutQuote:
    matches: int
    multiplier: Decimal
    win_amount: int
    probability: float
    odds: str | None
    frequency: str


def classify(current_rtp: float, target_rtp: float, tolerance: float = RTP_TOLERANCE) -> HouseEdgeClass:
    # Rounded so that a gap of exactly the tolerance counts as balanced.
    gap = round(float(current_rtp) - float(target_rtp), 9)
    if gap > tolerance:
        return HouseEdgeClass.FAVORS_PLAYER
    if gap < -tolerance:
        return HouseEdgeClass.FAVORS_HOUSE
    return HouseEdgeClass.BALANCED


def win_amount(wager: int, multiplier: Decimal) -> int:
    """Winnings in the smallest currency unit, rounded down."""

    return int(Decimal(int(wager)) * multiplier)


class RtpAnalyzer:
    """Operator-facing payout analysis."""

    def __init__(self, payout_table: PayoutTable, odds: OddsCalculator) -> None:
        self._table = payout_table
        self._odds = odds

    @property
    def max_spots(self) -> int:
        return self._table.max_spots

    def _check_spots(self, spots: int) -> int:
        spots = int(spots)
        if not (1 <= spots <= self.max_spots):
            raise ValidationError(
                message="Invalid spot count", details={"spots": [f"Must be within 1..{self.max_spots}"]}
            )
        return spots

    def expected_return(self, spots: int) -> float:
        spots = self._check_spots(spots)
        return sum(
            self._odds.probability(spots, m) * float(self._table.get_multiplier(spots, m))
            for m in range(spots + 1)
        )

    def house_edge_report(self, target_house_edge: float = 0.25) -> list[SpotRtp]:
        if not (0.0 <= float(target_house_edge) < 1.0):
            raise ValidationError(
                message="Invalid target house edge", details={"targetHouseEdge": ["Must be within [0, 1)"]}
            )
        target_rtp = 1.0 - float(target_house_edge)

        report: list[SpotRtp] = []
        for spots in range(1, self.max_spots + 1):
            current = self.expected_return(spots)
            label = classify(current, target_rtp)
            report.append(
                SpotRtp(
                    spots=spots,
                    current_rtp=current,
                    target_rtp=target_rtp,
                    classification=label,
                    recommendation=_RECOMMENDATIONS[label],
                )
            )
        return report

    def spot_analysis(self) -> list[SpotAnalysis]:
        out: list[SpotAnalysis] = []
        for spots in range(1, self.max_spots + 1):
            rtp = self.expected_return(spots)
            out.append(
                SpotAnalysis(
                    spots=spots,
                    total_combinations=self._odds.total_combinations(spots),
                    expected_rtp=rtp,
                    house_edge=1.0 - rtp,
                    entries=self._table.entries_for(spots),
                )
            )
        return out

    def match_details(self, spots: int) -> list[MatchDetail]:
        spots = self._check_spots(spots)
        details: list[MatchDetail] = []
        for matches in range(spots + 1):
            d = self._odds.details(spots, matches)
            details.append(
                MatchDetail(
                    matches=matches,
                    multiplier=self._table.get_multiplier(spots, matches),
                    probability=d.probability,
                    odds=d.odds,
                    frequency=d.frequency,
                )
            )
        return details

    def recommended_multipliers(self, spots: int, target_rtp: float = 0.75) -> list[PayoutEntry]:
        """Suggest multipliers that spend the RTP budget on the top three tiers.

        A full match gets 60% of the target RTP, one miss 25% (from 3 spots up),
        two misses 10% (from 4 spots up). Everything else pays 0.
        """

        spots = self._check_spots(spots)
        if float(target_rtp) < 0:
            raise ValidationError(message="Invalid target RTP", details={"targetRtp": ["Must be >= 0"]})

        out: list[PayoutEntry] = []
        for matches in range(spots + 1):
            misses = spots - matches
            eligible = misses == 0 or (misses == 1 and spots > 2) or (misses == 2 and spots > 3)
            p = self._odds.probability(spots, matches)
            multiplier = 0
            if eligible and misses < len(_TIER_SHARES) and p > 0:
                multiplier = round(float(target_rtp) * _TIER_SHARES[misses] / p)
            out.append(PayoutEntry(spots=spots, matches=matches, multiplier=Decimal(multiplier)))
        return out

    def payout_quote(self, spots: int, wager: int) -> list[PayoutQuote]:
        """Possible winnings of a wager for each match count."""

        quotes: list[PayoutQuote] = []
        for detail in self.match_details(spots):
            quotes.append(
                PayoutQuote(
                    matches=detail.matches,
                    multiplier=detail.multiplier,
                    win_amount=win_amount(wager, detail.multiplier),
                    probability=detail.probability,
                    odds=detail.odds,
                    frequency=detail.frequency,
                )
            )
        return quotes
