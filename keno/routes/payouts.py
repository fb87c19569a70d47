"""Payout table management and analysis routes."""

from __future__ import annotations

from flask import Blueprint, request

from keno.container import KenoServices, get_services
from keno.schemas.payout import (
    AnalysisQuerySchema,
    MatchDetailSchema,
    PayoutCalculatorQuerySchema,
    PayoutEntrySchema,
    PayoutQuoteSchema,
    PayoutUpdateSchema,
    SpotAnalysisSchema,
    SpotRtpSchema,
)
from keno.utils.responses import ok

payouts_bp = Blueprint("payouts", __name__)

_entry_schema = PayoutEntrySchema()
_entries_schema = PayoutEntrySchema(many=True)
_update_schema = PayoutUpdateSchema()
_spot_analysis_schema = SpotAnalysisSchema(many=True)
_house_edge_schema = SpotRtpSchema(many=True)
_match_details_schema = MatchDetailSchema(many=True)
_quotes_schema = PayoutQuoteSchema(many=True)
_analysis_query = AnalysisQuerySchema()
_calculator_query = PayoutCalculatorQuerySchema()


def _target_house_edge(services: KenoServices) -> float:
    args = _analysis_query.load(request.args)
    target = args.get("target_house_edge")
    return services.settings.target_house_edge if target is None else float(target)


def _analysis(services: KenoServices, target_house_edge: float) -> dict:
    analyzer = services.analyzer
    return {
        "spotAnalysis": _spot_analysis_schema.dump(analyzer.spot_analysis()),
        "houseEdgeAnalysis": _house_edge_schema.dump(analyzer.house_edge_report(target_house_edge)),
    }


@payouts_bp.get("/admin/payout-table")
def get_payout_table():
    services = get_services()
    target = _target_house_edge(services)
    return ok(
        {
            "payoutTable": _entries_schema.dump(services.payout_table.list_all()),
            **_analysis(services, target),
        }
    )


@payouts_bp.post("/admin/payout-table/update")
def update_payout():
    services = get_services()
    data = _update_schema.load(request.get_json(silent=True) or {})
    entry = services.payout_table.set_multiplier(data["spots"], data["matches"], data["multiplier"])
    return ok(
        {
            "message": "Payout updated successfully",
            "entry": _entry_schema.dump(entry),
            **_analysis(services, services.settings.target_house_edge),
        }
    )


@payouts_bp.get("/admin/payout-analysis/<int:spots>")
def get_payout_analysis(spots: int):
    analyzer = get_services().analyzer
    args = _analysis_query.load(request.args)
    target_rtp = float(args["target_rtp"])
    return ok(
        {
            "spots": spots,
            "currentRTP": analyzer.expected_return(spots),
            "recommendations": _entries_schema.dump(analyzer.recommended_multipliers(spots, target_rtp)),
            "detailedAnalysis": _match_details_schema.dump(analyzer.match_details(spots)),
        }
    )


@payouts_bp.get("/payout-calculator")
def payout_calculator():
    analyzer = get_services().analyzer
    args = _calculator_query.load(request.args)
    spots, wager = int(args["spots"]), int(args["wager_amount"])
    rtp = analyzer.expected_return(spots)
    return ok(
        {
            "spots": spots,
            "wagerAmount": wager,
            "payouts": _quotes_schema.dump(analyzer.payout_quote(spots, wager)),
            "expectedRTP": rtp,
            "houseEdge": (1 - rtp) * 100,
        }
    )


@payouts_bp.get("/admin/settings")
def get_settings():
    s = get_services().settings
    return ok(
        {
            "minBet": s.min_bet,
            "maxBet": s.max_bet,
            "maxSpots": s.max_spots,
            "drawSize": s.draw_size,
            "universeSize": s.universe_size,
            "countdownSeconds": s.countdown_seconds,
            "drawIntervalSeconds": s.draw_interval_seconds,
            "breakSeconds": s.break_seconds,
            "targetHouseEdge": s.target_house_edge,
        }
    )
