"""Schemas for payout table management and RTP analysis."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class PayoutEntrySchema(Schema):
    spots = fields.Int(required=True)
    matches = fields.Int(required=True)
    multiplier = fields.Float(required=True)


class PayoutUpdateSchema(Schema):
    """Operator update of a single multiplier. Range rules live in PayoutTable."""

    spots = fields.Integer(required=True, strict=True)
    matches = fields.Integer(required=True, strict=True)
    multiplier = fields.Decimal(required=True, allow_nan=False)


class SpotAnalysisSchema(Schema):
    spots = fields.Int()
    total_combinations = fields.Int(data_key="totalCombinations")
    expected_rtp = fields.Float(data_key="expectedRTP")
    house_edge = fields.Float(data_key="houseEdge")
    entries = fields.List(fields.Nested(PayoutEntrySchema), data_key="payoutEntries")


class SpotRtpSchema(Schema):
    spots = fields.Int(data_key="spot")
    current_rtp = fields.Float(data_key="currentRTP")
    target_rtp = fields.Float(data_key="targetRTP")
    classification = fields.Function(lambda r: r.classification.value)
    recommendation = fields.Str()


class MatchDetailSchema(Schema):
    matches = fields.Int()
    multiplier = fields.Float(data_key="currentMultiplier")
    probability = fields.Float()
    odds = fields.Str(allow_none=True)
    frequency = fields.Str()


class PayoutQuoteSchema(Schema):
    matches = fields.Int()
    multiplier = fields.Float()
    win_amount = fields.Int(data_key="winAmount")
    probability = fields.Float()
    odds = fields.Str(allow_none=True)
    frequency = fields.Str()


class AnalysisQuerySchema(Schema):
    target_house_edge = fields.Float(
        load_default=None,
        data_key="targetHouseEdge",
        validate=validate.Range(min=0, max=1, max_inclusive=False),
    )
    target_rtp = fields.Float(load_default=0.75, data_key="targetRtp", validate=validate.Range(min=0))


class PayoutCalculatorQuerySchema(Schema):
    spots = fields.Integer(required=True)
    wager_amount = fields.Integer(load_default=100, data_key="wagerAmount", validate=validate.Range(min=1))
