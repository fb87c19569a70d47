"""Schemas for bet placement and bet records."""

from __future__ import annotations

from marshmallow import Schema, fields

from keno.models.status import BetStatus


class PlaceBetSchema(Schema):
    """Bet placement payload.

    Only shape is checked here; selection and wager rules are enforced by the
    bet service so that rejections carry a specific reason.
    """

    user_id = fields.Integer(required=True, strict=True, data_key="userId")
    selected_numbers = fields.List(fields.Raw(), required=True, data_key="selectedNumbers")
    wager_amount = fields.Raw(required=True, data_key="wagerAmount")


class BetSchema(Schema):
    """Serialize a bet record."""

    id = fields.Int(required=True)
    user_id = fields.Int(required=True, data_key="userId")
    game_id = fields.Int(required=True, data_key="gameId")
    selected_numbers = fields.List(fields.Int(), required=True, data_key="selectedNumbers")
    wager_amount = fields.Int(required=True, data_key="wagerAmount")
    win_amount = fields.Int(allow_none=True, data_key="winAmount")
    matched_numbers = fields.Int(allow_none=True, data_key="matchedNumbers")
    status = fields.Enum(BetStatus, by_value=True, required=True)
    created_at = fields.DateTime(data_key="createdAt")


class UserBetsQuerySchema(Schema):
    game_id = fields.Integer(load_default=None, data_key="gameId")
