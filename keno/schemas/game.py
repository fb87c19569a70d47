"""Schemas for games and the game-cycle state."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from keno.models.status import GameStatus


class GameSchema(Schema):
    """Serialize a game record."""

    id = fields.Int(required=True)
    game_number = fields.Int(required=True, data_key="gameNumber")
    drawn_numbers = fields.List(fields.Int(), required=True, data_key="drawnNumbers")
    status = fields.Enum(GameStatus, by_value=True, required=True)
    started_at = fields.DateTime(required=True, data_key="startedAt")
    completed_at = fields.DateTime(allow_none=True, data_key="completedAt")


class GameHistoryQuerySchema(Schema):
    limit = fields.Integer(load_default=10, validate=validate.Range(min=1, max=100))
