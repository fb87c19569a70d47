"""Marshmallow schemas for players."""

from __future__ import annotations

from marshmallow import Schema, fields


class UserSchema(Schema):
    """Serialize a player."""

    id = fields.Int(required=True)
    username = fields.Str(required=True)
    balance = fields.Int(required=True)
