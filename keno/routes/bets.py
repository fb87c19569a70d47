"""Player and bet routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from keno.container import get_services
from keno.schemas.bet import BetSchema, PlaceBetSchema, UserBetsQuerySchema
from keno.schemas.user import UserSchema
from keno.utils.responses import ok

bets_bp = Blueprint("bets", __name__)

_place_schema = PlaceBetSchema()
_bet_schema = BetSchema()
_bets_schema = BetSchema(many=True)
_user_schema = UserSchema()
_user_bets_query = UserBetsQuerySchema()


@bets_bp.get("/user/<int:user_id>")
def get_user(user_id: int):
    user = get_services().bets.get_user(user_id)
    return ok(_user_schema.dump(user))


@bets_bp.get("/user/<int:user_id>/bets")
def list_user_bets(user_id: int):
    args = _user_bets_query.load(request.args)
    bets = get_services().bets.list_user_bets(user_id, args.get("game_id"))
    return ok(_bets_schema.dump(bets))


@bets_bp.post("/bet")
def place_bet():
    payload = request.get_json(silent=True) or {}
    data = _place_schema.load(payload)

    bet = get_services().bets.place_bet(
        user_id=data["user_id"],
        selected_numbers=data["selected_numbers"],
        wager_amount=data["wager_amount"],
    )
    return ok(_bet_schema.dump(bet), status_code=201)
