"""Game state routes and the event stream. No business logic here."""

from __future__ import annotations

from flask import Blueprint, Response, request, stream_with_context

from keno.container import get_services
from keno.schemas.game import GameHistoryQuerySchema, GameSchema
from keno.services.broadcaster import format_sse
from keno.utils.responses import ok

game_bp = Blueprint("game", __name__)

_game_schema = GameSchema()
_games_schema = GameSchema(many=True)
_history_query = GameHistoryQuerySchema()

KEEPALIVE_SECONDS = 15.0


@game_bp.get("/game/current")
def current_game():
    services = get_services()
    state = services.game_cycle.snapshot()
    return ok({"game": state["currentGame"], "state": state})


@game_bp.get("/game/history")
def game_history():
    args = _history_query.load(request.args)
    games = get_services().repository.get_game_history(int(args["limit"]))
    return ok(_games_schema.dump(games))


@game_bp.get("/events")
def stream_events():
    """Server-Sent Events: a `gameState` snapshot, then live deltas.

    `numberDrawn` deltas carry their 1-based `index`; one at or below the
    snapshot's `currentDrawIndex` repeats a number the snapshot already has.
    """

    services = get_services()
    sub = services.broadcaster.subscribe(initial=services.game_cycle.snapshot_event)

    def _generate():
        try:
            while not sub.closed:
                event = sub.get(timeout=KEEPALIVE_SECONDS)
                if event is None:
                    yield ": keep-alive\n\n"
                    continue
                yield format_sse(event)
        finally:
            sub.close()

    return Response(
        stream_with_context(_generate()),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
