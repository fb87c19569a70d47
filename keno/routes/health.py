"""Health check routes."""

from __future__ import annotations

from flask import Blueprint

from keno.container import get_services
from keno.utils.responses import ok

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health_check():
    """Health check endpoint."""

    cycle = get_services().game_cycle
    return ok({"status": "ok", "gameCycle": cycle.phase.value, "cycleRunning": cycle.is_running})
