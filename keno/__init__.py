"""Keno game server package."""

from __future__ import annotations

from typing import Any

from flask import Flask

from dotenv import load_dotenv


def create_app(config_object: Any | None = None, **service_options: Any) -> Flask:
    """Application factory.

    Args:
        config_object: Config class or object; defaults to the one selected by APP_ENV.
        service_options: Passed to `build_services` (rng, clock, sleep, payout_table).

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from keno.config import KenoSettings, get_config
    from keno.container import build_services, seed_player
    from keno.db import init_db
    from keno.error_handlers import register_error_handlers
    from keno.logging_config import configure_logging
    from keno.repositories import InMemoryKenoRepository, SqlKenoRepository
    from keno.routes.bets import bets_bp
    from keno.routes.game import game_bp
    from keno.routes.health import health_bp
    from keno.routes.payouts import payouts_bp

    app = Flask(__name__)
    app.config.from_object(config_object or get_config())

    configure_logging(app)

    settings = KenoSettings.from_mapping(app.config)
    backend = str(app.config.get("DB_BACKEND", "sql")).lower()
    if backend == "memory":
        repository = InMemoryKenoRepository(first_game_number=settings.first_game_number)
    else:
        repository = SqlKenoRepository(init_db(app), first_game_number=settings.first_game_number)

    services = build_services(settings, repository, **service_options)
    seed_player(repository, app.config.get("KENO_DEFAULT_PLAYER", ""), int(app.config.get("KENO_DEFAULT_BALANCE", 0)))
    app.extensions["keno"] = services

    register_error_handlers(app)

    app.register_blueprint(health_bp)
    app.register_blueprint(game_bp, url_prefix="/api")
    app.register_blueprint(bets_bp, url_prefix="/api")
    app.register_blueprint(payouts_bp, url_prefix="/api")

    if app.config.get("KENO_AUTOSTART"):
        services.game_cycle.start()

    return app
