"""Wiring of the game services for one application instance."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass

from flask import current_app

from keno.config import KenoSettings
from keno.repositories.base import KenoRepository
from keno.services.bet_service import BetService
from keno.services.broadcaster import Broadcaster
from keno.services.draw_generator import DrawGenerator
from keno.services.game_cycle import GameCycle
from keno.services.odds import OddsCalculator
from keno.services.payout_table import PayoutTable
from keno.services.rtp_analyzer import RtpAnalyzer
from keno.services.settlement_service import SettlementEngine

logger = logging.getLogger(__name__)


@dataclass
class KenoServices:
    settings: KenoSettings
    repository: KenoRepository
    payout_table: PayoutTable
    odds: OddsCalculator
    analyzer: RtpAnalyzer
    draw_generator: DrawGenerator
    settlement: SettlementEngine
    broadcaster: Broadcaster
    game_cycle: GameCycle
    bets: BetService


def build_services(
    settings: KenoSettings,
    repository: KenoRepository,
    *,
    payout_table: PayoutTable | None = None,
    rng: random.Random | None = None,
    clock: Callable[[], float] | None = None,
    sleep: Callable[[float], bool | None] | None = None,
) -> KenoServices:
    """Build every service around one repository. Validates settings first."""

    settings.validate()
    table = payout_table or PayoutTable.default(settings.max_spots)
    odds = OddsCalculator(settings.draw_size, settings.universe_size)
    draws = DrawGenerator(settings.draw_size, settings.universe_size, rng)
    settlement = SettlementEngine(repository, table)
    broadcaster = Broadcaster()
    cycle = GameCycle(repository, draws, settlement, broadcaster, settings, clock=clock, sleep=sleep)

    return KenoServices(
        settings=settings,
        repository=repository,
        payout_table=table,
        odds=odds,
        analyzer=RtpAnalyzer(table, odds),
        draw_generator=draws,
        settlement=settlement,
        broadcaster=broadcaster,
        game_cycle=cycle,
        bets=BetService(repository, cycle, settings),
    )


def seed_player(repository: KenoRepository, username: str, balance: int) -> None:
    if not username or repository.get_user_by_username(username) is not None:
        return
    user = repository.create_user(username, balance)
    logger.info("Seeded player %s (id=%s) with balance %s", user.username, user.id, user.balance)


def get_services() -> KenoServices:
    """Services of the current Flask app."""

    services: KenoServices | None = current_app.extensions.get("keno")
    if services is None:
        raise RuntimeError("Keno services not initialized")
    return services
