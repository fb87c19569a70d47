"""Environment-based configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy.engine import URL


class ConfigurationError(RuntimeError):
    """Invalid game configuration. Fatal at startup."""


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def resolve_database_url() -> str:
    """Resolve DB connection string.

    Priority:
      1) DATABASE_URL (explicit)
      2) Build from PG* env vars (common Postgres convention)
      3) Fallback to local sqlite
    """

    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit

    host = os.getenv("PGHOST")
    user = os.getenv("PGUSER")
    database = os.getenv("PGDATABASE")

    if host and user and database:
        sslmode = os.getenv("PGSSLMODE", "require")
        query = {"sslmode": sslmode} if sslmode else {}
        url = URL.create(
            drivername="postgresql+psycopg2",
            username=user,
            password=os.getenv("PGPASSWORD"),
            host=host,
            port=_env_int("PGPORT", 5432),
            database=database,
            query=query,
        )
        return url.render_as_string(hide_password=False)

    return "sqlite:///./keno.db"


@dataclass(frozen=True)
class BaseConfig:
    """Base configuration shared by all environments."""

    APP_ENV: str = os.getenv("APP_ENV", "development")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret")
    DB_BACKEND: str = os.getenv("DB_BACKEND", "sql").lower().strip()  # "sql" | "memory"

    DATABASE_URL: str = resolve_database_url()
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Game cycle
    KENO_DRAW_SIZE: int = _env_int("KENO_DRAW_SIZE", 20)
    KENO_UNIVERSE_SIZE: int = _env_int("KENO_UNIVERSE_SIZE", 80)
    KENO_MAX_SPOTS: int = _env_int("KENO_MAX_SPOTS", 10)
    KENO_COUNTDOWN_SECONDS: float = _env_float("KENO_COUNTDOWN_SECONDS", 50.0)
    KENO_DRAW_INTERVAL_SECONDS: float = _env_float("KENO_DRAW_INTERVAL_SECONDS", 1.5)
    KENO_BREAK_SECONDS: float = _env_float("KENO_BREAK_SECONDS", 15.0)
    KENO_FIRST_GAME_NUMBER: int = _env_int("KENO_FIRST_GAME_NUMBER", 1247)
    KENO_AUTOSTART: bool = _env_bool("KENO_AUTOSTART", True)

    # Betting
    KENO_MIN_BET: int = _env_int("KENO_MIN_BET", 20)
    KENO_MAX_BET: int = _env_int("KENO_MAX_BET", 5000)
    KENO_TARGET_HOUSE_EDGE: float = _env_float("KENO_TARGET_HOUSE_EDGE", 0.25)

    # Seed player created on startup when missing. Empty name disables seeding.
    KENO_DEFAULT_PLAYER: str = os.getenv("KENO_DEFAULT_PLAYER", "player1")
    KENO_DEFAULT_BALANCE: int = _env_int("KENO_DEFAULT_BALANCE", 124550)


@dataclass(frozen=True)
class DevelopmentConfig(BaseConfig):
    """Development configuration."""

    DEBUG: bool = True


@dataclass(frozen=True)
class ProductionConfig(BaseConfig):
    """Production configuration."""

    DEBUG: bool = False


@dataclass(frozen=True)
class TestingConfig(BaseConfig):
    """Test configuration: in-memory storage, no background scheduler."""

    TESTING: bool = True
    DEBUG: bool = False
    DB_BACKEND: str = "memory"
    DATABASE_URL: str = "sqlite://"
    KENO_AUTOSTART: bool = False


def get_config() -> type[BaseConfig]:
    """Resolve configuration class based on APP_ENV."""

    env = os.getenv("APP_ENV", "development").lower().strip()
    if env == "production":
        return ProductionConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig


@dataclass(frozen=True)
class KenoSettings:
    """Game rules and timings, read once from the Flask config."""

    draw_size: int = 20
    universe_size: int = 80
    max_spots: int = 10
    countdown_seconds: float = 50.0
    draw_interval_seconds: float = 1.5
    break_seconds: float = 15.0
    min_bet: int = 20
    max_bet: int = 5000
    target_house_edge: float = 0.25
    first_game_number: int = 1247

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "KenoSettings":
        defaults = cls()
        return cls(
            draw_size=int(config.get("KENO_DRAW_SIZE", defaults.draw_size)),
            universe_size=int(config.get("KENO_UNIVERSE_SIZE", defaults.universe_size)),
            max_spots=int(config.get("KENO_MAX_SPOTS", defaults.max_spots)),
            countdown_seconds=float(config.get("KENO_COUNTDOWN_SECONDS", defaults.countdown_seconds)),
            draw_interval_seconds=float(
                config.get("KENO_DRAW_INTERVAL_SECONDS", defaults.draw_interval_seconds)
            ),
            break_seconds=float(config.get("KENO_BREAK_SECONDS", defaults.break_seconds)),
            min_bet=int(config.get("KENO_MIN_BET", defaults.min_bet)),
            max_bet=int(config.get("KENO_MAX_BET", defaults.max_bet)),
            target_house_edge=float(config.get("KENO_TARGET_HOUSE_EDGE", defaults.target_house_edge)),
            first_game_number=int(config.get("KENO_FIRST_GAME_NUMBER", defaults.first_game_number)),
        )

    @property
    def drawing_seconds(self) -> float:
        return self.draw_interval_seconds * self.draw_size

    def validate(self) -> "KenoSettings":
        """Fail fast on settings that would break a game at draw time."""

        problems: list[str] = []
        if self.universe_size < 1:
            problems.append("universe size must be positive")
        if self.draw_size < 1:
            problems.append("draw size must be positive")
        if self.draw_size > self.universe_size:
            problems.append(
                f"draw size {self.draw_size} exceeds universe size {self.universe_size}"
            )
        if self.max_spots < 1 or self.max_spots > min(self.draw_size, self.universe_size):
            problems.append(f"max spots {self.max_spots} must be within 1..{self.draw_size}")
        if self.countdown_seconds <= 0 or self.draw_interval_seconds <= 0 or self.break_seconds <= 0:
            problems.append("phase durations must be positive")
        if self.min_bet < 1 or self.max_bet < self.min_bet:
            problems.append(f"invalid betting limits {self.min_bet}..{self.max_bet}")
        if not (0.0 <= self.target_house_edge < 1.0):
            problems.append("target house edge must be within [0, 1)")

        if problems:
            raise ConfigurationError("Invalid Keno configuration: " + "; ".join(problems))
        return self
