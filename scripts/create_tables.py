"""Create database tables and seed the default player.

Reads DATABASE_URL from .env / environment and creates all registered ORM tables.

Usage:
  python scripts/create_tables.py
"""

from __future__ import annotations

import logging
import os
import pathlib
import sys

from dotenv import load_dotenv

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from keno.config import resolve_database_url
from keno.container import seed_player
from keno.db import create_app_engine
from keno.models.base import Base
from keno.repositories import SqlKenoRepository
from sqlalchemy.orm import sessionmaker

# Import models so they register with Base.metadata
from keno import models  # noqa: F401

logger = logging.getLogger("create_tables")


def main() -> int:
    """Create all ORM tables in the target database."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    load_dotenv()
    env_local = PROJECT_ROOT / ".env.local"
    if env_local.exists():
        load_dotenv(dotenv_path=env_local, override=True)

    engine = create_app_engine(resolve_database_url())
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created (or already exist) on %s", engine.url.render_as_string(hide_password=True))

    repository = SqlKenoRepository(sessionmaker(bind=engine, autoflush=False, expire_on_commit=False))
    seed_player(
        repository,
        os.getenv("KENO_DEFAULT_PLAYER", "player1"),
        int(os.getenv("KENO_DEFAULT_BALANCE", "124550")),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
