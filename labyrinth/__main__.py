"""
labyrinth.__main__ — Entry point for ``python -m labyrinth``
=============================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings), falling back to built-in defaults.
3. Create the SQLAlchemy engine and ensure tables exist.
4. Bootstrap tournament #1 (idempotent).
5. Serve the HTTP API (blocking).

Run with::

    python -m labyrinth
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from dotenv import load_dotenv

from labyrinth.config import default_config, load_config
from labyrinth.database.engine import create_db_engine, init_db
from labyrinth.engine.operations import ErrorResponse
from labyrinth.services.dispatcher import Dispatcher

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("labyrinth")


def main() -> None:
    """Bootstrap the tournament state and run the API server."""

    # 1. Environment variables (secrets).
    load_dotenv()

    # 2. Soft configuration.
    try:
        cfg = load_config()
    except FileNotFoundError:
        logger.warning("config.yaml not found — using built-in defaults")
        cfg = default_config()
    logger.info("Config loaded — default tournament: %s", cfg.default_tournament_title)

    # 3. Database.
    try:
        engine = create_db_engine()
    except RuntimeError as exc:
        logger.critical("%s", exc)
        sys.exit(1)
    init_db(engine)

    # 4. Tournament #1.
    result = Dispatcher(engine, config=cfg).bootstrap()
    if isinstance(result, ErrorResponse):
        logger.critical("Bootstrap failed: %s", result.message)
        sys.exit(1)
    logger.info("Tournament %d ready (already existed: %s)", result.id, result.already_existed)

    # 5. API.
    logger.info("Starting Labyrinth API on port %d…", cfg.api_port)
    try:
        uvicorn.run("labyrinth.api.main:app", host="0.0.0.0", port=cfg.api_port)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
