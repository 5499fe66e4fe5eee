"""
labyrinth.api.main — FastAPI application entry point
======================================================

Run with::

    uvicorn labyrinth.api.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from labyrinth.api.deps import get_dispatcher  # noqa: E402
from labyrinth.api.routes.operations import router as operations_router  # noqa: E402
from labyrinth.api.routes.public import router as public_router  # noqa: E402
from labyrinth.database.engine import init_db, run_db  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Allowed CORS origins from ``CORS_ALLOW_ORIGINS`` (comma-separated)."""
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]
    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — ensure tables and tournament #1 exist."""
    dispatcher = app.dependency_overrides.get(get_dispatcher, get_dispatcher)()
    await run_db(init_db, dispatcher.engine)
    result = await run_db(dispatcher.bootstrap)
    logger.info("Labyrinth API started — %s", result)
    yield
    logger.info("Labyrinth API shutting down")


app = FastAPI(
    title="Labyrinth Legends Tournament API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(public_router, prefix="/api")
app.include_router(operations_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
