"""Twincord API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TwincordError → {success: false, error} responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup and disposed on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py to keep this module to wiring
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import twincord.infrastructure.database as db_module
from twincord.api.error_handlers import register_error_handlers
from twincord.infrastructure.database import init_db
from twincord.infrastructure.observability import setup_logging
from twincord.config import get_settings
from twincord.api.routes import (
    health, communities, community_messages, stats,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Twincord API started")
    yield
    logger.info("Twincord API shutting down")
    if db_module.db_manager:
        await db_module.db_manager.dispose()


app = FastAPI(
    title="Twincord API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(communities.router)
app.include_router(community_messages.router)
app.include_router(stats.router)

register_error_handlers(app)
