"""Main FastAPI application for the System Drift stats backend."""

from contextlib import asynccontextmanager
from typing import Any, Dict

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from system_drift import __version__
from system_drift.core import close_db_manager, get_global_settings
from system_drift.core.logging import RequestLoggingMiddleware, setup_logging
from system_drift.core.rate_limiter import limiter
from system_drift.features.game_stats.router import router as stats_router
from system_drift.features.leaderboard.router import router as leaderboard_router

settings = get_global_settings()
setup_logging(settings.log_level, json_logs=not settings.debug)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting up System Drift stats backend", version=__version__)
    yield
    logger.info("Shutting down System Drift stats backend")
    await close_db_manager()


tags_metadata = [
    {
        "name": "leaderboard",
        "description": "Global, time-windowed and win-count leaderboards, player rank and aggregates.",
    },
    {
        "name": "stats",
        "description": "Session reporting and per-player session history.",
    },
    {
        "name": "health",
        "description": "Health check endpoint.",
    },
]

app = FastAPI(
    title="System Drift - Stats Service",
    description="""
    Records game session outcomes and serves leaderboards and player statistics.

    ## Features

    * **Leaderboards**: personal best per player, globally or within a day, week or month
    * **Top winners**: players ordered by number of won sessions
    * **Rank**: a player's position by personal best
    * **Aggregates**: totals, averages and best score per player
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
    debug=settings.debug,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(leaderboard_router, prefix="/api/v1")
app.include_router(stats_router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health_check() -> Dict[str, Any]:
    """Liveness probe for load balancers and monitoring."""
    return {
        "status": "healthy",
        "message": "Application is running",
        "version": __version__,
        "debug": settings.debug,
    }
