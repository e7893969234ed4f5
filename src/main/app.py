"""
FastAPI Application - Main Layer

Operator HTTP surface of the forecast engine: predictions, composite risk
scores and control of the daily scheduler. Serve with
``uvicorn src.main.app:app``.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.main.config import AppSettings, get_settings
from src.main.container import app_lifespan, init_container
from src.presentation.controllers import (
    predictions_router,
    risk_scores_router,
    scheduler_router,
)
from src.shared import configure_logging, get_logger, update_logging_from_settings

configure_logging()
update_logging_from_settings(get_settings())

logger = get_logger(__name__)

ROUTERS = (predictions_router, risk_scores_router, scheduler_router)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open Mongo and, when enabled, arm the scheduler for the app's lifetime."""
    settings: AppSettings = app.state.settings
    app.state.started_at = datetime.now(timezone.utc)
    logger.info(
        "app.startup",
        environment=settings.environment.value,
        scheduler_enabled=settings.scheduler.enabled,
        horizons=settings.scheduler.horizons,
    )

    async with app_lifespan() as container:
        app.state.container = container
        yield

    logger.info("app.shutdown")


def create_app() -> FastAPI:
    """
    Build the FastAPI application around a freshly initialized container.

    Returns:
        FastAPI: app with the predictions, risk-score and scheduler routers
    """
    settings = get_settings()
    init_container(settings)

    app = FastAPI(
        title=settings.service.title,
        description=settings.service.description,
        version=settings.service.version,
        debug=settings.service.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in ROUTERS:
        app.include_router(router)

    return app


app = create_app()
