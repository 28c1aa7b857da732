"""FastAPI application for the fleet operations service.

Provides REST endpoints for drivers, units, orders, rates, trips, trip
events, and OCR-assisted order intake.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fleetops import __version__
from fleetops.db.session import Database
from fleetops.ocr.recognizer import OrderRecognizer
from fleetops.utils.config import AppConfig, load_config
from fleetops.utils.logger import get_logger

from .errors import register_error_handlers
from .routes import drivers, events, health, ocr, orders, rates, trips, units

logger = get_logger(__name__)


def create_app(
    config: AppConfig | None = None,
    database: Database | None = None,
    recognizer: OrderRecognizer | None = None,
) -> FastAPI:
    """Build the application around an explicit database handle.

    Args:
        config: Application configuration. Loaded from YAML when omitted.
        database: Database handle. Built from ``config.database`` when omitted.
        recognizer: OCR pipeline. Built from ``config`` when omitted.

    Returns:
        Configured FastAPI application.
    """
    config = config or load_config()
    database = database or Database(config.database)

    app = FastAPI(
        title=config.api.title,
        description="Orders, rosters, trips and OCR order intake",
        version=__version__,
    )
    app.state.config = config
    app.state.database = database
    app.state.recognizer = recognizer or OrderRecognizer(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    for module in (health, drivers, units, orders, rates, trips, events, ocr):
        app.include_router(module.router)

    logger.info("API ready with database %s", database.engine.url)
    return app
