"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import (
    calculation_logs_router,
    calculations_router,
    facilities_router,
    factors_router,
)
from app.core.config import get_config
from app.core.exceptions import EngineError
from app.core.validation import error_details
from app.database.base import get_db_url, get_engine_kw
from app.database.session_manager.db_session import Database
from app.pydantic_models.reference_tables import EngineSettings, ReferenceTables

logging.basicConfig(
    level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def register_routers(app: FastAPI):
    """Register all API routers."""
    app.include_router(factors_router)
    app.include_router(calculations_router)
    app.include_router(calculation_logs_router)
    app.include_router(facilities_router)


def register_exception_handlers(app: FastAPI):
    """Map domain errors and unexpected failures to JSON bodies."""

    @app.exception_handler(EngineError)
    async def engine_error_handler(request: Request, exc: EngineError):
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logging.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        else:
            logging.info(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = error_details(exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": details[0]["message"] if details else "Invalid request",
                "details": details,
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logging.exception(f"Unhandled exception on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Handles database initialization and cleanup.
    """
    logging.info("Application startup")
    async_db_url = get_db_url(app.state.config)

    Database.init(async_db_url, engine_kw=get_engine_kw(async_db_url))
    logging.info("Initialized database")

    try:
        yield
    finally:
        await Database.close()
        logging.info("Application shutdown")


def get_app(config_file: str) -> FastAPI:
    """
    Application factory function.

    Args:
        config_file: Configuration file name (e.g., "production.toml")

    Returns:
        Configured FastAPI application instance
    """
    config = get_config(config_file)
    api_config = config.section("api")

    app = FastAPI(
        title=api_config.get("title", "Emissions Calculation & Audit-Trail Engine"),
        description=api_config.get(
            "description", "Auditable Scope 1, 2 and 3 emissions calculations"
        ),
        version=api_config.get("version", "1.0.0"),
        debug=api_config.get("debug", False),
        lifespan=lifespan,
        generate_unique_id_function=lambda route: (
            f"{route.tags[0]}-{route.name}" if route.tags else route.name
        ),
    )

    app.state.config = config
    app.state.reference_tables = ReferenceTables.from_config(config)
    app.state.engine_settings = EngineSettings.from_config(config)
    logging.info(
        f"Loaded {len(app.state.reference_tables.fuel_type_mapping)} fuel type mappings and "
        f"{len(app.state.reference_tables.exchange_rates.rates)} exchange rates"
    )

    register_routers(app)
    register_exception_handlers(app)

    origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app
