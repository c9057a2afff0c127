"""FastAPI application factory and server entry point."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import validate_config
from ..utils.logging import configure_logging
from .config import ApiSettings
from .deps.providers import get_engine, get_run_store, get_settings, use_settings
from .errors import register_error_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    settings: ApiSettings = app.state.settings

    configure_logging(settings.log_level, settings.log_format)
    logger.info("Starting benchrun API on %s:%s", settings.host, settings.port)

    issues = validate_config()
    for issue in issues:
        if issue.get("level") == "ERROR":
            logger.error("Config validation: %s", issue.get("message", ""))
        else:
            logger.warning("Config validation: %s", issue.get("message", ""))
    if not issues:
        logger.info("Config validation: all checks passed")

    store = get_run_store()
    await store.initialize()

    yield

    await get_engine().shutdown()
    await store.close()
    logger.info("Shutting down benchrun API")


def create_app(settings: ApiSettings | None = None) -> FastAPI:
    """Build and return the FastAPI application."""
    if settings is None:
        settings = get_settings()
    else:
        use_settings(settings)

    app = FastAPI(
        title="Bench Runner API",
        description="Start, cancel and observe timed product tests.",
        version=__version__,
        lifespan=_lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings

    # CORS
    origins = [o.strip() for o in settings.cors_origins.split(",")]
    allow_creds = "*" not in origins
    if not allow_creds:
        logger.warning(
            "CORS_ORIGINS contains '*'. Credentials will NOT be allowed. "
            "Set explicit origins for credentialed cross-origin requests."
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_creds,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    from .routers import all_routers

    for router in all_routers():
        app.include_router(router)

    return app


def run_server() -> None:
    """CLI entry point: ``python -m benchrun.api.main``."""
    import uvicorn

    settings = get_settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run_server()
