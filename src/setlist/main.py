"""ASGI application."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from setlist import __version__
from setlist.api.errors import register_exception_handlers
from setlist.api.middleware import REQUEST_ID_HEADER, RequestIDMiddleware
from setlist.api.router import api_router, site_router
from setlist.config import settings
from setlist.database import close_db

logger = logging.getLogger(__name__)


def init_sentry() -> bool:
    """Start error reporting when a DSN is configured."""
    if not settings.sentry_dsn:
        return False

    import sentry_sdk

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"setlist@{__version__}",
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        # Emails and cookies stay out of error reports
        send_default_pii=False,
    )
    logger.info("Sentry initialized")
    return True


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Schema is managed by Alembic; only the pool needs tearing down
    yield
    await close_db()


def create_app() -> FastAPI:
    docs_enabled = settings.debug_enabled
    app = FastAPI(
        title="Setlist Manager API",
        description="Authentication and band access control for the setlist manager",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs" if docs_enabled else None,
        redoc_url="/api/redoc" if docs_enabled else None,
        openapi_url="/api/openapi.json" if docs_enabled else None,
    )

    app.add_middleware(RequestIDMiddleware)  # type: ignore[arg-type]
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )

    register_exception_handlers(app)
    app.include_router(site_router)
    app.include_router(api_router, prefix="/api")
    return app


init_sentry()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    from setlist.logging import get_uvicorn_log_config

    uvicorn.run(
        "setlist.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_config=get_uvicorn_log_config(),
    )
