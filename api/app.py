"""
CRM Outreach Sync Service
=========================
FastAPI application that reconciles accepted LinkedIn connections from the
outreach backend against the organization-scoped contact store.
"""
import logging
import sqlite3
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.routes import health_router, webhooks_router
from config.settings import Settings, get_settings
from db import schema
from db.connection import get_connection
from services.auth import WebhookAuthenticator
from utils.logging_setup import init_logging

logger = logging.getLogger(__name__)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Unparseable/missing bodies are a client error, same as schema failures
    errors = [
        {"loc": list(err.get("loc", ())), "msg": str(err.get("msg")), "type": str(err.get("type"))}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": {"message": "Invalid request body", "errors": errors}})


def create_app(
    settings: Optional[Settings] = None,
    connection_factory: Optional[Callable[[], sqlite3.Connection]] = None,
    clock: Optional[Callable[[], str]] = None,
) -> FastAPI:
    settings = settings or get_settings()
    init_logging(settings.log_level)

    def _default_factory() -> sqlite3.Connection:
        return get_connection(settings.db_path)

    factory = connection_factory or _default_factory

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.service_name} v{settings.service_version} (env={settings.run_env})")
        conn = factory()
        try:
            schema.bootstrap(conn)
        finally:
            conn.close()
        logger.info("Contact store schema ready")
        yield
        logger.info("Shutting down application...")

    app = FastAPI(
        title="CRM Outreach Sync API",
        description="Webhook endpoints syncing accepted LinkedIn connections into CRM contacts",
        version=settings.service_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.connection_factory = factory
    app.state.clock = clock
    # Built once so a disabled secret is warned about once per process
    app.state.authenticator = WebhookAuthenticator(settings.webhook_secret, production=settings.is_production)

    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(health_router)
    app.include_router(webhooks_router)
    return app
