from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import router
from datastore.factory import build_default_table
from logging_config import configure_logging
from services.ingestion import build_default_ingestion_service
from settings import ConfigurationError, require_service_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    settings = require_service_settings()
    logger.info("Service starting", extra={"table": settings.table})
    try:
        yield
    finally:
        build_default_ingestion_service.cache_clear()
        build_default_table.cache_clear()


async def plain_text_http_error(_request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Climate Updates Service",
        description="Stores climate readings delivered by Pub/Sub push subscriptions in Bigtable.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(StarletteHTTPException, plain_text_http_error)
    app.include_router(router)
    return app


def run() -> None:
    """Console entry point: validate configuration, then serve on ``$PORT``."""
    try:
        configure_logging()
        settings = require_service_settings()
    except ConfigurationError as exc:
        logger.error("%s", exc)
        sys.exit(1)
    logger.info("The service will be listening on port %s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)


app = create_app()
