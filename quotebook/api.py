"""
FastAPI app entry point aggregating the view routers under quotebook/routes.
Keep as `uvicorn quotebook.api:app`.
"""
from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import Optional

from fastapi import FastAPI

from . import __version__
from .errors import NetworkError, StorageUnavailable
from .logs import LogContext, ensure_log_schema
from .providers.rapidapi_provider import RapidApiQuoteProvider
from .providers.speech import Pyttsx3Speaker
from .services.config_svc import ensure_default_config, get_config
from .services.notice_svc import NoticeBoard
from .services.quote_book import QuoteBook
from .services.quote_store import QuoteStore

logger = logging.getLogger(__name__)


def build_quote_book(cfg: dict) -> QuoteBook:
    return QuoteBook(
        store=QuoteStore(),
        provider=RapidApiQuoteProvider.from_config(cfg),
        speaker=Pyttsx3Speaker(),
        notices=NoticeBoard(cfg["notice_duration_ms"]),
        max_length=cfg["quote_max_length"],
    )


async def _initial_fetch(book: QuoteBook) -> None:
    log = LogContext("QUOTE_FETCH")
    log.set_payload({"trigger": "startup"})
    try:
        await book.fetch_random_quote(log)
        log.write("OK")
    except NetworkError as e:
        logger.warning("startup quote fetch failed: %s", e)
        log.write("ERROR", str(e))


def create_app(book: Optional[QuoteBook] = None, fetch_on_startup: Optional[bool] = None) -> FastAPI:
    app = FastAPI(title="quotebook-api", version=__version__)

    @app.on_event("startup")
    async def on_startup():
        try:
            ensure_log_schema()
            ensure_default_config()
            cfg = get_config()
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailable(f"app_tables_unavailable: {e}") from e
        qb = book or build_quote_book(cfg)
        # StorageUnavailable is fatal: let it abort startup
        await qb.initialize()
        app.state.quote_book = qb
        LogContext("STARTUP").write("OK")
        do_fetch = cfg["fetch_on_startup"] if fetch_on_startup is None else fetch_on_startup
        if do_fetch:
            app.state.startup_fetch = asyncio.create_task(_initial_fetch(qb))

    # Include routers (one per view, plus ambient endpoints)
    from .routes import base as base_routes
    from .routes import random_quote as random_routes
    from .routes import quotes as quotes_routes
    from .routes import draft as draft_routes
    from .routes import notices as notices_routes
    from .routes import settings as settings_routes
    from .routes import logs as logs_routes

    app.include_router(base_routes.router)
    app.include_router(random_routes.router)
    app.include_router(quotes_routes.router)
    app.include_router(draft_routes.router)
    app.include_router(notices_routes.router)
    app.include_router(settings_routes.router)
    app.include_router(logs_routes.router)
    return app


app = create_app()
