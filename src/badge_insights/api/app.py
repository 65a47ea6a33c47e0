"""FastAPI app for Badge Insights — HTTP bridge for the host lifecycle hooks."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from badge_insights.api.routes import router
from badge_insights.settings import get_settings
from badge_insights.snap import SnapHandlers

try:
    from importlib.metadata import version

    VERSION = version("badge-insights")
except Exception:
    VERSION = "0.0.0"

logger = logging.getLogger(__name__)


def create_app(handlers: SnapHandlers | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        handlers: Pre-built handlers. When omitted, a store and verifier are
            built from settings at startup and the verifier is closed on shutdown.
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(application: FastAPI) -> AsyncIterator[None]:
        if handlers is not None:
            application.state.handlers = handlers
            yield
            return

        from badge_insights.store import build_state_store
        from badge_insights.verification import OwnershipVerifier

        store = build_state_store()
        async with OwnershipVerifier() as verifier:
            application.state.handlers = SnapHandlers(store=store, verifier=verifier)
            logger.info("Badge Insights bridge ready (store=%s)", settings.store.backend)
            yield

    application = FastAPI(
        title="Badge Insights",
        description="Address insights and ownership checks for wallet signing payloads.",
        version=VERSION,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router)
    return application
