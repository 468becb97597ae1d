"""Lead Relay — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from leadrelay.config import settings
from leadrelay.infrastructure.api.dependencies import close_crm
from leadrelay.infrastructure.api.routes_health import router as health_router
from leadrelay.infrastructure.api.routes_webhook import router as webhook_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    if not settings.clientify_token:
        logger.warning("CLIENTIFY_TOKEN not set; webhook requests will be rejected")
    if settings.assignment_strategy.lower() != "hash":
        logger.warning("ASSIGNMENT_STRATEGY=%s not implemented, using hash", settings.assignment_strategy)
    logger.info(
        "Relaying to %s with %d agents in pool", settings.clientify_base_url, len(settings.agent_pool)
    )
    yield
    await close_crm()


def create_app() -> FastAPI:
    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)

    app = FastAPI(
        title="Lead Relay",
        description="ElevenLabs lead events relayed into Clientify contacts, deals and owners",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(webhook_router, prefix="/api")

    return app


app = create_app()
