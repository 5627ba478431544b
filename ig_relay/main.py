"""FastAPI application initialization."""

from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import FastAPI
from sentry_sdk.integrations.fastapi import FastApiIntegration

from ig_relay import __version__
from ig_relay.api import conversations, health, webhook
from ig_relay.config import get_settings
from ig_relay.logging_config import setup_logfire
from ig_relay.middleware.correlation_id import CorrelationIDMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()

    setup_logfire(app)

    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            send_default_pii=False,
            integrations=[FastApiIntegration()],
        )

    # Missing credentials are reported but do not stop the server
    missing = settings.missing_required()
    if missing:
        logfire.error(
            "Missing env vars: relay will not work until they are set",
            missing=missing,
        )
    if not settings.app_secret:
        logfire.warn(
            "APP_SECRET not set: webhook signature verification is disabled",
            require_signature=settings.require_signature,
        )

    logfire.info(
        "Application startup complete",
        environment=settings.env,
        graph_api_version=settings.graph_api_version,
        port=settings.port,
    )

    yield

    logfire.info("Application shutdown complete")


app = FastAPI(
    title="Instagram DM Relay",
    description="Webhook relay that auto-replies to Instagram direct messages",
    version=__version__,
    lifespan=lifespan,
)

# Correlation ID middleware (must be first for request tracing)
app.add_middleware(CorrelationIDMiddleware)

app.include_router(health.router, tags=["health"])
app.include_router(webhook.router, prefix="/webhook", tags=["webhook"])
app.include_router(conversations.router, prefix="/ig", tags=["instagram"])


@app.get("/")
def root():
    """Root endpoint."""
    settings = get_settings()
    return {
        "message": "Instagram DM Relay API",
        "graph_api_version": settings.graph_api_version,
        "version": __version__,
    }


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "ig_relay.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.env == "local",
    )
