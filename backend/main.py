"""
FastAPI application entry point for the ingestion job service.

Callers are authenticated upstream; with TRUST_GATEWAY_PRINCIPAL=true the
principal forwarded by the gateway is attached to each request.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from docu_service.api.dependencies.ingestion import close_worker_client, get_worker_settings
from docu_service.api.routes import health
from docu_service.api.routes import ingestion
from docu_service.api.routes import webhooks_worker
from docu_service.auth.gateway import GatewayPrincipalMiddleware
from docu_service.database.session import dispose_engine

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting ingestion job service")

    settings = get_worker_settings()
    logger.info(
        "Worker configured",
        extra={
            "worker_base_url": settings.base_url,
            "signed_webhooks": settings.requires_signed_webhooks,
        },
    )

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        logger.error("DATABASE_URL is not set. Job endpoints will return 503.")
        app.state.database_configured = False
    else:
        # Mask credentials for safe logging
        masked = database_url.split("@")[-1] if "@" in database_url else "(no @ found)"
        logger.info("DATABASE_URL configured", extra={"host_db": masked})
        app.state.database_configured = True

    yield

    # Shutdown
    await close_worker_client()
    dispose_engine()
    logger.info("Shutting down ingestion job service")


# Create FastAPI app
app = FastAPI(
    title="Ingestion Job Service",
    description="Dispatches ingestion jobs to an external worker and tracks their lifecycle",
    version="1.0.0",
    lifespan=lifespan
)

if os.getenv("TRUST_GATEWAY_PRINCIPAL", "").lower() == "true":
    app.middleware("http")(GatewayPrincipalMiddleware())

# Include health route (bypasses authentication)
app.include_router(health.router)

# Include worker webhook routes (optional HMAC verification, no principal)
app.include_router(webhooks_worker.router)

# Include ingestion job routes (requires principal)
app.include_router(ingestion.router)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unhandled exceptions with proper logging."""
    logger.error(
        "Unhandled exception",
        extra={
            "error": str(exc),
            "error_type": type(exc).__name__,
            "path": request.url.path
        },
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": "An unexpected error occurred"
        }
    )


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("ENV") == "development"
    )
