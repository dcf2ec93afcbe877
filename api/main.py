"""Loyalty Extension API — FastAPI entry point.

Registers middleware, error handlers, routers, and lifecycle hooks. The
loyalty vertical mounts its extension endpoints under /loyalty/.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import install_error_handlers
from api.middleware import CorrelationIdMiddleware
from core.observability.logging_setup import setup_logging
from core.platform import get_platform_client
from verticals.loyalty.config import config

VERSION = "0.1.0"

log = logging.getLogger("loyalty.main")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown hooks."""
    setup_logging(config.log_level)
    if not config.platform.project_key:
        log.warning("CTP_PROJECT_KEY is not set; platform calls will fail")

    log.info("Loyalty extension started (project %s)", config.platform.project_key or "-")
    yield
    log.info("Loyalty extension shutting down")


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Loyalty Extension",
    description="Bonus-points API Extension for cart and order lifecycle events",
    version=VERSION,
    lifespan=lifespan,
)

install_error_handlers(app)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(config.cors_origins),
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Correlation ids for logs
app.add_middleware(CorrelationIdMiddleware)

# ---------------------------------------------------------------------------
# Routers — verticals register here
# ---------------------------------------------------------------------------

from verticals.loyalty.router import router as loyalty_router  # noqa: E402

app.include_router(loyalty_router, prefix="/loyalty", tags=["Loyalty"])


# ---------------------------------------------------------------------------
# Health & root
# ---------------------------------------------------------------------------

@app.get("/health")
async def health():
    platform = get_platform_client().get_health()
    return {
        "status": "healthy" if platform.circuit_state != "open" else "degraded",
        "version": VERSION,
        "platform": platform.to_dict(),
    }


@app.get("/")
async def root():
    return {
        "name": "Loyalty Extension",
        "version": VERSION,
        "docs": "/docs",
        "routes": ["/loyalty/extension", "/loyalty/cart", "/loyalty/order", "/health"],
    }
