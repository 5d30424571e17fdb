"""Studio Site API

Thin FastAPI backend for the video-production marketing site: contact form
lead capture plus portfolio and testimonial content.
"""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from site_api.config import get_settings
from site_api.middleware import (
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
    configure_logging,
)
from site_api.routers import contact, portfolio, testimonials
from site_api.services.http_client import close_shared_client

logger = logging.getLogger(__name__)

settings = get_settings()
configure_logging(settings.log_level)

# Health check cache: (result_dict, timestamp)
_health_cache: tuple[dict[str, Any], float] | None = None
_HEALTH_CACHE_TTL = 30  # seconds


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown."""
    logger.info("Starting studio site API (%s)", settings.environment)
    yield
    await close_shared_client()


app = FastAPI(
    title="Studio Site API",
    description="Lead capture and content API for the studio website",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
)

# Request ID (added last — outermost middleware)
app.add_middleware(RequestIDMiddleware)

# Routers
app.include_router(contact.router, prefix="/api")
app.include_router(portfolio.router, prefix="/api")
app.include_router(testimonials.router, prefix="/api")


def _check_config() -> str:
    """Verify lead email delivery is configured. Returns 'ok' or 'fail'."""
    s = get_settings()
    if s.resend_api_key and s.email_to and s.email_from:
        return "ok"
    return "fail"


def _check_content() -> str:
    """Verify the content collections exist on disk."""
    root = Path(get_settings().content_dir)
    if (root / "portfolio").is_dir() and (root / "testimonials").is_dir():
        return "ok"
    return "fail"


def _run_health_checks() -> dict[str, Any]:
    """Run all health checks, returning the full response body."""
    global _health_cache
    now = time.time()
    if _health_cache is not None:
        cached_result, cached_at = _health_cache
        if now - cached_at < _HEALTH_CACHE_TTL:
            return cached_result

    checks = {"config": _check_config(), "content": _check_content()}
    failed = [k for k, v in checks.items() if v != "ok"]

    # Missing content is fatal; a missing email key only degrades delivery
    if checks["content"] != "ok":
        overall = "unhealthy"
        logger.error("Health check unhealthy — failed: %s", ", ".join(failed))
    elif failed:
        overall = "degraded"
        logger.warning("Health check degraded — failed: %s", ", ".join(failed))
    else:
        overall = "ok"

    result: dict[str, Any] = {
        "status": overall,
        "service": "studio-site-api",
        "version": "0.1.0",
        "checks": checks,
    }
    _health_cache = (result, now)
    return result


@app.get("/api/health")
async def health_check() -> JSONResponse:
    """Health check verifying configuration and content."""
    result = _run_health_checks()
    status_code = 200 if result["status"] in ("ok", "degraded") else 503
    return JSONResponse(content=result, status_code=status_code)
