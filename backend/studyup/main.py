from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from .api.errors import register_exception_handlers
from .api.middleware.security import SecurityMiddleware
from .api.v1.router import api_router
from .config import settings
from .core.errors import ConfigurationError
from .utils.http_client import close_http_client
from .utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def check_required_secrets() -> list[str]:
    """Return the names of missing secrets, raising when startup checks are strict."""
    missing = [
        name
        for name, value in (
            ("APP_GEMINI_API_KEY", settings.gemini_api_key),
            ("APP_SUPABASE_URL", settings.supabase_url),
            ("APP_SUPABASE_ANON_KEY", settings.supabase_anon_key),
            ("APP_SUPABASE_SERVICE_ROLE_KEY", settings.supabase_service_role_key),
        )
        if not value
    ]
    if missing:
        if settings.require_secrets_on_startup:
            raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")
        logger.warning("Missing settings, affected endpoints will fail: %s", ", ".join(missing))
    return missing


@asynccontextmanager
async def lifespan(app: FastAPI):
    check_required_secrets()
    yield
    await close_http_client()


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(
        title="StudyUp API",
        debug=settings.debug,
        version="0.1.0",
        root_path=settings.root_path or "",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    app.add_middleware(SecurityMiddleware)

    # GZip compression
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Trusted hosts (configure in env for production)
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    # Proxy headers (X-Forwarded-*) when behind a load balancer
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

    # Outermost so error responses keep their CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=settings.cors_allow_headers,
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()
