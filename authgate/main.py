"""
authgate - Google login for a small web app

FastAPI application factory.

Run with:
    uvicorn authgate.main:create_app --factory
"""
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from starlette.middleware.sessions import SessionMiddleware

# Import observability modules
from authgate.config import Settings, get_settings
from authgate.exceptions import AuthGateError, authgate_error_handler
from authgate.logging_config import configure_logging
from authgate.sentry_config import configure_sentry
from authgate.middleware.logging import LoggingMiddleware
from authgate.routes.metrics import router as metrics_router

# Import auth modules
from authgate.oauth import initialize_auth
from authgate.routes.auth import router as auth_router
from authgate.services.health_service import DatabaseHealthChecker, HealthChecker, run_health_check
from authgate.templates import render_index

logger = structlog.get_logger()

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"]
CORS_HEADERS = ["Accept", "Authorization", "Content-Type"]


def create_app(
    settings: Settings | None = None,
    health_checker: HealthChecker | None = None,
) -> FastAPI:
    """
    Build the application.

    Auth is initialized before the app exists, so a ConfigurationError stops
    startup and the server never accepts traffic.
    """
    if settings is None:
        settings = get_settings()

    # Initialize logging first
    configure_logging(settings.LOG_LEVEL)

    # Initialize Sentry (if SENTRY_DSN is set)
    configure_sentry(settings)

    auth = initialize_auth(settings)
    if health_checker is None:
        health_checker = DatabaseHealthChecker(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("startup", app=settings.APP_NAME, providers=auth.provider_names)
        yield
        await health_checker.close()
        logger.info("shutdown", app=settings.APP_NAME)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Google login with a signed session cookie",
        lifespan=lifespan,
    )
    app.state.auth = auth
    app.state.health_checker = health_checker

    app.add_exception_handler(AuthGateError, authgate_error_handler)

    # Middleware added last runs first: CORS -> logging -> session
    app.add_middleware(
        SessionMiddleware,
        secret_key=auth.session_policy.secret_key,
        session_cookie=auth.session_policy.cookie_name,
        max_age=auth.session_policy.max_age,
        path=auth.session_policy.path,
        same_site=auth.session_policy.same_site,
        https_only=auth.session_policy.secure,
    )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        max_age=300,
    )

    # Include metrics endpoint FIRST (so it's always available)
    app.include_router(metrics_router)

    # Include authentication routes
    app.include_router(auth_router)

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request):
        """Login links for each configured provider."""
        auth = request.app.state.auth
        return render_index([auth.get_provider(name) for name in auth.provider_names])

    @app.get("/health")
    async def health(request: Request):
        """Dependency health. Always 200; the status is in the body."""
        return await run_health_check(request.app.state.health_checker)

    return app
