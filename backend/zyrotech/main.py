"""
Zyrotech - Main Application Entry Point

This module initializes the FastAPI application with all necessary middleware,
monitoring tools, and route configurations. It sets up:
- Prometheus metrics endpoint
- Sentry error tracking (when a DSN is configured)
- Logging middleware with correlation IDs
- CORS and security headers
- Database tables and expired OTP cleanup
- API route registration
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import sentry_sdk
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from zyrotech import __version__
from zyrotech.api.routes import auth, bots, groups, kyc, profile, signals, subscriptions
from zyrotech.core.error_handler import register_exception_handlers
from zyrotech.core.logging import get_logger, setup_logging
from zyrotech.core.middleware import add_middlewares
from zyrotech.core.settings import settings
from zyrotech.db.session import check_db_connection, engine, get_db_context, init_models
from zyrotech.mailer.service import email_service
from zyrotech.services.otp_service import OTPService

# Initialize logging
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.
    Handles table creation, OTP housekeeping and engine cleanup.
    """
    # Startup
    setup_logging()
    try:
        if settings.db.CREATE_TABLES:
            await init_models()

        async with get_db_context() as db:
            await OTPService(db).purge_expired()

        if settings.email.VERIFY_ON_STARTUP:
            await email_service.verify_connection()

        yield
    except Exception as e:
        logger.error(f"Startup failed: {str(e)}", exc_info=True)
        raise
    finally:
        # Cleanup
        logger.info("Shutting down application...")
        await engine.dispose()


def create_application() -> FastAPI:
    """
    Creates and configures the FastAPI application with all middleware and routes.
    """
    if settings.logging.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.logging.SENTRY_DSN,
            environment=settings.app.ENVIRONMENT,
            release=__version__,
            traces_sample_rate=settings.logging.SENTRY_TRACES_SAMPLE_RATE,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                SqlalchemyIntegration()
            ],
        )

    app = FastAPI(
        title=settings.app.TITLE,
        description=settings.app.DESCRIPTION,
        version=settings.app.VERSION,
        docs_url="/docs" if not settings.app.is_production else None,
        redoc_url="/redoc" if not settings.app.is_production else None,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Authentication", "description": "Signup, login, email OTP and password reset"},
            {"name": "Profile", "description": "Current user, phone verification and PIN"},
            {"name": "KYC", "description": "Know Your Customer verification"},
            {"name": "Groups", "description": "Bot groups"},
            {"name": "Bots", "description": "Trading bots and their statistics"},
            {"name": "Signals", "description": "Trade signals posted by bots"},
            {"name": "Subscriptions", "description": "User subscriptions to bots"},
        ]
    )

    # Add CORS middleware with configuration from settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.CORS_ORIGINS,
        allow_credentials=settings.security.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.security.CORS_ALLOW_METHODS,
        allow_headers=settings.security.CORS_ALLOW_HEADERS,
    )
    add_middlewares(app)
    register_exception_handlers(app)

    # Mount Prometheus metrics endpoint
    app.mount("/metrics", make_asgi_app())

    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(profile.router, prefix="/api/profile", tags=["Profile"])
    app.include_router(kyc.router, prefix="/api/kyc", tags=["KYC"])
    app.include_router(groups.router, prefix="/api/groups", tags=["Groups"])
    app.include_router(bots.router, prefix="/api/bots", tags=["Bots"])
    app.include_router(signals.router, prefix="/api/signals", tags=["Signals"])
    app.include_router(subscriptions.router, prefix="/api/subscriptions", tags=["Subscriptions"])

    @app.get("/health", tags=["Monitoring"])
    async def health_check():
        """Report service and database health."""
        if not await check_db_connection():
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "database": "unavailable",
                    "timestamp": time.time()
                }
            )
        return {
            "status": "healthy",
            "database": "ok",
            "timestamp": time.time(),
            "version": settings.app.VERSION,
            "environment": settings.app.ENVIRONMENT
        }

    return app


# Create the FastAPI application instance
app = create_application()


def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    uvicorn.run(
        "zyrotech.main:app",
        host=settings.app.HOST,
        port=settings.app.PORT,
        reload=settings.app.ENVIRONMENT == "development",
        log_config=None,
        proxy_headers=True
    )


if __name__ == "__main__":
    run()
