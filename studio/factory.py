"""Application factory: builds and configures the FastAPI instance."""
from fastapi import FastAPI

from studio.config import Environment, settings
from studio.exceptions.handlers import register_exception_handlers
from studio.logging.config import get_structured_logger
from studio.middleware.cors import DashboardCORSMiddleware
from studio.middleware.logging import FUNCTIONS_PREFIX, LoggingMiddleware
from studio.services.session import SessionService

logger = get_structured_logger(__name__)


def cors_options() -> dict:
    """CORS for the dashboard: its configured origins in production, any origin elsewhere."""
    if settings.environment == Environment.PRODUCTION:
        return {
            "allow_origins": settings.cors_origin_list,
            "allow_credentials": True,
            "allow_methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            # Supabase JS clients send apikey and x-client-info on every call
            "allow_headers": ["Authorization", "Content-Type", "X-Request-ID", "apikey", "x-client-info"],
            "expose_headers": ["X-Request-ID"],
        }
    return {
        "allow_origins": ["*"],
        "allow_methods": ["*"],
        "allow_headers": ["*"],
        "expose_headers": ["X-Request-ID"],
    }


def create_app() -> FastAPI:
    """Create and configure the application."""
    app = FastAPI(title=settings.app_name, version=settings.app_version, debug=settings.debug)

    # One dashboard session per process
    app.state.session_service = SessionService()

    app.add_middleware(LoggingMiddleware)
    # Proxy functions carry their own CORS headers and preflight route
    app.add_middleware(DashboardCORSMiddleware, exclude_prefixes=(FUNCTIONS_PREFIX,), **cors_options())
    register_exception_handlers(app)

    from studio.routers import auth, channels, credits, functions, health, scripts, videos, voices

    for router in (
        functions.router,
        channels.router,
        voices.router,
        voices.image_models_router,
        scripts.router,
        videos.router,
        credits.router,
        auth.router,
        health.router,
    ):
        app.include_router(router)

    logger.info(
        "Application created environment=%s routes=%d supabase_configured=%s",
        settings.environment.value, len(app.routes), settings.supabase_configured,
    )
    return app
