"""
PhotoFeed API - FastAPI Application
Photo sharing feed with likes and comments
"""
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from photofeed.core.config import Settings, settings as default_settings
from photofeed.core.database import Database, get_database
from photofeed.core.errors import register_exception_handlers
from photofeed.core.log_config import configure_logging
from photofeed.core.rate_limit import FixedWindowRateLimiter, RateLimitMiddleware
from photofeed.utils.responses import error_response, success_response

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application

    Args:
        settings: Overrides the environment-loaded settings (tests)
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(settings.DATABASE_URL, echo=settings.DEBUG and not settings.is_production)
        Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
        database.create_all()
        app.state.database = database

        listener = configure_logging(settings, database)
        if listener is not None:
            listener.start()

        logger.info("%s started (%s)", settings.APP_NAME, settings.APP_ENV)
        try:
            yield
        finally:
            logger.info("%s shutting down", settings.APP_NAME)
            if listener is not None:
                listener.stop()
            database.dispose()
            app.state.database = None

    app = FastAPI(
        title=settings.APP_NAME,
        description="Photo sharing feed with likes and comments",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.database = None

    register_exception_handlers(app)

    # Added last runs first: CORS wraps the rate limiter
    if settings.RATE_LIMIT_REQUESTS > 0:
        limiter = FixedWindowRateLimiter(settings.RATE_LIMIT_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS)
        app.state.rate_limiter = limiter
        app.add_middleware(RateLimitMiddleware, limiter=limiter)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=86400,
    )

    # Outermost: rewrites the client address from trusted proxies only
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=settings.forwarded_allow_ips_list)

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint - health check"""
        return success_response(
            data={"version": API_VERSION, "environment": settings.APP_ENV},
            message=f"Welcome to {settings.APP_NAME} API"
        )

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint"""
        return success_response(
            data={"status": "healthy", "app": settings.APP_NAME, "environment": settings.APP_ENV},
            message="Service is healthy"
        )

    @app.get("/health/db", tags=["Health"])
    def db_health_check(request: Request):
        """Database connection health check"""
        database = get_database(request)
        if database is None:
            return error_response("Database connection not established", status_code=503)

        try:
            database.ping()
        except Exception as e:
            logger.error("Database health check failed: %s", e)
            return error_response("Database is unreachable", status_code=503)

        return success_response(data={"database": "connected"}, message="Database is healthy")

    from photofeed.api import posts, users

    app.include_router(users.router, prefix="/user", tags=["Users"])
    app.include_router(posts.router, prefix="/post", tags=["Posts"])

    # The directory is created at startup
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "photofeed.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.DEBUG
    )
