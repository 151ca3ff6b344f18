"""
FastAPI application factory
"""
import logging

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from taskboard.api.errors import install_error_handlers
from taskboard.api.middleware import ErrorLoggingMiddleware, RateLimitMiddleware, RequestLoggingMiddleware
from taskboard.api.v1 import auth, headings, lists, statuses, tags, tasks, users
from taskboard.auth import TokenService
from taskboard.config import Settings, get_settings
from taskboard.infrastructure.db.session import check_db_connection
from taskboard.logger import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Application factory - builds and wires the FastAPI app

    Args:
        settings: explicit settings (tests); defaults to get_settings()

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    setup_logging(settings.ENV)

    app = FastAPI(title="Taskboard")
    app.state.settings = settings
    app.state.tokens = TokenService(settings)

    install_error_handlers(app)

    # Last added runs first: request logging -> rate limit -> error logging
    app.add_middleware(ErrorLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware, limit=settings.HTTP_REQUEST_LIMIT_BY_IP)
    app.add_middleware(RequestLoggingMiddleware)

    # Routers
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(lists.router)
    app.include_router(headings.router)
    app.include_router(tasks.router)
    app.include_router(tags.router)
    app.include_router(statuses.router)

    # Health checks
    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (database reachable)"""
        check_db_connection()
        return "ok"

    logger.debug("application created env=%s", settings.ENV)
    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn on HTTP_ADDRESS"""
    import uvicorn

    settings = get_settings()
    host, port = settings.get_http_bind()
    uvicorn.run(
        "taskboard.main:create_app",
        factory=True,
        host=host,
        port=port,
        timeout_keep_alive=settings.HTTP_IDLE_TIMEOUT,
        log_config=None,
    )


if __name__ == "__main__":
    run()
