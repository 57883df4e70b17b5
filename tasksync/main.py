"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers, and the
long-lived objects on app.state (WebSocket manager, change notifier).
See tasksync.core.lifespan and tasksync.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and
optionally clear get_settings cache) before calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tasksync.api.v1 import api_router
from tasksync.api.websocket import ConnectionManager
from tasksync.application.interfaces.repositories import ITaskRepository
from tasksync.core.config import get_settings
from tasksync.core.exception_handlers import register_exception_handlers
from tasksync.core.lifespan import create_lifespan
from tasksync.core.limiter import limiter
from tasksync.infrastructure.messaging import ChangeNotifier
from tasksync.middleware import RequestIDMiddleware, TimeoutMiddleware
from tasksync.shared.logging import setup_logging


def create_app(task_repository: ITaskRepository | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        task_repository: Optional store to use instead of the configured backend
            (tests inject one; the lifespan still pings and closes it).
    """
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.limiter = limiter
    app.state.ws_manager = ConnectionManager()
    app.state.notifier = ChangeNotifier()
    app.state.task_repository = task_repository

    register_exception_handlers(app)

    # Middleware: first added = innermost. Order: timeout → request ID → CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)
    app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/")
    def root() -> dict:
        """Service banner with the main endpoints."""
        return {
            "message": f"{settings.app_name} API is running",
            "status": "active",
            "endpoints": {
                "tasks": "/api/v1/tasks",
                "health": "/api/v1/health",
                "websocket": "/api/v1/ws",
            },
        }

    return app


app = create_app()
