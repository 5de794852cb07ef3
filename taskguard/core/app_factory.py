"""Application factory for the FastAPI app.

Centralizes app construction (services, middleware, handlers, routers) so
tests can build isolated instances with their own store and clock.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from taskguard.api.routes import (
    admin_router,
    auth_router,
    contacts_router,
    health_router,
    tasks_router,
)
from taskguard.core.config import Settings, settings as default_settings
from taskguard.core.container import ServiceContainer
from taskguard.core.exception_handlers import setup_exception_handlers
from taskguard.core.logging import configure_logging
from taskguard.core.middleware import request_id_middleware
from taskguard.core.openapi import apply_openapi_customizations


def create_app(
    cfg: Settings | None = None,
    *,
    container: ServiceContainer | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        cfg: Settings to build services from; defaults to global settings.
        container: Pre-built services (tests inject stores and clocks here).
        configure_logs: Reconfigure root logging from ``cfg.log``.

    Returns:
        Configured FastAPI app. Services live on ``app.state.container`` and
        are closed when the app shuts down.
    """
    cfg = cfg or default_settings

    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(cfg.log)

    services = container or ServiceContainer.create(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            services.close()

    app = FastAPI(
        title="TaskGuard API",
        description=(
            "Demo tasks/contacts service with a two-tier login-attempt throttle "
            "(5 failures per 15 minutes, 10 per hour), session tokens and an "
            "append-only audit log."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.container = services

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(auth_router, prefix="/v1")
    app.include_router(admin_router, prefix="/v1")
    app.include_router(tasks_router, prefix="/v1")
    app.include_router(contacts_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
