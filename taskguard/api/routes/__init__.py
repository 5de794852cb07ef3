from __future__ import annotations

from taskguard.api.routes.admin import router as admin_router
from taskguard.api.routes.auth import router as auth_router
from taskguard.api.routes.contacts import router as contacts_router
from taskguard.api.routes.health import router as health_router
from taskguard.api.routes.tasks import router as tasks_router

__all__ = ["admin_router", "auth_router", "contacts_router", "health_router", "tasks_router"]
