"""OpenAPI customization.

Adds the two security schemes (admin API key and session token), marks the
admin and session-bound operations with them, and registers tag metadata.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from taskguard.core.config import settings

_TAGS = [
    {"name": "Auth", "description": "Login, logout and session lookup guarded by the login throttle."},
    {"name": "Admin", "description": "Attempt records and audit log inspection (X-API-Key)."},
    {"name": "Tasks", "description": "Task list."},
    {"name": "Contacts", "description": "Contact directory."},
    {"name": "Health", "description": "Liveness checks."},
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add security schemes and tags."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        security_schemes = schema.setdefault("components", {}).setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "ApiKeyAuth",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-API-Key",
                "description": "Admin key for /v1/admin endpoints.",
            },
        )
        security_schemes.setdefault(
            "SessionToken",
            {
                "type": "apiKey",
                "in": "header",
                "name": settings.app.session_header,
                "description": "Token returned by POST /v1/auth/login.",
            },
        )

        tags = schema.setdefault("tags", [])
        existing = {t.get("name") for t in tags}
        tags.extend(tag for tag in _TAGS if tag["name"] not in existing)

        for path, methods in schema.get("paths", {}).items():
            if "/admin/" in path:
                requirement = [{"ApiKeyAuth": []}]
            elif path.endswith("/auth/session") or path.endswith("/auth/logout"):
                requirement = [{"SessionToken": []}]
            else:
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj["security"] = requirement

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
