"""OpenAPI customisation: security schemes and tag metadata.

Both identifying headers are documented as API-key schemes so the
interactive docs can send them. Health endpoints are exempt.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

SECURITY_SCHEMES = {
    "ApiKeyAuth": {
        "type": "apiKey",
        "in": "header",
        "name": "X-API-Key",
        "description": "Client application key.",
    },
    "UserId": {
        "type": "apiKey",
        "in": "header",
        "name": "X-User-ID",
        "description": "Identifier of the end user making the request.",
    },
}

TAGS_METADATA = [
    {"name": "Ideas", "description": "Submit ideas, read analyses and ask follow-up questions."},
    {"name": "Quota", "description": "Question credits used and remaining."},
    {"name": "Health", "description": "Liveness checks."},
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add security and tags."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        for name, scheme in SECURITY_SCHEMES.items():
            security_schemes.setdefault(name, scheme)
        schema.setdefault("security", [{"ApiKeyAuth": [], "UserId": []}])

        tags = schema.setdefault("tags", [])
        existing = {tag.get("name") for tag in tags}
        tags.extend(tag for tag in TAGS_METADATA if tag["name"] not in existing)

        for path, methods in schema.get("paths", {}).items():
            if path.endswith("/health"):
                for method_obj in methods.values():
                    if isinstance(method_obj, dict):
                        method_obj["security"] = []

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
