"""OpenAPI configuration for inspiradraw."""

from __future__ import annotations

from litestar.openapi.config import OpenAPIConfig
from litestar.openapi.plugins import ScalarRenderPlugin, SwaggerRenderPlugin


def create_openapi_config(version: str) -> OpenAPIConfig:
    """Build the OpenAPI configuration served under /schema.

    Endpoints:
        - /schema/ - Scalar UI (default)
        - /schema/swagger - Swagger UI
        - /schema/openapi.json - OpenAPI schema

    Args:
        version: The application version shown in the schema.

    Returns:
        The OpenAPI configuration.
    """
    return OpenAPIConfig(
        title="InspiraDraw",
        version=version,
        description="Room verification and management API for the collaborative whiteboard.",
        path="/schema",
        render_plugins=[ScalarRenderPlugin(path="/"), SwaggerRenderPlugin(path="/swagger")],
    )
