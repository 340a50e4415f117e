"""HTTP layer: versioned blueprints mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from flask import Flask


def init_app(app: Flask) -> None:
    """Mount every API version on ``app`` (``/api/v1/...`` by default)."""
    from blog_api.api.v1 import API_VERSION, api_v1

    base = "/" + app.config.get("API_BASE_PREFIX", "/api").strip("/")
    app.register_blueprint(api_v1, url_prefix=f"{base}/{API_VERSION}")


__all__ = ["init_app"]
