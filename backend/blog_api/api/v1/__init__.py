"""Version 1 of the blog API."""

from __future__ import annotations

from flask import Blueprint

from .auth import bp as auth_bp
from .health import bp as health_bp
from .posts import bp as posts_bp

API_VERSION = "v1"

api_v1 = Blueprint("api_v1", __name__)
api_v1.register_blueprint(health_bp)  # /api/v1/health
api_v1.register_blueprint(auth_bp, url_prefix="/auth")
api_v1.register_blueprint(posts_bp, url_prefix="/posts")
