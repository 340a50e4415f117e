"""WSGI entrypoint for gunicorn: ``gunicorn -c gunicorn.conf.py blog_api.wsgi:app``."""

from __future__ import annotations

from blog_api import create_app

app = create_app()
