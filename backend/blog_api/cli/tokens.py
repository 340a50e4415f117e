"""Flask CLI commands for refresh-token maintenance."""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from blog_api.core.container import get_auth
from blog_api.services._shared.clock import utcnow
from blog_api.services._shared.errors import StoreError


@click.group("tokens")
def tokens_cli() -> None:
    """Refresh-token maintenance commands."""


@tokens_cli.command("purge")
@with_appcontext
def purge_command() -> None:
    """Delete expired refresh records. Idempotent; safe to run on a timer."""
    try:
        removed = get_auth().refresh_store.purge_expired(utcnow())
    except StoreError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Purged {removed} expired refresh token(s).")
