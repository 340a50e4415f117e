"""Flask CLI commands for schema bootstrap and administrative accounts."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from blog_api.core.container import get_auth
from blog_api.core.extensions import db
from blog_api.services._shared.errors import ServiceError
from blog_api.services.identity.service import IdentityService
from blog_api.services.sessions.validation import validate_registration

LOGGER = logging.getLogger(__name__)


@click.group("seed")
def seed_cli() -> None:
    """Collection of database seeding commands."""


@seed_cli.command("schema")
@with_appcontext
def schema_command() -> None:
    """Create missing tables from the model metadata."""
    db.create_all()
    click.echo("Schema ready.")


@seed_cli.command("admin")
@click.option("--username", required=True, help="Admin username.")
@click.option("--email", required=True, help="Admin email.")
@click.option(
    "--password",
    required=True,
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Admin password (prompted when omitted).",
)
@with_appcontext
def admin_command(username: str, email: str, password: str) -> None:
    """Create an ``admin`` account; registration never grants this role."""
    username = username.strip()
    email = email.strip().lower()
    errors = validate_registration(username=username, email=email, password=password)
    if errors:
        lines = [f"{field}: {' '.join(msgs)}" for field, msgs in sorted(errors.items())]
        raise click.BadParameter("; ".join(lines))

    digest = get_auth().hasher.hash(password)
    try:
        user = IdentityService().create_admin(
            username=username, email=email, password_hash=digest
        )
    except ServiceError as exc:
        raise click.ClickException(str(exc)) from exc
    LOGGER.info("Admin created", extra={"event": "seed_admin", "user_id": user.id})
    click.echo(f"Created admin {user.username} (id={user.id}).")
