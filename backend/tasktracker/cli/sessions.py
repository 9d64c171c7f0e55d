"""Flask CLI commands for refresh-session maintenance."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from tasktracker.core.security import get_session_store, get_token_codec
from tasktracker.services.auth import SessionService

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.getLogger("tasktracker.infra").setLevel(level)
    LOGGER.setLevel(level)


@click.group("sessions")
@click.option("--verbose", is_flag=True, help="Enable verbose logging.")
def sessions_cli(verbose: bool) -> None:
    """Inspect and reclaim server-side refresh sessions."""
    _configure_logging(verbose)


@sessions_cli.command("sweep")
@with_appcontext
def sweep_command() -> None:
    """Delete expired refresh sessions from the configured store.

    Expired sessions are already rejected on use; this only reclaims storage.
    """
    removed = get_session_store().sweep_expired()
    click.echo(f"Removed {removed} expired session(s).")


@sessions_cli.command("revoke-user")
@click.argument("user_id", type=click.IntRange(min=1))
@with_appcontext
def revoke_user_command(user_id: int) -> None:
    """Revoke every live refresh session of USER_ID (logout everywhere)."""
    service = SessionService(codec=get_token_codec(), store=get_session_store())
    count = service.logout_all(user_id)
    click.echo(f"Revoked {count} session(s) for user {user_id}.")
