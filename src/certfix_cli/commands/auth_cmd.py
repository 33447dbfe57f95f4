"""``login`` and ``logout``."""

from __future__ import annotations

import logging

import typer

from certfix_cli.auth.credentials import AuthError, login as exchange_token
from certfix_cli.commands.state import fail, get_state
from certfix_cli.config import DEFAULT_ENDPOINT

logger = logging.getLogger(__name__)


def login(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", "-e", help="Account email"),
    token: str = typer.Option(..., "--token", "-t", help="Personal access token"),
) -> None:
    """Authenticate and store a session token."""
    state = get_state(ctx)
    settings = state.settings()
    if settings.api.endpoint == DEFAULT_ENDPOINT:
        logger.info("Using default API endpoint %s", DEFAULT_ENDPOINT)

    with state.client() as client:
        try:
            session_token = exchange_token(client, email, token)
        except AuthError as exc:
            logger.debug("Login failed: %s", exc)
            fail(f"login failed: {exc}")

    try:
        stored = state.credentials().store_token(session_token)
    except OSError as exc:
        fail(f"failed to store token: {exc}")
    typer.echo(f"Successfully logged in (token valid until {stored.expires_at:%Y-%m-%d %H:%M} UTC)")


def logout(ctx: typer.Context) -> None:
    """Remove the stored session token."""
    try:
        removed = get_state(ctx).credentials().clear()
    except OSError as exc:
        fail(f"failed to remove token file: {exc}")
    typer.echo("Successfully logged out" if removed else "Already logged out")
