"""Configuration commands: ``configure`` and ``config set/get/list``."""

from __future__ import annotations

import typer

from certfix_cli.commands.state import EXIT_USAGE, fail, get_state
from certfix_cli.config import get_config_value, normalize_endpoint, read_config_file, set_config_value

app = typer.Typer(help="Manage configuration settings.")


def configure(
    ctx: typer.Context,
    api_url: str | None = typer.Option(None, "--api-url", help="API endpoint URL"),
    timeout: float | None = typer.Option(None, "--timeout", help="Request timeout in seconds"),
    retry_attempts: int | None = typer.Option(
        None, "--retry-attempts", help="Connection retry attempts"
    ),
) -> None:
    """Set the API endpoint and connection settings."""
    if api_url is None and timeout is None and retry_attempts is None:
        fail("provide at least one of --api-url, --timeout, --retry-attempts", EXIT_USAGE)

    updates: list[tuple[str, str]] = []
    if api_url is not None:
        try:
            updates.append(("endpoint", normalize_endpoint(api_url)))
        except ValueError as exc:
            fail(f"invalid API URL: {exc}", EXIT_USAGE)
    if timeout is not None:
        if timeout <= 0:
            fail("timeout must be greater than 0", EXIT_USAGE)
        updates.append(("timeout", str(timeout)))
    if retry_attempts is not None:
        if retry_attempts < 0:
            fail("retry attempts must be 0 or greater", EXIT_USAGE)
        updates.append(("retry_attempts", str(retry_attempts)))

    path = get_state(ctx).config_path()
    for key, value in updates:
        set_config_value(path, key, value)
        typer.echo(f"Configured {key}: {value}")


@app.command("set")
def config_set(ctx: typer.Context, key: str, value: str) -> None:
    """Set a configuration value."""
    try:
        set_config_value(get_state(ctx).config_path(), key, value)
    except ValueError as exc:
        fail(str(exc), EXIT_USAGE)
    typer.echo(f"Configuration updated: {key} = {value}")


@app.command("get")
def config_get(ctx: typer.Context, key: str) -> None:
    """Print a configuration value."""
    try:
        value = get_config_value(get_state(ctx).config_path(), key)
    except KeyError as exc:
        fail(str(exc.args[0]))
    typer.echo(f"{key} = {value}")


@app.command("list")
def config_list(ctx: typer.Context) -> None:
    """Print every persisted configuration value."""
    values = read_config_file(get_state(ctx).config_path())
    if not values:
        typer.echo("No configurations found")
        return
    typer.echo("Current configurations:")
    for key in sorted(values):
        typer.echo(f"  {key} = {values[key]}")
