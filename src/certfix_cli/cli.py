"""Entrypoint for the ``certfix`` command."""

from __future__ import annotations

import logging

import typer

from certfix_cli import __version__
from certfix_cli.commands import apply_cmd, auth_cmd, config_cmd, resources
from certfix_cli.commands.state import EXIT_USAGE, fail, get_state
from certfix_cli.logging_utils import configure_logging

app = typer.Typer(
    name="certfix",
    help=(
        "Certfix CLI - manage services, policies, events and their keys from the "
        "command line, or provision them in bulk with 'apply'."
    ),
    no_args_is_help=True,
)

app.command("configure")(config_cmd.configure)
app.command("login")(auth_cmd.login)
app.command("logout")(auth_cmd.logout)
app.command("apply")(apply_cmd.apply)
app.add_typer(config_cmd.app, name="config")
app.add_typer(resources.events_app, name="events")
app.add_typer(resources.policies_app, name="policies")
app.add_typer(resources.service_groups_app, name="service-groups")
app.add_typer(resources.services_app, name="services")
app.add_typer(resources.keys_app, name="keys")
app.add_typer(resources.relations_app, name="relations")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"certfix-cli {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(
        None, "--config", help="Config file (default is $CERTFIX_HOME/config.yaml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version"
    ),
) -> None:
    state = get_state(ctx)
    state.config_file = config
    state.verbose = verbose
    try:
        settings = state.settings()
    except RuntimeError as exc:
        fail(str(exc), EXIT_USAGE)
    configure_logging(settings, verbose=verbose)
    logging.getLogger(__name__).debug("certfix-cli %s, endpoint %s", __version__, settings.api.endpoint)


def run_entrypoint() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    run_entrypoint()
