"""``apply``: provision resources from a YAML document."""

from __future__ import annotations

from pathlib import Path

import typer

from certfix_cli.apply import (
    ApplyContext,
    ApplyError,
    ApplyOrchestrator,
    DocumentParseError,
    build_plan,
    load_document,
)
from certfix_cli.apply.errors import Unauthenticated
from certfix_cli.commands.state import EXIT_FAILURE, EXIT_USAGE, fail, get_state
from certfix_cli.logging_utils import get_logger


def apply(
    ctx: typer.Context,
    config_file: Path = typer.Argument(..., help="Configuration document (YAML)"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Show what would be created without making changes"
    ),
    skip_existing: bool = typer.Option(
        False, "--skip-existing", help="Skip services that already exist instead of failing"
    ),
) -> None:
    """Apply a configuration of events, policies, service groups and services.

    Resources are created in order; if any step fails, everything created so
    far is deleted again in reverse order.
    """
    typer.echo(f"Reading configuration from: {config_file}")
    try:
        document = load_document(config_file)
    except DocumentParseError as exc:
        fail(str(exc), EXIT_USAGE)

    typer.echo("Configuration loaded successfully")
    typer.echo(f"  - Events: {len(document.events)}")
    typer.echo(f"  - Policies: {len(document.policies)}")
    typer.echo(f"  - Service Groups: {len(document.service_groups)}")
    typer.echo(f"  - Services: {len(document.services)}")

    if dry_run:
        typer.echo("\n=== DRY RUN MODE - No changes will be made ===\n")
        typer.echo(build_plan(document).render())
        return

    state = get_state(ctx)
    orchestrator_log = get_logger("certfix_cli.apply")
    with state.client() as client:
        context = ApplyContext(
            client=client,
            token_provider=lambda: state.credentials().get_token(),
            logger=orchestrator_log,
        )
        try:
            summary = ApplyOrchestrator(context).apply(document, skip_existing=skip_existing)
        except Unauthenticated as exc:
            fail(str(exc))
        except ApplyError as exc:
            report = exc.rollback
            if report is not None and report.attempted:
                typer.echo(
                    f"Apply failed after creating {report.attempted} resources; "
                    f"rollback attempted for {report.attempted}, {report.succeeded} succeeded.",
                    err=True,
                )
                for failure in report.failures:
                    typer.echo(
                        f"  not rolled back: {failure.entry.describe()} ({failure.error})",
                        err=True,
                    )
            else:
                typer.echo("Apply failed before any resource was created.", err=True)
            fail(str(exc), EXIT_FAILURE)

    typer.echo(f"Applied {summary.created_count} resources")
    if summary.skipped:
        typer.echo(f"Skipped {len(summary.skipped)} existing services: {', '.join(summary.skipped)}")
