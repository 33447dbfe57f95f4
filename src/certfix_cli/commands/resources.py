"""Per-resource commands. Output is JSON."""

from __future__ import annotations

import typer

from certfix_cli.apply.models import STRATEGIES, STRATEGY_LABELS
from certfix_cli.commands.state import EXIT_USAGE, api_session, emit_json, fail
from certfix_cli.gateways import events, keys, policies, relations, service_groups, services

events_app = typer.Typer(help="Manage events.")
policies_app = typer.Typer(help="Manage policies.")
service_groups_app = typer.Typer(help="Manage service groups.")
services_app = typer.Typer(help="Manage services.")
keys_app = typer.Typer(help="Manage service API keys.")
relations_app = typer.Typer(help="Manage service relations.")


@events_app.command("list")
def events_list(
    ctx: typer.Context,
    enabled: bool = typer.Option(False, "--enabled", help="Only enabled events"),
    severity: str | None = typer.Option(None, "--severity", help="Filter by severity"),
) -> None:
    with api_session(ctx) as session:
        emit_json(events.list_events(session, enabled_only=enabled, severity=severity))


@events_app.command("get")
def events_get(ctx: typer.Context, event_id: str) -> None:
    with api_session(ctx) as session:
        emit_json(events.get_event(session, event_id))


@events_app.command("delete")
def events_delete(ctx: typer.Context, event_id: str) -> None:
    with api_session(ctx) as session:
        events.delete_event(session, event_id)
    typer.echo(f"Deleted event {event_id}")


@policies_app.command("list")
def policies_list(
    ctx: typer.Context,
    enabled: bool = typer.Option(False, "--enabled", help="Only enabled policies"),
    strategy: str | None = typer.Option(None, "--strategy", help="Filter by strategy"),
) -> None:
    with api_session(ctx) as session:
        emit_json(policies.list_policies(session, enabled_only=enabled, strategy=strategy))


@policies_app.command("get")
def policies_get(ctx: typer.Context, policy_id: str) -> None:
    with api_session(ctx) as session:
        emit_json(policies.get_policy(session, policy_id))


@policies_app.command("delete")
def policies_delete(ctx: typer.Context, policy_id: str) -> None:
    with api_session(ctx) as session:
        policies.delete_policy(session, policy_id)
    typer.echo(f"Deleted policy {policy_id}")


@service_groups_app.command("list")
def service_groups_list(
    ctx: typer.Context,
    enabled: bool = typer.Option(False, "--enabled", help="Only enabled groups"),
) -> None:
    with api_session(ctx) as session:
        emit_json(service_groups.list_service_groups(session, enabled_only=enabled))


@service_groups_app.command("get")
def service_groups_get(
    ctx: typer.Context,
    group: str,
    by_name: bool = typer.Option(False, "--by-name", help="Treat GROUP as a name"),
) -> None:
    with api_session(ctx) as session:
        if by_name:
            emit_json(service_groups.get_service_group_by_name(session, group))
        else:
            emit_json(service_groups.get_service_group(session, group))


@service_groups_app.command("delete")
def service_groups_delete(ctx: typer.Context, group_id: str) -> None:
    with api_session(ctx) as session:
        service_groups.delete_service_group(session, group_id)
    typer.echo(f"Deleted service group {group_id}")


@services_app.command("list")
def services_list(
    ctx: typer.Context,
    active: bool = typer.Option(False, "--active", help="Only active services"),
    group: str | None = typer.Option(None, "--group", help="Filter by service group id"),
) -> None:
    with api_session(ctx) as session:
        emit_json(services.list_services(session, active_only=active, group_id=group))


@services_app.command("get")
def services_get(ctx: typer.Context, service_hash: str) -> None:
    with api_session(ctx) as session:
        emit_json(services.get_service(session, service_hash))


@services_app.command("delete")
def services_delete(ctx: typer.Context, service_hash: str) -> None:
    with api_session(ctx) as session:
        services.delete_service(session, service_hash)
    typer.echo(f"Deleted service {service_hash}")


@services_app.command("rotate")
def services_rotate(ctx: typer.Context, service_hashes: str) -> None:
    """Rotate certificates for a comma-separated list of service hashes."""
    hashes = [h.strip() for h in service_hashes.split(",") if h.strip()]
    with api_session(ctx) as session:
        for service_hash in hashes:
            services.rotate_certificate(session, service_hash)
            typer.echo(f"Rotated certificate for service {service_hash}")


@keys_app.command("list")
def keys_list(ctx: typer.Context, service_hash: str) -> None:
    with api_session(ctx) as session:
        emit_json(keys.list_keys(session, service_hash))


@keys_app.command("delete")
def keys_delete(ctx: typer.Context, service_hash: str, key_id: str) -> None:
    with api_session(ctx) as session:
        keys.delete_key(session, service_hash, key_id)
    typer.echo(f"Deleted key {key_id}")


@relations_app.command("list")
def relations_list(ctx: typer.Context, service_hash: str) -> None:
    with api_session(ctx) as session:
        emit_json(relations.list_relations(session, service_hash))


@relations_app.command("delete")
def relations_delete(ctx: typer.Context, service_hash: str, relation_id: str) -> None:
    with api_session(ctx) as session:
        relations.delete_relation(session, service_hash, relation_id)
    typer.echo(f"Deleted relation {relation_id}")


def _set_enabled(ctx: typer.Context, update, resource: str, resource_id: str, enabled: bool) -> None:
    with api_session(ctx) as session:
        update(session, resource_id, {"enabled": enabled})
    typer.echo(f"{'Enabled' if enabled else 'Disabled'} {resource} {resource_id}")


@events_app.command("enable")
def events_enable(ctx: typer.Context, event_id: str) -> None:
    _set_enabled(ctx, events.update_event, "event", event_id, True)


@events_app.command("disable")
def events_disable(ctx: typer.Context, event_id: str) -> None:
    _set_enabled(ctx, events.update_event, "event", event_id, False)


@policies_app.command("enable")
def policies_enable(ctx: typer.Context, policy_id: str) -> None:
    _set_enabled(ctx, policies.update_policy, "policy", policy_id, True)


@policies_app.command("disable")
def policies_disable(ctx: typer.Context, policy_id: str) -> None:
    _set_enabled(ctx, policies.update_policy, "policy", policy_id, False)


@service_groups_app.command("enable")
def service_groups_enable(ctx: typer.Context, group_id: str) -> None:
    _set_enabled(ctx, service_groups.update_service_group, "service group", group_id, True)


@service_groups_app.command("disable")
def service_groups_disable(ctx: typer.Context, group_id: str) -> None:
    _set_enabled(ctx, service_groups.update_service_group, "service group", group_id, False)


@keys_app.command("toggle")
def keys_toggle(ctx: typer.Context, service_hash: str, key_id: str) -> None:
    with api_session(ctx) as session:
        emit_json(keys.toggle_key(session, service_hash, key_id))


@relations_app.command("toggle")
def relations_toggle(ctx: typer.Context, service_hash: str, relation_id: str) -> None:
    with api_session(ctx) as session:
        emit_json(relations.toggle_relation(session, service_hash, relation_id))


def _severity(value: str) -> str:
    severity = value.strip().lower()
    if severity not in events.SEVERITIES:
        allowed = ", ".join(events.SEVERITIES)
        fail(f"invalid severity: {value} (must be one of: {allowed})", EXIT_USAGE)
    return severity


def _reset_unit(value: str) -> str:
    if value not in events.RESET_UNITS:
        allowed = ", ".join(events.RESET_UNITS)
        fail(f"invalid reset unit: {value} (must be one of: {allowed})", EXIT_USAGE)
    return value


def _strategy(value: str) -> str:
    strategy = STRATEGY_LABELS.get(value.strip(), value.strip())
    if strategy not in STRATEGIES:
        fail(
            f"invalid strategy: {value} (must be one of: {', '.join(STRATEGY_LABELS)})",
            EXIT_USAGE,
        )
    return strategy


def _cron_fields(**fields: str | None) -> dict[str, str]:
    return {name: value for name, value in fields.items() if value is not None}


@events_app.command("create")
def events_create(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", "-n", help="Event name"),
    severity: str = typer.Option(..., "--severity", "-s", help="low, medium, high or critical"),
    enabled: bool = typer.Option(True, "--enabled/--disabled", help="Enable the event"),
    reset_unit: str = typer.Option("hours", "--reset-unit", help="minutes, hours or days"),
    reset_value: int = typer.Option(
        0, "--reset-value", help="Reset the counter after this long without events (0 = never)"
    ),
) -> None:
    severity = _severity(severity)
    reset_unit = _reset_unit(reset_unit)
    with api_session(ctx) as session:
        emit_json(
            events.create_event(
                session,
                name=name,
                severity=severity,
                enabled=enabled,
                reset_unit=reset_unit,
                reset_value=reset_value,
            )
        )


@events_app.command("update")
def events_update(
    ctx: typer.Context,
    event_id: str,
    name: str | None = typer.Option(None, "--name", "-n"),
    severity: str | None = typer.Option(None, "--severity", "-s"),
    enabled: bool | None = typer.Option(None, "--enabled/--disabled"),
    reset_unit: str | None = typer.Option(None, "--reset-unit"),
    reset_value: int | None = typer.Option(None, "--reset-value"),
) -> None:
    changes: dict[str, object] = {}
    if name:
        changes["name"] = name
    if severity:
        changes["severity"] = _severity(severity)
    if enabled is not None:
        changes["enabled"] = enabled
    if reset_unit:
        changes["reset_time_unit"] = _reset_unit(reset_unit)
    if reset_value is not None:
        changes["reset_time_value"] = reset_value
    if not changes:
        fail("no fields to update", EXIT_USAGE)

    with api_session(ctx) as session:
        emit_json(events.update_event(session, event_id, changes))


@policies_app.command("create")
def policies_create(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", "-n", help="Policy name"),
    strategy: str = typer.Option(
        ..., "--strategy", "-s", help="Gradual, Janela de Manutenção or Eventos"
    ),
    enabled: bool = typer.Option(True, "--enabled/--disabled", help="Enable the policy"),
    cron_minute: str | None = typer.Option(None, "--cron-minute"),
    cron_hour: str | None = typer.Option(None, "--cron-hour"),
    cron_day: str | None = typer.Option(None, "--cron-day"),
    cron_month: str | None = typer.Option(None, "--cron-month"),
    cron_weekday: str | None = typer.Option(None, "--cron-weekday"),
    event_id: str | None = typer.Option(None, "--event-id", help="Trigger event (Eventos)"),
    event_total: int = typer.Option(1, "--event-total", help="Events needed to trigger"),
) -> None:
    cron = _cron_fields(
        minute=cron_minute, hour=cron_hour, day=cron_day, month=cron_month, weekday=cron_weekday
    )
    cron_config = None
    if cron:
        # Unset cron fields mean "every".
        cron_config = {f: cron.get(f, "*") for f in ("minute", "hour", "day", "month", "weekday")}
    event_config = None
    if event_id:
        event_config = {"evento_id": event_id, "total_eventos": event_total}
    strategy = _strategy(strategy)

    with api_session(ctx) as session:
        emit_json(
            policies.create_policy(
                session,
                name=name,
                strategy=strategy,
                enabled=enabled,
                cron_config=cron_config,
                event_config=event_config,
            )
        )


@policies_app.command("update")
def policies_update(
    ctx: typer.Context,
    policy_id: str,
    name: str | None = typer.Option(None, "--name", "-n"),
    strategy: str | None = typer.Option(None, "--strategy", "-s"),
    enabled: bool | None = typer.Option(None, "--enabled/--disabled"),
    cron_minute: str | None = typer.Option(None, "--cron-minute"),
    cron_hour: str | None = typer.Option(None, "--cron-hour"),
    cron_day: str | None = typer.Option(None, "--cron-day"),
    cron_month: str | None = typer.Option(None, "--cron-month"),
    cron_weekday: str | None = typer.Option(None, "--cron-weekday"),
    event_id: str | None = typer.Option(None, "--event-id"),
    event_total: int | None = typer.Option(None, "--event-total"),
) -> None:
    changes: dict[str, object] = {}
    if name:
        changes["name"] = name
    if strategy:
        changes["strategy"] = _strategy(strategy)
    if enabled is not None:
        changes["enabled"] = enabled
    cron = _cron_fields(
        minute=cron_minute, hour=cron_hour, day=cron_day, month=cron_month, weekday=cron_weekday
    )
    if cron:
        changes["cron_config"] = cron
    event_config: dict[str, object] = {}
    if event_id:
        event_config["evento_id"] = event_id
    if event_total is not None:
        event_config["total_eventos"] = event_total
    if event_config:
        changes["event_config"] = event_config
    if not changes:
        fail("no fields to update", EXIT_USAGE)

    with api_session(ctx) as session:
        emit_json(policies.update_policy(session, policy_id, changes))


@keys_app.command("get")
def keys_get(ctx: typer.Context, service_hash: str) -> None:
    """Show a service together with all of its API keys."""
    with api_session(ctx) as session:
        emit_json(keys.get_service_keys(session, service_hash))


@keys_app.command("add")
def keys_add(
    ctx: typer.Context,
    service_hash: str,
    name: str = typer.Option(..., "--name", "-n", help="Key name"),
    expiration: int = typer.Option(365, "--expiration", "-e", help="Days until the key expires"),
) -> None:
    if expiration <= 0:
        fail("expiration days must be greater than 0 (use --expiration)", EXIT_USAGE)

    with api_session(ctx) as session:
        emit_json(
            keys.create_key(
                session, service_hash, name=name, enabled=True, expiration_days=expiration
            )
        )
    typer.echo("Save the API key now. It won't be shown again in full.", err=True)


def _toggle_key(ctx: typer.Context, service_hash: str, key_id: str) -> None:
    # The API only exposes a toggle, so enable and disable both flip the current state.
    with api_session(ctx) as session:
        keys.toggle_key(session, service_hash, key_id)
    typer.echo(f"Toggled key {key_id}")
    typer.echo("The toggle endpoint switches the current state; run 'keys get' to verify.")


@keys_app.command("enable")
def keys_enable(ctx: typer.Context, service_hash: str, key_id: str) -> None:
    _toggle_key(ctx, service_hash, key_id)


@keys_app.command("disable")
def keys_disable(ctx: typer.Context, service_hash: str, key_id: str) -> None:
    _toggle_key(ctx, service_hash, key_id)
