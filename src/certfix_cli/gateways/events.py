"""Event endpoints."""

from __future__ import annotations

from typing import Any

from certfix_cli.gateways._helpers import as_dict, as_list, segment
from certfix_cli.transport.client import ApiSession, Body

EVENT_ID_KEYS = ("evento_id", "event_id", "id")
SEVERITIES = ("low", "medium", "high", "critical")
RESET_UNITS = ("minutes", "hours", "days")


def list_events(
    session: ApiSession, *, enabled_only: bool = False, severity: str | None = None
) -> list[dict[str, Any]]:
    if enabled_only:
        path = "/events/enabled"
    elif severity:
        path = f"/events/severity/{segment(severity)}"
    else:
        path = "/events"
    return as_list(session.get(path))


def get_event(session: ApiSession, event_id: str) -> dict[str, Any]:
    return as_dict(session.get(f"/events/{segment(event_id)}"))


def create_event(
    session: ApiSession,
    *,
    name: str,
    severity: str,
    enabled: bool,
    reset_unit: str | None = None,
    reset_value: int | None = None,
) -> Body:
    payload: dict[str, Any] = {"name": name, "severity": severity, "enabled": enabled}
    if reset_unit is not None:
        payload["reset_time_unit"] = reset_unit
    if reset_value is not None:
        payload["reset_time_value"] = reset_value
    return session.post("/events", payload)


def update_event(session: ApiSession, event_id: str, changes: dict[str, Any]) -> Body:
    return session.put(f"/events/{segment(event_id)}", changes)


def delete_event(session: ApiSession, event_id: str) -> Body:
    return session.delete(f"/events/{segment(event_id)}")
