"""Service group endpoints."""

from __future__ import annotations

from typing import Any

from certfix_cli.gateways._helpers import as_dict, as_list, segment
from certfix_cli.transport.client import ApiSession, Body

SERVICE_GROUP_ID_KEYS = ("service_group_id", "id")


def list_service_groups(session: ApiSession, *, enabled_only: bool = False) -> list[dict[str, Any]]:
    path = "/service-groups/enabled" if enabled_only else "/service-groups"
    return as_list(session.get(path))


def get_service_group(session: ApiSession, group_id: str) -> dict[str, Any]:
    return as_dict(session.get(f"/service-groups/{segment(group_id)}"))


def get_service_group_by_name(session: ApiSession, name: str) -> dict[str, Any]:
    return as_dict(session.get(f"/service-groups/name/{segment(name)}"))


def create_service_group(
    session: ApiSession, *, name: str, description: str | None, enabled: bool
) -> Body:
    return session.post(
        "/service-groups",
        {"name": name, "description": description or "", "enabled": enabled},
    )


def update_service_group(session: ApiSession, group_id: str, changes: dict[str, Any]) -> Body:
    return session.put(f"/service-groups/{segment(group_id)}", changes)


def delete_service_group(session: ApiSession, group_id: str) -> Body:
    return session.delete(f"/service-groups/{segment(group_id)}")
