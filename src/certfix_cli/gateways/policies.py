"""Policy endpoints.

The API has no lookup-by-name for policies; callers that need one scan
``list_policies``.
"""

from __future__ import annotations

from typing import Any

from certfix_cli.gateways._helpers import as_dict, as_list, segment
from certfix_cli.transport.client import ApiSession, Body

POLICY_ID_KEYS = ("politica_id", "policy_id", "id")


def list_policies(
    session: ApiSession, *, enabled_only: bool = False, strategy: str | None = None
) -> list[dict[str, Any]]:
    if enabled_only:
        path = "/politicas/enabled"
    elif strategy:
        path = f"/politicas/strategy/{segment(strategy)}"
    else:
        path = "/politicas"
    return as_list(session.get(path))


def get_policy(session: ApiSession, policy_id: str) -> dict[str, Any]:
    return as_dict(session.get(f"/politicas/{segment(policy_id)}"))


def create_policy(
    session: ApiSession,
    *,
    name: str,
    strategy: str,
    enabled: bool,
    cron_config: dict[str, str] | None = None,
    event_config: dict[str, Any] | None = None,
) -> Body:
    payload: dict[str, Any] = {"name": name, "strategy": strategy, "enabled": enabled}
    if cron_config:
        payload["cron_config"] = cron_config
    if event_config:
        payload["event_config"] = event_config
    return session.post("/politicas", payload)


def update_policy(session: ApiSession, policy_id: str, changes: dict[str, Any]) -> Body:
    return session.put(f"/politicas/{segment(policy_id)}", changes)


def delete_policy(session: ApiSession, policy_id: str) -> Body:
    return session.delete(f"/politicas/{segment(policy_id)}")
