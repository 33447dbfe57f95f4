"""Service API key endpoints."""

from __future__ import annotations

from typing import Any

from certfix_cli.gateways._helpers import as_dict, as_list, segment
from certfix_cli.transport.client import ApiSession, Body


def list_keys(session: ApiSession, service_hash: str) -> list[dict[str, Any]]:
    return as_list(session.get(f"/services/{segment(service_hash)}/keys"))


def create_key(
    session: ApiSession,
    service_hash: str,
    *,
    name: str,
    enabled: bool,
    expiration_days: int | None = None,
) -> Body:
    payload: dict[str, Any] = {"key_name": name, "enabled": enabled}
    if expiration_days:
        payload["expiration_days"] = expiration_days
    return session.post(f"/services/{segment(service_hash)}/keys", payload)


def toggle_key(session: ApiSession, service_hash: str, key_id: str) -> Body:
    return session.put(f"/services/{segment(service_hash)}/keys/{segment(key_id)}/toggle")


def delete_key(session: ApiSession, service_hash: str, key_id: str) -> Body:
    return session.delete(f"/services/{segment(service_hash)}/keys/{segment(key_id)}")


def get_service_keys(session: ApiSession, service_hash: str) -> dict[str, Any]:
    """Service summary plus its keys, as ``{"service": {...}, "keys": [...]}``."""
    return as_dict(session.get(f"/services/{segment(service_hash)}/keys"))
