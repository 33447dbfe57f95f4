"""Service relation (dependency matrix) endpoints."""

from __future__ import annotations

from typing import Any

from certfix_cli.gateways._helpers import as_list, segment
from certfix_cli.transport.client import ApiSession, Body


def list_relations(session: ApiSession, service_hash: str) -> list[dict[str, Any]]:
    return as_list(session.get(f"/services/{segment(service_hash)}/matriz"))


def create_relation(
    session: ApiSession,
    source_hash: str,
    *,
    target_hash: str,
    relation_type: str | None = None,
) -> Body:
    payload: dict[str, Any] = {"related_service_hash": target_hash}
    if relation_type:
        payload["relation_type"] = relation_type
    return session.post(f"/services/{segment(source_hash)}/matriz", payload)


def toggle_relation(session: ApiSession, service_hash: str, relation_id: str) -> Body:
    return session.put(
        f"/services/{segment(service_hash)}/matriz/relations/{segment(relation_id)}/toggle"
    )


def delete_relation(session: ApiSession, service_hash: str, relation_id: str) -> Body:
    return session.delete(
        f"/services/{segment(service_hash)}/matriz/relations/{segment(relation_id)}"
    )


def delete_relation_by_target(session: ApiSession, source_hash: str, target_hash: str) -> Body:
    return session.delete(f"/services/{segment(source_hash)}/matriz/{segment(target_hash)}")
