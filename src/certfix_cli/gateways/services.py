"""Service endpoints."""

from __future__ import annotations

from typing import Any

from certfix_cli.gateways._helpers import as_dict, as_list, segment
from certfix_cli.transport.client import ApiSession, Body, TransportError


def list_services(
    session: ApiSession, *, active_only: bool = False, group_id: str | None = None
) -> list[dict[str, Any]]:
    if active_only:
        path = "/services/active"
    elif group_id:
        path = f"/services/group/{segment(group_id)}"
    else:
        path = "/services"
    return as_list(session.get(path))


def get_service(session: ApiSession, service_hash: str) -> dict[str, Any]:
    return as_dict(session.get(f"/services/{segment(service_hash)}"))


def service_exists(session: ApiSession, service_hash: str) -> bool:
    """True when the service is found; a 404 means absent, other errors propagate."""
    try:
        session.get(f"/services/{segment(service_hash)}")
    except TransportError as exc:
        if exc.not_found:
            return False
        raise
    return True


def create_service(session: ApiSession, payload: dict[str, Any]) -> Body:
    return session.post("/services", payload)


def delete_service(session: ApiSession, service_hash: str) -> Body:
    return session.delete(f"/services/{segment(service_hash)}")


def rotate_certificate(session: ApiSession, service_hash: str) -> Body:
    return session.post(f"/services/{segment(service_hash)}/certificates/rotate", {})
