"""Name-to-ID lookups for soft references in apply documents.

The orchestrator only calls the two ``resolve_*`` functions; how each lookup
reaches the API stays here.
"""

from __future__ import annotations

from certfix_cli.apply.errors import ReferenceNotFound, TransportError
from certfix_cli.gateways import policies, service_groups
from certfix_cli.gateways._helpers import pick_id
from certfix_cli.transport.client import ApiSession
from certfix_cli.transport.client import TransportError as TransportFailure


def resolve_service_group_id(
    session: ApiSession, name: str, *, referenced_by: str | None = None
) -> str:
    try:
        group = service_groups.get_service_group_by_name(session, name)
    except TransportFailure as exc:
        if exc.not_found:
            raise ReferenceNotFound(
                "service_group", name, referenced_by=referenced_by
            ) from exc
        raise TransportError.wrap(f"failed to find service group '{name}'", exc) from exc

    group_id = pick_id(group, *service_groups.SERVICE_GROUP_ID_KEYS)
    if group_id is None:
        raise ReferenceNotFound("service_group", name, referenced_by=referenced_by)
    return group_id


def resolve_policy_id(session: ApiSession, name: str, *, referenced_by: str | None = None) -> str:
    # No by-name endpoint for policies: scan the full listing.
    try:
        listing = policies.list_policies(session)
    except TransportFailure as exc:
        raise TransportError.wrap("failed to get policies", exc) from exc

    for policy in listing:
        if policy.get("name") == name:
            policy_id = pick_id(policy, *policies.POLICY_ID_KEYS)
            if policy_id is not None:
                return policy_id
    raise ReferenceNotFound("policy", name, referenced_by=referenced_by)
