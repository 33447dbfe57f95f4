from __future__ import annotations

import pytest

from certfix_cli.gateways import events, keys, policies, relations, service_groups, services
from certfix_cli.gateways._helpers import as_list, pick_id, segment
from certfix_cli.transport.client import ApiSession, TransportError


def test_segment_escapes_path_separators() -> None:
    assert segment("team a/b") == "team%20a%2Fb"


def test_as_list_unwraps_container_objects() -> None:
    assert as_list([{"a": 1}, "noise"]) == [{"a": 1}]
    assert as_list({"items": [{"a": 1}], "total": 1}) == [{"a": 1}]
    assert as_list(None) == []


def test_pick_id_takes_first_present_key() -> None:
    assert pick_id({"id": 7, "evento_id": ""}, "evento_id", "id") == "7"
    assert pick_id(None, "id") is None


@pytest.mark.parametrize(
    ("kwargs", "path"),
    [
        ({}, "GET /events"),
        ({"enabled_only": True}, "GET /events/enabled"),
        ({"severity": "high"}, "GET /events/severity/high"),
    ],
)
def test_list_events_paths(remote, session: ApiSession, kwargs, path: str) -> None:
    events.list_events(session, **kwargs)

    assert remote.calls == [path]


def test_event_crud(remote, session: ApiSession) -> None:
    created = events.create_event(session, name="expiring", severity="high", enabled=True)
    event_id = pick_id(created, *events.EVENT_ID_KEYS)

    events.update_event(session, event_id, {"enabled": False})
    assert remote.events[event_id]["enabled"] is False
    assert events.list_events(session) == [remote.events[event_id]]

    events.delete_event(session, event_id)
    assert remote.events == {}


def test_create_policy_omits_empty_sub_configs(remote, session: ApiSession) -> None:
    policies.create_policy(session, name="p", strategy="gradual", enabled=True, cron_config={})

    assert remote.payloads["POST /politicas"] == [
        {"name": "p", "strategy": "gradual", "enabled": True}
    ]


def test_list_policies_by_strategy(remote, session: ApiSession) -> None:
    policies.list_policies(session, strategy="janela_manutencao")

    assert remote.calls == ["GET /politicas/strategy/janela_manutencao"]


def test_service_group_by_name_is_escaped(remote, session: ApiSession) -> None:
    group_id = remote.seed_group("edge proxies")

    group = service_groups.get_service_group_by_name(session, "edge proxies")

    assert group["service_group_id"] == group_id
    assert remote.calls == ["GET /service-groups/name/edge%20proxies"]


def test_create_service_group_sends_empty_description(remote, session: ApiSession) -> None:
    service_groups.create_service_group(session, name="g", description=None, enabled=False)

    assert remote.payloads["POST /service-groups"] == [
        {"name": "g", "description": "", "enabled": False}
    ]


def test_service_exists(remote, session: ApiSession) -> None:
    remote.seed_service("abc")

    assert services.service_exists(session, "abc") is True
    assert services.service_exists(session, "missing") is False


def test_service_exists_propagates_other_errors(remote, session: ApiSession) -> None:
    remote.fail_on("GET", "/services/abc", status=503)

    with pytest.raises(TransportError) as exc_info:
        services.service_exists(session, "abc")

    assert exc_info.value.status == 503


def test_list_services_filters(remote, session: ApiSession) -> None:
    services.list_services(session, active_only=True)
    services.list_services(session, group_id="grp-1")

    assert remote.calls == ["GET /services/active", "GET /services/group/grp-1"]


def test_rotate_certificate(remote, session: ApiSession) -> None:
    body = services.rotate_certificate(session, "abc")

    assert body == {"service_hash": "abc", "rotated": True}
    assert remote.calls == ["POST /services/abc/certificates/rotate"]


def test_create_key_omits_missing_expiration(remote, session: ApiSession) -> None:
    keys.create_key(session, "abc", name="k1", enabled=True)
    keys.create_key(session, "abc", name="k2", enabled=False, expiration_days=30)

    assert remote.payloads["POST /services/abc/keys"] == [
        {"key_name": "k1", "enabled": True},
        {"key_name": "k2", "enabled": False, "expiration_days": 30},
    ]
    assert [k["key_name"] for k in keys.list_keys(session, "abc")] == ["k1", "k2"]


def test_relation_endpoints(remote, session: ApiSession) -> None:
    relations.create_relation(session, "abc", target_hash="def")
    assert remote.payloads["POST /services/abc/matriz"] == [{"related_service_hash": "def"}]

    relations.delete_relation_by_target(session, "abc", "def")
    assert remote.relations == {}

    remote.calls.clear()
    with pytest.raises(TransportError):
        relations.delete_relation(session, "abc", "rel-9")
    assert remote.calls == ["DELETE /services/abc/matriz/relations/rel-9"]
