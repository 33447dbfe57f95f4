from __future__ import annotations

import itertools
import json
import logging
import re
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest

from certfix_cli import config
from certfix_cli.transport.client import ApiClient, ApiSession

BASE_URL = "https://api.test.certfix"

Route = tuple[str, "re.Pattern[str]", Callable[..., httpx.Response]]


def _json(status: int, data: Any = None) -> httpx.Response:
    if data is None:
        return httpx.Response(status)
    return httpx.Response(status, json=data)


class FakeCertfixAPI:
    """In-memory stand-in for the remote management API.

    Every request is appended to ``calls`` as ``"METHOD /path"``. Individual
    calls can be made to fail with ``fail_on``.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.payloads: dict[str, list[dict[str, Any]]] = {}
        self.events: dict[str, dict[str, Any]] = {}
        self.policies: dict[str, dict[str, Any]] = {}
        self.groups: dict[str, dict[str, Any]] = {}
        self.services: dict[str, dict[str, Any]] = {}
        self.keys: dict[tuple[str, str], dict[str, Any]] = {}
        self.relations: dict[tuple[str, str], dict[str, Any]] = {}
        self.auth_headers: list[str | None] = []
        self._failures: dict[str, tuple[int, str]] = {}
        self._text_replies: dict[str, tuple[int, str]] = {}
        self._ids = itertools.count(1)
        self._routes: list[Route] = [
            ("POST", re.compile(r"/auth/cli"), self._login),
            ("POST", re.compile(r"/events"), self._create_event),
            ("GET", re.compile(r"/events"), lambda: _json(200, list(self.events.values()))),
            ("GET", re.compile(r"/events/enabled"), self._filtered("events", "enabled", True)),
            (
                "GET",
                re.compile(r"/events/severity/(?P<value>[^/]+)"),
                self._filtered("events", "severity"),
            ),
            ("GET", re.compile(r"/politicas/enabled"), self._filtered("policies", "enabled", True)),
            (
                "GET",
                re.compile(r"/politicas/strategy/(?P<value>[^/]+)"),
                self._filtered("policies", "strategy"),
            ),
            ("GET", re.compile(r"/service-groups"), lambda: _json(200, list(self.groups.values()))),
            (
                "GET",
                re.compile(r"/service-groups/enabled"),
                self._filtered("groups", "enabled", True),
            ),
            ("GET", re.compile(r"/services"), lambda: _json(200, list(self.services.values()))),
            ("GET", re.compile(r"/services/active"), self._filtered("services", "active", True)),
            (
                "GET",
                re.compile(r"/services/group/(?P<value>[^/]+)"),
                self._filtered("services", "service_group_id"),
            ),
            ("GET", re.compile(r"/services/(?P<hash>[^/]+)/matriz"), self._list_relations),
            ("DELETE", re.compile(r"/events/(?P<id>[^/]+)"), self._delete_from("events")),
            ("PUT", re.compile(r"/events/(?P<id>[^/]+)"), self._update_in("events")),
            ("POST", re.compile(r"/politicas"), self._create_policy),
            ("GET", re.compile(r"/politicas"), lambda: _json(200, list(self.policies.values()))),
            ("DELETE", re.compile(r"/politicas/(?P<id>[^/]+)"), self._delete_from("policies")),
            ("PUT", re.compile(r"/politicas/(?P<id>[^/]+)"), self._update_in("policies")),
            ("POST", re.compile(r"/service-groups"), self._create_group),
            ("GET", re.compile(r"/service-groups/name/(?P<name>[^/]+)"), self._group_by_name),
            ("DELETE", re.compile(r"/service-groups/(?P<id>[^/]+)"), self._delete_from("groups")),
            ("POST", re.compile(r"/services"), self._create_service),
            ("GET", re.compile(r"/services/(?P<id>[^/]+)"), self._get_service),
            ("DELETE", re.compile(r"/services/(?P<id>[^/]+)"), self._delete_from("services")),
            ("POST", re.compile(r"/services/(?P<hash>[^/]+)/keys"), self._create_key),
            ("GET", re.compile(r"/services/(?P<hash>[^/]+)/keys"), self._list_keys),
            ("DELETE", re.compile(r"/services/(?P<hash>[^/]+)/keys/(?P<key>[^/]+)"), self._delete_key),
            (
                "PUT",
                re.compile(r"/services/(?P<hash>[^/]+)/keys/(?P<key>[^/]+)/toggle"),
                self._toggle_key,
            ),
            ("POST", re.compile(r"/services/(?P<hash>[^/]+)/matriz"), self._create_relation),
            (
                "DELETE",
                re.compile(r"/services/(?P<hash>[^/]+)/matriz/(?P<target>[^/]+)"),
                self._delete_relation,
            ),
            (
                "POST",
                re.compile(r"/services/(?P<hash>[^/]+)/certificates/rotate"),
                lambda hash, payload: _json(200, {"service_hash": hash, "rotated": True}),
            ),
        ]

    # -- test helpers -------------------------------------------------------

    def fail_on(self, method: str, path: str, status: int = 500, body: str = "boom") -> None:
        self._failures[f"{method} {path}"] = (status, body)

    def reply_text_on(
        self, method: str, path: str, status: int = 201, text: str = "Created"
    ) -> None:
        """Handle the call normally but answer with a plain-text body."""
        self._text_replies[f"{method} {path}"] = (status, text)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls_matching(self, method: str) -> list[str]:
        return [call for call in self.calls if call.startswith(f"{method} ")]

    def seed_service(self, service_hash: str, name: str = "existing") -> None:
        self.services[service_hash] = {"service_hash": service_hash, "service_name": name}

    def seed_policy(self, name: str) -> str:
        policy_id = f"pol-{next(self._ids)}"
        self.policies[policy_id] = {"politica_id": policy_id, "name": name}
        return policy_id

    def seed_group(self, name: str) -> str:
        group_id = f"grp-{next(self._ids)}"
        self.groups[group_id] = {"service_group_id": group_id, "name": name}
        return group_id

    @property
    def is_empty(self) -> bool:
        return not any(
            (self.events, self.policies, self.groups, self.services, self.keys, self.relations)
        )

    # -- transport ----------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.raw_path.decode("ascii").split("?", 1)[0]
        call = f"{request.method} {path}"
        self.calls.append(call)
        self.auth_headers.append(request.headers.get("Authorization"))

        payload: dict[str, Any] = {}
        if request.content:
            payload = json.loads(request.content)
            self.payloads.setdefault(call, []).append(payload)

        failure = self._failures.get(call)
        if failure is not None:
            status, body = failure
            return httpx.Response(status, text=body)

        decoded = httpx.URL(path).path
        for method, pattern, handler in self._routes:
            match = pattern.fullmatch(decoded)
            if method == request.method and match:
                kwargs = match.groupdict()
                if payload or request.method in {"POST", "PUT"}:
                    kwargs["payload"] = payload
                response = handler(**kwargs)
                if call in self._text_replies:
                    status, text = self._text_replies[call]
                    return httpx.Response(status, text=text)
                return response
        return _json(404, {"detail": f"no route for {call}"})

    # -- handlers -----------------------------------------------------------

    def _login(self, payload: dict[str, Any]) -> httpx.Response:
        if payload.get("personal_access_token") != "pat-valid":
            return _json(401, {"detail": "invalid credentials"})
        return _json(200, {"token": "session-token"})

    def _create_event(self, payload: dict[str, Any]) -> httpx.Response:
        event_id = f"evt-{next(self._ids)}"
        self.events[event_id] = {"evento_id": event_id, **payload}
        return _json(201, self.events[event_id])

    def _create_policy(self, payload: dict[str, Any]) -> httpx.Response:
        policy_id = f"pol-{next(self._ids)}"
        self.policies[policy_id] = {"politica_id": policy_id, **payload}
        return _json(201, self.policies[policy_id])

    def _create_group(self, payload: dict[str, Any]) -> httpx.Response:
        group_id = f"grp-{next(self._ids)}"
        self.groups[group_id] = {"service_group_id": group_id, **payload}
        return _json(201, self.groups[group_id])

    def _group_by_name(self, name: str) -> httpx.Response:
        for group in self.groups.values():
            if group["name"] == name:
                return _json(200, group)
        return _json(404, {"detail": "service group not found"})

    def _create_service(self, payload: dict[str, Any]) -> httpx.Response:
        service_hash = payload.get("service_hash") or f"svc-{next(self._ids)}"
        self.services[service_hash] = {**payload, "service_hash": service_hash}
        return _json(201, self.services[service_hash])

    def _get_service(self, id: str) -> httpx.Response:
        if id not in self.services:
            return _json(404, {"detail": "service not found"})
        return _json(200, self.services[id])

    def _create_key(self, hash: str, payload: dict[str, Any]) -> httpx.Response:
        key_id = f"key-{next(self._ids)}"
        self.keys[(hash, key_id)] = {"key_id": key_id, **payload}
        return _json(201, self.keys[(hash, key_id)])

    def _list_keys(self, hash: str) -> httpx.Response:
        service = self.services.get(hash, {"service_hash": hash})
        owned = [k for (owner, _), k in self.keys.items() if owner == hash]
        return _json(200, {"service": service, "keys": owned})

    def _toggle_key(self, hash: str, key: str, payload: dict[str, Any]) -> httpx.Response:
        if (hash, key) not in self.keys:
            return _json(404, {"detail": "key not found"})
        entry = self.keys[(hash, key)]
        entry["enabled"] = not entry.get("enabled", True)
        return _json(200, entry)

    def _delete_key(self, hash: str, key: str) -> httpx.Response:
        if self.keys.pop((hash, key), None) is None:
            return _json(404, {"detail": "key not found"})
        return _json(204)

    def _create_relation(self, hash: str, payload: dict[str, Any]) -> httpx.Response:
        target = payload["related_service_hash"]
        self.relations[(hash, target)] = payload
        return _json(201, {"relation_id": f"rel-{next(self._ids)}", **payload})

    def _list_relations(self, hash: str) -> httpx.Response:
        return _json(200, [r for (owner, _), r in self.relations.items() if owner == hash])

    def _filtered(self, attr: str, field: str, fixed: Any = None) -> Callable[..., httpx.Response]:
        def handler(value: Any = fixed) -> httpx.Response:
            store = getattr(self, attr)
            return _json(200, [item for item in store.values() if item.get(field) == value])

        return handler

    def _delete_relation(self, hash: str, target: str) -> httpx.Response:
        if self.relations.pop((hash, target), None) is None:
            return _json(404, {"detail": "relation not found"})
        return _json(204)

    def _delete_from(self, attr: str) -> Callable[..., httpx.Response]:
        def handler(id: str) -> httpx.Response:
            if getattr(self, attr).pop(id, None) is None:
                return _json(404, {"detail": "not found"})
            return _json(204)

        return handler

    def _update_in(self, attr: str) -> Callable[..., httpx.Response]:
        def handler(id: str, payload: dict[str, Any]) -> httpx.Response:
            store = getattr(self, attr)
            if id not in store:
                return _json(404, {"detail": "not found"})
            store[id].update(payload)
            return _json(200, store[id])

        return handler


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    home = tmp_path / "certfix-home"
    monkeypatch.setenv("CERTFIX_HOME", str(home))
    for key in ("CERTFIX_ENDPOINT", "CERTFIX_TIMEOUT", "CERTFIX_RETRY_ATTEMPTS", "LOG_FILE"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config, "load_dotenv", lambda **_: None)
    config._load_settings_cached.cache_clear()
    yield home
    config._load_settings_cached.cache_clear()


@pytest.fixture
def remote() -> FakeCertfixAPI:
    return FakeCertfixAPI()


@pytest.fixture
def client(remote: FakeCertfixAPI) -> Iterator[ApiClient]:
    with ApiClient(BASE_URL, transport=remote.transport()) as api_client:
        yield api_client


@pytest.fixture
def session(client: ApiClient) -> ApiSession:
    return ApiSession(client=client, token="session-token")


@pytest.fixture
def apply_logger() -> logging.Logger:
    return logging.getLogger("certfix_cli.apply.test")
