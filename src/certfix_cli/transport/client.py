"""HTTP transport for the Certfix management API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Union

import httpx

from certfix_cli import __version__
from certfix_cli.config import Settings
from certfix_cli.utils.masking import redact_sensitive_fields

logger = logging.getLogger(__name__)

Body = Union[dict[str, Any], list[Any], None]

_MAX_ERROR_BODY_CHARS = 2_000


class TransportError(Exception):
    """Raised when a call fails on the network or returns a non-2xx status.

    ``status`` is ``None`` for failures that never produced a response.
    """

    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    @property
    def not_found(self) -> bool:
        return self.status == 404


class ResponseDecodeError(TransportError):
    """A 2xx response whose body is not JSON. The request itself succeeded."""


def _truncate_text(value: str, max_chars: int) -> str:
    if len(value) <= max_chars:
        return value
    return value[: max_chars - 3] + "..."


def _decode_body(response: httpx.Response) -> Body:
    if not response.content.strip():
        return None
    try:
        decoded = response.json()
    except json.JSONDecodeError as exc:
        raise ResponseDecodeError(
            f"failed to parse response from {response.request.method} "
            f"{response.request.url.path}: {exc}",
            status=response.status_code,
            body=_truncate_text(response.text, _MAX_ERROR_BODY_CHARS),
        ) from exc
    if not isinstance(decoded, (dict, list)):
        return {"value": decoded}
    return decoded


class ApiClient:
    """Thin JSON client bound to one base endpoint.

    Connection-level failures are retried by the underlying ``httpx``
    transport; a request that reached the server is never replayed.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 30.0,
        retry_attempts: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = httpx.Client(
            base_url=self.base_url,
            timeout=timeout_seconds,
            transport=transport or httpx.HTTPTransport(retries=retry_attempts),
            headers={
                "Content-Type": "application/json",
                "User-Agent": f"certfix-cli/{__version__}",
            },
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.BaseTransport | None = None
    ) -> "ApiClient":
        return cls(
            settings.api.endpoint,
            timeout_seconds=settings.api.timeout_seconds,
            retry_attempts=settings.api.retry_attempts,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        payload: Any = None,
        *,
        token: str | None = None,
    ) -> Body:
        headers: dict[str, str] = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug("%s %s%s", method, self.base_url, path)
        if payload is not None:
            logger.debug("payload: %s", redact_sensitive_fields(payload))

        try:
            response = self._http.request(
                method,
                path,
                headers=headers,
                content=json.dumps(payload) if payload is not None else None,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        if response.status_code < 200 or response.status_code >= 300:
            body = _truncate_text(response.text, _MAX_ERROR_BODY_CHARS)
            logger.debug("Response status: %d, body: %s", response.status_code, body)
            raise TransportError(
                f"{method} {path} failed with status {response.status_code}: {body}",
                status=response.status_code,
                body=body,
            )
        return _decode_body(response)

    def get(self, path: str, *, token: str | None = None) -> Body:
        return self.request("GET", path, token=token)

    def post(self, path: str, payload: Any = None, *, token: str | None = None) -> Body:
        return self.request("POST", path, payload, token=token)

    def put(self, path: str, payload: Any = None, *, token: str | None = None) -> Body:
        return self.request("PUT", path, payload, token=token)

    def delete(self, path: str, *, token: str | None = None) -> Body:
        return self.request("DELETE", path, token=token)


@dataclass(frozen=True)
class ApiSession:
    """An ``ApiClient`` paired with the bearer token used for every call."""

    client: ApiClient
    token: str

    def __repr__(self) -> str:
        return f"ApiSession(base_url={self.client.base_url!r}, token=***)"

    def get(self, path: str) -> Body:
        return self.client.get(path, token=self.token)

    def post(self, path: str, payload: Any = None) -> Body:
        return self.client.post(path, payload, token=self.token)

    def put(self, path: str, payload: Any = None) -> Body:
        return self.client.put(path, payload, token=self.token)

    def delete(self, path: str) -> Body:
        return self.client.delete(path, token=self.token)
