"""Shared helpers for the resource gateways."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from certfix_cli.transport.client import Body


def segment(value: str) -> str:
    """Percent-encode a value for use as a single URL path segment."""
    return quote(str(value), safe="")


def as_list(body: Body) -> list[dict[str, Any]]:
    """Normalise a list response; non-object items are dropped."""
    if isinstance(body, list):
        items = body
    elif isinstance(body, dict):
        # Some listings come back wrapped, e.g. {"items": [...]}.
        items = next((v for v in body.values() if isinstance(v, list)), [])
    else:
        items = []
    return [item for item in items if isinstance(item, dict)]


def as_dict(body: Body) -> dict[str, Any]:
    return body if isinstance(body, dict) else {}


def pick_id(body: Body, *keys: str) -> str | None:
    """Return the first non-empty identifier found under ``keys``."""
    data = as_dict(body)
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return str(value)
    return None
