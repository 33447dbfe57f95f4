"""Ordered record of resources created during one apply."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator


class ResourceKind(str, Enum):
    EVENT = "event"
    POLICY = "policy"
    SERVICE_GROUP = "service_group"
    SERVICE = "service"
    KEY = "key"
    RELATION = "relation"


@dataclass(frozen=True)
class LedgerEntry:
    """One created resource.

    ``primary`` addresses the resource for deletion. ``secondary`` is only set
    for child resources: the key id under a service, or the target hash of a
    relation whose source is ``primary``.
    """

    kind: ResourceKind
    primary: str
    secondary: str | None = None
    label: str = ""

    def describe(self) -> str:
        name = self.kind.value.replace("_", " ")
        if self.kind is ResourceKind.KEY:
            return f"{name} {self.secondary} (service: {self.primary})"
        if self.kind is ResourceKind.RELATION:
            return f"{name} {self.primary} -> {self.secondary}"
        if self.label and self.label != self.primary:
            return f"{name} {self.label} ({self.primary})"
        return f"{name} {self.primary}"


class Ledger:
    """Append-only during the forward pass; drained newest-first by rollback."""

    def __init__(self) -> None:
        self._entries: list[LedgerEntry] = []

    def record(
        self,
        kind: ResourceKind,
        primary: str,
        secondary: str | None = None,
        *,
        label: str = "",
    ) -> LedgerEntry:
        entry = LedgerEntry(kind=kind, primary=primary, secondary=secondary, label=label)
        self._entries.append(entry)
        return entry

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LedgerEntry]:
        return iter(list(self._entries))

    @property
    def entries(self) -> tuple[LedgerEntry, ...]:
        return tuple(self._entries)

    def drain_reversed(self) -> Iterator[LedgerEntry]:
        """Pop entries from the most recent to the oldest."""
        while self._entries:
            yield self._entries.pop()
