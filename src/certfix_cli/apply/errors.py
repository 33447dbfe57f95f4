"""Errors raised by the apply workflow."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from certfix_cli.apply.rollback import RollbackReport
    from certfix_cli.transport.client import TransportError as _TransportFailure


class DocumentParseError(Exception):
    """The apply document could not be read or is malformed."""


class ApplyError(Exception):
    """Terminal failure of an apply attempt.

    ``rollback`` is set once the reverse sweep has run; it stays ``None`` for
    failures raised before anything was created.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.rollback: RollbackReport | None = None


class Unauthenticated(ApplyError):
    pass


class TransportError(ApplyError):
    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    @classmethod
    def wrap(cls, context: str, exc: "_TransportFailure") -> "TransportError":
        return cls(f"{context}: {exc}", status=exc.status, body=exc.body)


class ReferenceNotFound(ApplyError):
    def __init__(self, kind: str, name: str, *, referenced_by: str | None = None) -> None:
        message = f"{kind.replace('_', ' ')} '{name}' not found"
        if referenced_by:
            message = f"{message} (referenced by service '{referenced_by}')"
        super().__init__(message)
        self.kind = kind
        self.name = name


class Conflict(ApplyError):
    def __init__(self, service_hash: str) -> None:
        super().__init__(
            f"service '{service_hash}' already exists (use --skip-existing to skip it)"
        )
        self.hash = service_hash
