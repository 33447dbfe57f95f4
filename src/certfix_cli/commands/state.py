"""Per-invocation CLI state shared by all commands."""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn

import httpx
import typer

from certfix_cli.auth.credentials import AuthError, CredentialStore
from certfix_cli.config import Settings, load_settings
from certfix_cli.transport.client import ApiClient, ApiSession, TransportError

EXIT_FAILURE = 1
EXIT_USAGE = 2


@dataclass
class CLIState:
    config_file: str | None = None
    verbose: bool = False
    # Injected by tests; ``None`` means a real network transport.
    transport: httpx.BaseTransport | None = None

    def settings(self) -> Settings:
        return load_settings(self.config_file)

    def config_path(self) -> Path:
        return Path(self.settings().paths.config_file)

    def credentials(self) -> CredentialStore:
        return CredentialStore(self.settings().paths.token_file)

    def client(self) -> ApiClient:
        return ApiClient.from_settings(self.settings(), transport=self.transport)


def get_state(ctx: typer.Context) -> CLIState:
    root = ctx.find_root()
    if root.obj is None:
        root.obj = CLIState()
    return root.obj


def fail(message: str, code: int = EXIT_FAILURE) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=code)


def emit_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


@contextmanager
def api_session(ctx: typer.Context) -> Iterator[ApiSession]:
    """Authenticated session for a single command; API failures exit with 1."""
    state = get_state(ctx)
    try:
        token = state.credentials().get_token()
    except AuthError as exc:
        fail(str(exc))

    client = state.client()
    try:
        yield ApiSession(client=client, token=token)
    except TransportError as exc:
        fail(str(exc))
    finally:
        client.close()
