"""Bearer token storage and CLI login."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

import jwt

from certfix_cli.transport.client import ApiClient, TransportError
from certfix_cli.utils.masking import mask_token

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIFETIME = timedelta(hours=24)


class AuthError(Exception):
    """Raised when no usable token is available or login fails."""


@dataclass(frozen=True)
class StoredToken:
    token: str
    expires_at: datetime

    def __repr__(self) -> str:
        return f"StoredToken(token={mask_token(self.token)}, expires_at={self.expires_at.isoformat()})"

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at


def token_expiry(token: str, now: datetime | None = None) -> datetime:
    """Read ``exp`` from the token without verifying it.

    Falls back to ``now + 24h`` when the token is not a JWT or carries no
    ``exp`` claim.
    """
    now = now or datetime.now(timezone.utc)
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as exc:
        logger.warning("Failed to parse token claims, using default expiration: %s", exc)
        return now + DEFAULT_TOKEN_LIFETIME
    exp = claims.get("exp")
    if isinstance(exp, (int, float)):
        return datetime.fromtimestamp(exp, tz=timezone.utc)
    return now + DEFAULT_TOKEN_LIFETIME


class CredentialStore:
    """Token file with expiry, stored next to the CLI configuration."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def store_token(self, token: str, now: datetime | None = None) -> StoredToken:
        stored = StoredToken(token=token, expires_at=token_expiry(token, now))
        self._path.parent.mkdir(parents=True, exist_ok=True)
        os.chmod(self._path.parent, 0o700)
        data = {"token": stored.token, "expires_at": stored.expires_at.isoformat()}
        self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.chmod(self._path, 0o600)
        logger.debug("Token stored at: %s", self._path)
        return stored

    def load(self) -> StoredToken:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise AuthError("not authenticated: please run 'certfix login'") from exc
        except OSError as exc:
            raise AuthError(f"failed to read token file: {exc}") from exc
        try:
            data = json.loads(raw)
            expires_at = datetime.fromisoformat(data["expires_at"])
            token = str(data["token"])
        except (ValueError, KeyError, TypeError) as exc:
            raise AuthError(f"failed to parse token file: {exc}") from exc
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return StoredToken(token=token, expires_at=expires_at)

    def get_token(self, now: datetime | None = None) -> str:
        stored = self.load()
        if stored.is_expired(now):
            raise AuthError("token expired: please run 'certfix login'")
        return stored.token

    def is_authenticated(self) -> bool:
        try:
            self.get_token()
        except AuthError:
            return False
        return True

    def clear(self) -> bool:
        """Remove the token file. Returns ``False`` when already logged out."""
        try:
            self._path.unlink()
        except FileNotFoundError:
            return False
        return True


def login(client: ApiClient, email: str, personal_access_token: str) -> str:
    """Exchange a personal access token for a session token."""
    logger.debug("Authenticating with personal token at endpoint: %s", client.base_url)
    try:
        response = client.post(
            "/auth/cli",
            {"email": email, "personal_access_token": personal_access_token},
        )
    except TransportError as exc:
        raise AuthError(f"authentication request failed: {exc}") from exc

    token = response.get("token") if isinstance(response, dict) else None
    if not isinstance(token, str) or not token:
        raise AuthError("invalid response: token not found")
    return token
