"""Authentication and token storage."""

from certfix_cli.auth.credentials import (
    AuthError,
    CredentialStore,
    StoredToken,
    login,
    token_expiry,
)

__all__ = [
    "AuthError",
    "CredentialStore",
    "StoredToken",
    "login",
    "token_expiry",
]
