"""HTTP transport for the Certfix API."""

from certfix_cli.transport.client import (
    ApiClient,
    ApiSession,
    Body,
    ResponseDecodeError,
    TransportError,
)

__all__ = [
    "ApiClient",
    "ApiSession",
    "Body",
    "ResponseDecodeError",
    "TransportError",
]
