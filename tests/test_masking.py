from __future__ import annotations

from certfix_cli.utils.masking import mask_token, redact_sensitive_fields


def test_redacts_sensitive_keys_recursively() -> None:
    payload = {
        "email": "ops@example.com",
        "personal_access_token": "pat-123",
        "nested": {"Authorization": "Bearer abc", "items": [{"api_key": "k", "name": "n"}]},
    }

    redacted = redact_sensitive_fields(payload)

    assert redacted == {
        "email": "ops@example.com",
        "personal_access_token": "***",
        "nested": {"Authorization": "***", "items": [{"api_key": "***", "name": "n"}]},
    }
    # The input is left untouched.
    assert payload["personal_access_token"] == "pat-123"


def test_redaction_depth_limit() -> None:
    deep: dict[str, object] = {"leaf": "value"}
    for _ in range(5):
        deep = {"level": deep}

    redacted = redact_sensitive_fields(deep, max_depth=3)

    assert redacted == {"level": {"level": {"level": "***"}}}


def test_mask_token() -> None:
    assert mask_token(None) == ""
    assert mask_token("short") == "***"
    assert mask_token("eyJhbGciOiJIUzI1NiJ9.payload") == "eyJhbG***"
