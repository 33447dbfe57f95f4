"""Loader for apply documents."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from certfix_cli.apply.errors import DocumentParseError
from certfix_cli.apply.models import ConfigurationDocument


def load_document(path: str | Path) -> ConfigurationDocument:
    document_path = Path(path)
    if not document_path.exists():
        raise DocumentParseError(f"Configuration file not found: {document_path}")
    try:
        with document_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except OSError as exc:
        raise DocumentParseError(f"failed to read config file: {exc}") from exc
    except yaml.YAMLError as exc:
        raise DocumentParseError(f"failed to parse YAML: {exc}") from exc

    if not isinstance(data, dict):
        raise DocumentParseError("failed to parse YAML: top level must be a mapping")
    try:
        return ConfigurationDocument.from_yaml(data)
    except ValidationError as exc:
        raise DocumentParseError(f"invalid configuration document: {exc}") from exc
