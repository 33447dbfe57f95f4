"""Declarative configuration document models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

# Display labels accepted in documents, mapped to the API's strategy identifiers.
STRATEGY_LABELS: dict[str, str] = {
    "Eventos": "eventos",
    "Gradual": "gradual",
    "Janela de Manutenção": "janela_manutencao",
}
STRATEGIES = frozenset(STRATEGY_LABELS.values())


def _ensure_list(v: Any) -> list:
    """Convert None to empty list, pass through lists."""
    if v is None:
        return []
    return v


class EventSpec(BaseModel):
    name: str
    severity: str = Field(default="medium")
    enabled: bool = Field(default=True)


class PolicySpec(BaseModel):
    name: str
    strategy: str
    enabled: bool = Field(default=True)
    cron_config: dict[str, str] | None = None
    event_config: dict[str, Any] | None = None

    @field_validator("strategy", mode="before")
    @classmethod
    def _validate_strategy(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        value = STRATEGY_LABELS.get(v.strip(), v.strip())
        if value not in STRATEGIES:
            allowed = ", ".join(sorted(STRATEGIES))
            raise ValueError(f"unknown strategy {v!r} (expected one of: {allowed})")
        return value

    @field_validator("cron_config", mode="before")
    @classmethod
    def _stringify_cron(cls, v: Any) -> Any:
        # "minute: 0" parses as an int in YAML; cron fields are strings.
        if isinstance(v, dict):
            return {str(k): str(val) for k, val in v.items()}
        return v


class ServiceGroupSpec(BaseModel):
    name: str
    description: str | None = None
    enabled: bool = Field(default=True)


class KeySpec(BaseModel):
    name: str
    enabled: bool = Field(default=True)
    expiration_days: int | None = Field(default=None, gt=0)


class RelationSpec(BaseModel):
    target_hash: str
    type: str | None = None


class ServiceSpec(BaseModel):
    hash: str | None = None
    name: str
    active: bool = Field(default=True)
    webhook_url: str | None = None
    group_name: str | None = None
    policy_name: str | None = None
    keys: list[KeySpec] = Field(default_factory=list)
    relations: list[RelationSpec] = Field(default_factory=list)

    @field_validator("keys", "relations", mode="before")
    @classmethod
    def _validate_lists(cls, v: Any) -> list:
        return _ensure_list(v)

    @property
    def label(self) -> str:
        return f"{self.name} ({self.hash})" if self.hash else self.name


class ConfigurationDocument(BaseModel):
    events: list[EventSpec] = Field(
        default_factory=list, validation_alias=AliasChoices("events", "eventos")
    )
    policies: list[PolicySpec] = Field(
        default_factory=list, validation_alias=AliasChoices("policies", "politicas")
    )
    service_groups: list[ServiceGroupSpec] = Field(default_factory=list)
    services: list[ServiceSpec] = Field(default_factory=list)

    @field_validator("events", "policies", "service_groups", "services", mode="before")
    @classmethod
    def _validate_lists(cls, v: Any) -> list:
        return _ensure_list(v)

    @property
    def resource_count(self) -> int:
        """Top-level resources; keys and relations are not counted."""
        return (
            len(self.events)
            + len(self.policies)
            + len(self.service_groups)
            + len(self.services)
        )

    @classmethod
    def from_yaml(cls, data: dict[str, object]) -> "ConfigurationDocument":
        return cls.model_validate(data)
