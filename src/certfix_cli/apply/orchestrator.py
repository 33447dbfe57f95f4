"""Apply a configuration document against the Certfix API.

Resources are created in six fixed phases (events, policies, service groups,
services, keys, relations). Every creation is recorded in a ``Ledger``; the
first failure stops the forward pass and the ledger is rolled back newest
first before the original error is re-raised.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from certfix_cli.apply.errors import ApplyError, Conflict, TransportError, Unauthenticated
from certfix_cli.apply.ledger import Ledger, LedgerEntry, ResourceKind
from certfix_cli.apply.models import (
    ConfigurationDocument,
    EventSpec,
    PolicySpec,
    ServiceGroupSpec,
    ServiceSpec,
)
from certfix_cli.apply.resolution import resolve_policy_id, resolve_service_group_id
from certfix_cli.apply.rollback import rollback
from certfix_cli.auth.credentials import AuthError
from certfix_cli.gateways import events, keys, policies, relations, service_groups, services
from certfix_cli.gateways._helpers import pick_id
from certfix_cli.transport.client import ApiClient, ApiSession, Body, ResponseDecodeError
from certfix_cli.transport.client import TransportError as TransportFailure

T = TypeVar("T")


@dataclass
class ApplyContext:
    """Collaborators for one apply invocation."""

    client: ApiClient
    token_provider: Callable[[], str]
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("certfix_cli.apply"))


@dataclass
class ApplySummary:
    created: tuple[LedgerEntry, ...]
    skipped: list[str] = field(default_factory=list)

    @property
    def created_count(self) -> int:
        return len(self.created)


class ApplyOrchestrator:
    def __init__(self, context: ApplyContext) -> None:
        self._client = context.client
        self._token_provider = context.token_provider
        self._log = context.logger

    def apply(
        self, document: ConfigurationDocument, *, skip_existing: bool = False
    ) -> ApplySummary:
        session = self._authenticate()
        ledger = Ledger()
        skipped: list[str] = []

        try:
            self._create_events(session, document.events, ledger)
            self._create_policies(session, document.policies, ledger)
            self._create_service_groups(session, document.service_groups, ledger)
            hashes = self._create_services(
                session, document.services, ledger, skipped, skip_existing
            )
            self._create_keys(session, document.services, hashes, ledger)
            self._create_relations(session, document.services, hashes, ledger)
        except ApplyError as exc:
            self._log.error("Error during apply: %s", exc)
            self._log.info("Rolling back created resources...")
            exc.rollback = rollback(session, ledger, self._log)
            raise
        except BaseException as exc:
            self._log.error("Unexpected failure during apply: %r", exc)
            rollback(session, ledger, self._log)
            raise

        self._log.info("Configuration applied successfully")
        self._log.info("Total resources created: %d", len(ledger))
        return ApplySummary(created=ledger.entries, skipped=skipped)

    def _authenticate(self) -> ApiSession:
        try:
            token = self._token_provider()
        except AuthError as exc:
            raise Unauthenticated(f"authentication required: {exc}") from exc
        return ApiSession(client=self._client, token=token)

    @staticmethod
    def _call(context: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        try:
            return fn(*args, **kwargs)
        except TransportFailure as exc:
            raise TransportError.wrap(context, exc) from exc

    def _create(self, what: str, fn: Callable[..., Body], *args: Any, **kwargs: Any) -> Body:
        """Run one create call.

        A 2xx reply with an undecodable body still means the resource exists,
        so it returns ``None`` and the caller records the entry with the
        identifier it already knows.
        """
        try:
            return fn(*args, **kwargs)
        except ResponseDecodeError as exc:
            self._log.warning("  Created %s, but the response could not be decoded: %s", what, exc)
            return None
        except TransportFailure as exc:
            raise TransportError.wrap(f"failed to create {what}", exc) from exc

    def _phase(self, title: str) -> None:
        self._log.info("=== Creating %s ===", title)

    def _create_events(
        self, session: ApiSession, specs: list[EventSpec], ledger: Ledger
    ) -> None:
        self._phase("Events")
        for i, spec in enumerate(specs, 1):
            self._log.info("[%d/%d] Creating event: %s", i, len(specs), spec.name)
            body = self._create(
                f"event '{spec.name}'",
                events.create_event,
                session,
                name=spec.name,
                severity=spec.severity,
                enabled=spec.enabled,
            )
            event_id = pick_id(body, *events.EVENT_ID_KEYS) or spec.name
            ledger.record(ResourceKind.EVENT, event_id, label=spec.name)
            self._log.info("  Created event %s", spec.name)

    def _create_policies(
        self, session: ApiSession, specs: list[PolicySpec], ledger: Ledger
    ) -> None:
        self._phase("Policies")
        for i, spec in enumerate(specs, 1):
            self._log.info("[%d/%d] Creating policy: %s", i, len(specs), spec.name)
            body = self._create(
                f"policy '{spec.name}'",
                policies.create_policy,
                session,
                name=spec.name,
                strategy=spec.strategy,
                enabled=spec.enabled,
                cron_config=spec.cron_config,
                event_config=spec.event_config,
            )
            policy_id = pick_id(body, *policies.POLICY_ID_KEYS) or spec.name
            ledger.record(ResourceKind.POLICY, policy_id, label=spec.name)
            self._log.info("  Created policy %s", spec.name)

    def _create_service_groups(
        self, session: ApiSession, specs: list[ServiceGroupSpec], ledger: Ledger
    ) -> None:
        self._phase("Service Groups")
        for i, spec in enumerate(specs, 1):
            self._log.info("[%d/%d] Creating service group: %s", i, len(specs), spec.name)
            body = self._create(
                f"service group '{spec.name}'",
                service_groups.create_service_group,
                session,
                name=spec.name,
                description=spec.description,
                enabled=spec.enabled,
            )
            group_id = pick_id(body, *service_groups.SERVICE_GROUP_ID_KEYS) or spec.name
            ledger.record(ResourceKind.SERVICE_GROUP, group_id, label=spec.name)
            self._log.info("  Created service group %s", spec.name)

    def _create_services(
        self,
        session: ApiSession,
        specs: list[ServiceSpec],
        ledger: Ledger,
        skipped: list[str],
        skip_existing: bool,
    ) -> list[str]:
        """Create services and return the hash each one ends up with, in order."""
        self._phase("Services")
        hashes: list[str] = []
        for i, spec in enumerate(specs, 1):
            self._log.info("[%d/%d] Creating service: %s", i, len(specs), spec.label)

            if spec.hash and self._call(
                f"failed to check service '{spec.hash}'",
                services.service_exists,
                session,
                spec.hash,
            ):
                if not skip_existing:
                    raise Conflict(spec.hash)
                self._log.info("  Service %s already exists, skipping", spec.hash)
                skipped.append(spec.hash)
                hashes.append(spec.hash)
                continue

            body = self._create(
                f"service '{spec.label}'",
                services.create_service,
                session,
                self._service_payload(session, spec),
            )
            service_hash = pick_id(body, "service_hash", "hash") or spec.hash
            if not service_hash:
                raise TransportError(
                    f"service '{spec.name}' was created but the response carried no service_hash"
                )
            ledger.record(ResourceKind.SERVICE, service_hash, label=spec.name)
            hashes.append(service_hash)
            self._log.info("  Created service %s", service_hash)
        return hashes

    def _service_payload(self, session: ApiSession, spec: ServiceSpec) -> dict[str, Any]:
        payload: dict[str, Any] = {"service_name": spec.name, "active": spec.active}
        if spec.hash:
            payload["service_hash"] = spec.hash
        if spec.webhook_url:
            payload["webhook_url"] = spec.webhook_url
        if spec.group_name:
            payload["service_group_id"] = resolve_service_group_id(
                session, spec.group_name, referenced_by=spec.label
            )
        if spec.policy_name:
            payload["politica_id"] = resolve_policy_id(
                session, spec.policy_name, referenced_by=spec.label
            )
        return payload

    def _create_keys(
        self,
        session: ApiSession,
        specs: list[ServiceSpec],
        hashes: list[str],
        ledger: Ledger,
    ) -> None:
        self._phase("Service Keys")
        for spec, service_hash in zip(specs, hashes):
            if not spec.keys:
                continue
            self._log.info("Creating %d keys for service: %s", len(spec.keys), service_hash)
            for i, key in enumerate(spec.keys, 1):
                self._log.info("  [%d/%d] Creating key: %s", i, len(spec.keys), key.name)
                body = self._create(
                    f"key '{key.name}' for service '{service_hash}'",
                    keys.create_key,
                    session,
                    service_hash,
                    name=key.name,
                    enabled=key.enabled,
                    expiration_days=key.expiration_days,
                )
                key_id = pick_id(body, "key_id", "id")
                if key_id is None:
                    self._log.warning("  Key %s was created without a key_id", key.name)
                ledger.record(ResourceKind.KEY, service_hash, key_id, label=key.name)
                self._log.info("    Created key %s", key.name)

    def _create_relations(
        self,
        session: ApiSession,
        specs: list[ServiceSpec],
        hashes: list[str],
        ledger: Ledger,
    ) -> None:
        self._phase("Service Relations")
        for spec, service_hash in zip(specs, hashes):
            if not spec.relations:
                continue
            self._log.info(
                "Creating %d relations for service: %s", len(spec.relations), service_hash
            )
            for i, relation in enumerate(spec.relations, 1):
                self._log.info(
                    "  [%d/%d] Creating relation: %s -> %s",
                    i,
                    len(spec.relations),
                    service_hash,
                    relation.target_hash,
                )
                self._create(
                    f"relation from '{service_hash}' "
                    f"to '{relation.target_hash}'",
                    relations.create_relation,
                    session,
                    service_hash,
                    target_hash=relation.target_hash,
                    relation_type=relation.type,
                )
                ledger.record(ResourceKind.RELATION, service_hash, relation.target_hash)
                self._log.info("    Created relation")
