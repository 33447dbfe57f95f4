"""Best-effort reverse-order cleanup of a ledger."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from certfix_cli.apply.ledger import Ledger, LedgerEntry, ResourceKind
from certfix_cli.gateways import events, keys, policies, relations, service_groups, services
from certfix_cli.transport.client import ApiSession, Body


@dataclass
class RollbackFailure:
    entry: LedgerEntry
    error: str


@dataclass
class RollbackReport:
    attempted: int = 0
    succeeded: int = 0
    failures: list[RollbackFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failures


def _delete_key(session: ApiSession, entry: LedgerEntry) -> Body:
    if not entry.secondary:
        raise ValueError("no key id was returned when the key was created")
    return keys.delete_key(session, entry.primary, entry.secondary)


def _delete_relation(session: ApiSession, entry: LedgerEntry) -> Body:
    return relations.delete_relation_by_target(session, entry.primary, entry.secondary or "")


_DELETERS: dict[ResourceKind, Callable[[ApiSession, LedgerEntry], Body]] = {
    ResourceKind.RELATION: _delete_relation,
    ResourceKind.KEY: _delete_key,
    ResourceKind.SERVICE: lambda s, e: services.delete_service(s, e.primary),
    ResourceKind.SERVICE_GROUP: lambda s, e: service_groups.delete_service_group(s, e.primary),
    ResourceKind.POLICY: lambda s, e: policies.delete_policy(s, e.primary),
    ResourceKind.EVENT: lambda s, e: events.delete_event(s, e.primary),
}


def rollback(session: ApiSession, ledger: Ledger, logger: logging.Logger) -> RollbackReport:
    """Delete every ledger entry, newest first. Never raises.

    A failed delete is logged and recorded; the sweep continues so that the
    remaining resources still get a cleanup attempt.
    """
    report = RollbackReport()
    if not len(ledger):
        return report

    logger.info("=== Rolling Back Resources ===")
    logger.info("Deleting %d resources in reverse order...", len(ledger))

    for entry in ledger.drain_reversed():
        report.attempted += 1
        logger.info("  Deleting %s", entry.describe())
        try:
            _DELETERS[entry.kind](session, entry)
        except Exception as exc:  # noqa: BLE001 - cleanup keeps going past any failure
            logger.warning("  Failed to delete %s: %s", entry.describe(), exc)
            report.failures.append(RollbackFailure(entry=entry, error=str(exc)))
            continue
        report.succeeded += 1
        logger.info("  Deleted")

    logger.info(
        "Rollback completed: %d of %d deleted", report.succeeded, report.attempted
    )
    return report
