"""Declarative batch provisioning with rollback."""

from certfix_cli.apply.errors import (
    ApplyError,
    Conflict,
    DocumentParseError,
    ReferenceNotFound,
    TransportError,
    Unauthenticated,
)
from certfix_cli.apply.ledger import Ledger, LedgerEntry, ResourceKind
from certfix_cli.apply.loader import load_document
from certfix_cli.apply.models import ConfigurationDocument
from certfix_cli.apply.orchestrator import ApplyContext, ApplyOrchestrator, ApplySummary
from certfix_cli.apply.plan import ApplyPlan, build_plan
from certfix_cli.apply.rollback import RollbackReport, rollback

__all__ = [
    "ApplyContext",
    "ApplyError",
    "ApplyOrchestrator",
    "ApplyPlan",
    "ApplySummary",
    "ConfigurationDocument",
    "Conflict",
    "DocumentParseError",
    "Ledger",
    "LedgerEntry",
    "ReferenceNotFound",
    "ResourceKind",
    "RollbackReport",
    "TransportError",
    "Unauthenticated",
    "build_plan",
    "load_document",
    "rollback",
]
