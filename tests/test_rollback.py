from __future__ import annotations

import logging

import pytest

from certfix_cli.apply.ledger import Ledger, ResourceKind
from certfix_cli.apply.rollback import rollback
from certfix_cli.transport.client import ApiSession


def _ledger(*entries: tuple) -> Ledger:
    ledger = Ledger()
    for kind, primary, *rest in entries:
        ledger.record(kind, primary, *rest)
    return ledger


def test_empty_ledger_makes_no_calls(remote, session: ApiSession, apply_logger) -> None:
    report = rollback(session, Ledger(), apply_logger)

    assert report.attempted == 0
    assert report.complete
    assert remote.calls == []


def test_each_kind_uses_its_delete_endpoint(remote, session: ApiSession, apply_logger) -> None:
    ledger = _ledger(
        (ResourceKind.EVENT, "evt-1"),
        (ResourceKind.POLICY, "pol-1"),
        (ResourceKind.SERVICE_GROUP, "grp-1"),
        (ResourceKind.SERVICE, "abc"),
        (ResourceKind.KEY, "abc", "key-1"),
        (ResourceKind.RELATION, "abc", "def"),
    )

    report = rollback(session, ledger, apply_logger)

    assert remote.calls == [
        "DELETE /services/abc/matriz/def",
        "DELETE /services/abc/keys/key-1",
        "DELETE /services/abc",
        "DELETE /service-groups/grp-1",
        "DELETE /politicas/pol-1",
        "DELETE /events/evt-1",
    ]
    assert report.attempted == 6
    # Nothing was seeded, so every delete hits a 404 and is recorded as failed.
    assert report.succeeded == 0
    assert len(report.failures) == 6
    assert len(ledger) == 0


def test_failures_do_not_stop_the_sweep(
    remote, session: ApiSession, apply_logger: logging.Logger, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger=apply_logger.name)
    first = remote.seed_group("first")
    second = remote.seed_group("second")
    remote.fail_on("DELETE", f"/service-groups/{second}", status=500, body="db locked")
    ledger = _ledger((ResourceKind.SERVICE_GROUP, first), (ResourceKind.SERVICE_GROUP, second))

    report = rollback(session, ledger, apply_logger)

    assert report.attempted == 2
    assert report.succeeded == 1
    assert not report.complete
    assert report.failures[0].entry.primary == second
    assert "db locked" in report.failures[0].error
    assert remote.groups.keys() == {second}
    assert "Failed to delete service group" in caplog.text
    assert "Rollback completed: 1 of 2 deleted" in caplog.text


def test_key_without_id_is_reported_not_raised(
    remote, session: ApiSession, apply_logger: logging.Logger
) -> None:
    remote.seed_service("abc")
    ledger = _ledger((ResourceKind.SERVICE, "abc"), (ResourceKind.KEY, "abc", None))

    report = rollback(session, ledger, apply_logger)

    assert [f.entry.kind for f in report.failures] == [ResourceKind.KEY]
    assert "no key id" in report.failures[0].error
    assert remote.calls == ["DELETE /services/abc"]
    assert remote.services == {}
