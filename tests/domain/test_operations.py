from __future__ import annotations

import asyncio

import pytest

from gitzone.domain.errors import InputValidationError, RemoteOperationError
from gitzone.domain.model import (
    EntityKind,
    RecordDraft,
    RepositoryDraft,
    RepositoryRef,
    StatsEntry,
)
from gitzone.domain.operations import RecordOperations, RepositoryOperations
from gitzone.domain.results import Confirmed, Failed
from gitzone.domain.store import ReconciliationStore
from tests.helpers.services import (
    FakeDnsService,
    FakeRepoService,
    make_account,
    make_record,
    make_repo,
    make_zone,
)


@pytest.fixture
def repo_setup() -> tuple[ReconciliationStore, FakeRepoService, RepositoryOperations]:
    repos = [make_repo("alpha"), make_repo("beta", hours_ago=1), make_repo("gamma", hours_ago=2)]
    store = ReconciliationStore()
    store.replace_all(EntityKind.REPOSITORY, repos)
    service = FakeRepoService(repos)
    return store, service, RepositoryOperations(store, service)


def test_create_refreshes_the_list(
    repo_setup: tuple[ReconciliationStore, FakeRepoService, RepositoryOperations],
) -> None:
    store, service, operations = repo_setup

    result = asyncio.run(operations.create(RepositoryDraft(name="  delta  ", description=" x ")))

    assert isinstance(result, Confirmed)
    assert result.value.name == "delta"
    assert store.repository(RepositoryRef("octo", "delta")) is not None
    assert ("list_repos",) in service.calls


def test_create_requires_a_name(
    repo_setup: tuple[ReconciliationStore, FakeRepoService, RepositoryOperations],
) -> None:
    _store, service, operations = repo_setup

    result = asyncio.run(operations.create(RepositoryDraft(name="   ")))

    assert isinstance(result, Failed)
    assert isinstance(result.error, InputValidationError)
    assert service.calls == []


def test_rename_applies_only_after_confirmation(
    repo_setup: tuple[ReconciliationStore, FakeRepoService, RepositoryOperations],
) -> None:
    store, _service, operations = repo_setup
    old = RepositoryRef("octo", "alpha")
    store.set_stats(old, StatsEntry(branches=3, commits=10))

    result = asyncio.run(operations.rename(old, " omega "))

    assert isinstance(result, Confirmed)
    new = RepositoryRef("octo", "omega")
    assert store.repository(old) is None
    assert store.repository(new) is not None
    assert store.stats_for(new) == StatsEntry(branches=3, commits=10)


def test_rejected_rename_leaves_the_store_untouched(
    repo_setup: tuple[ReconciliationStore, FakeRepoService, RepositoryOperations],
) -> None:
    store, service, operations = repo_setup
    service.failures["rename_repo"] = RemoteOperationError("name already exists on this account")
    before = store.repositories

    result = asyncio.run(operations.rename(RepositoryRef("octo", "alpha"), "beta"))

    assert isinstance(result, Failed)
    assert result.message == "name already exists on this account"
    assert store.repositories == before


@pytest.mark.parametrize("new_name", ["", "   ", "alpha"])
def test_rename_validates_new_name(
    repo_setup: tuple[ReconciliationStore, FakeRepoService, RepositoryOperations],
    new_name: str,
) -> None:
    _store, service, operations = repo_setup

    result = asyncio.run(operations.rename(RepositoryRef("octo", "alpha"), new_name))

    assert isinstance(result, Failed)
    assert service.calls == []


def test_delete_selected_keeps_failures_selected(
    repo_setup: tuple[ReconciliationStore, FakeRepoService, RepositoryOperations],
) -> None:
    store, service, operations = repo_setup
    alpha, beta = RepositoryRef("octo", "alpha"), RepositoryRef("octo", "beta")
    store.select(alpha)
    store.select(beta)
    service.failures["delete_repo:octo/beta"] = RemoteOperationError("Must have admin rights")

    report = asyncio.run(operations.delete_selected())

    assert report.deleted == [alpha]
    assert report.failed == {beta: "Must have admin rights"}
    assert store.repository(alpha) is None
    assert store.selection == [beta]


@pytest.fixture
def record_setup() -> tuple[ReconciliationStore, FakeDnsService, RecordOperations]:
    store = ReconciliationStore()
    account = make_account()
    store.add_account(account)
    store.replace_all(EntityKind.ZONE, [make_zone("z1")], scope=account.id)
    service = FakeDnsService()
    service.records["z1"] = [make_record("r1", "z1")]
    return store, service, RecordOperations(store, service)


def test_load_uses_cache_unless_forced(
    record_setup: tuple[ReconciliationStore, FakeDnsService, RecordOperations],
) -> None:
    store, service, operations = record_setup

    asyncio.run(operations.load("z1"))
    asyncio.run(operations.load("z1"))
    asyncio.run(operations.load("z1", force=True))

    assert store.record_filter.zone_id == "z1"
    assert [call[0] for call in service.calls] == ["list_records", "list_records"]


def test_record_mutations_reload_the_zone(
    record_setup: tuple[ReconciliationStore, FakeDnsService, RecordOperations],
) -> None:
    store, _service, operations = record_setup
    draft = RecordDraft(type="TXT", name="example.com", content="v=spf1 -all")

    created = asyncio.run(operations.create("z1", draft))
    assert isinstance(created, Confirmed)
    assert {record.id for record in store.records_for("z1") or []} == {"r1", created.value.id}

    updated = asyncio.run(
        operations.update("z1", "r1", RecordDraft(type="A", name="www", content="5.5.5.5"))
    )
    assert isinstance(updated, Confirmed)
    contents = {record.id: record.content for record in store.records_for("z1") or []}
    assert contents["r1"] == "5.5.5.5"

    deleted = asyncio.run(operations.delete("z1", "r1"))
    assert isinstance(deleted, Confirmed)
    assert [record.id for record in store.records_for("z1") or []] == [created.value.id]


def test_record_operations_validate_before_calling(
    record_setup: tuple[ReconciliationStore, FakeDnsService, RecordOperations],
) -> None:
    _store, service, operations = record_setup

    blank = asyncio.run(operations.create("z1", RecordDraft(type="A", name="www", content=" ")))
    unknown = asyncio.run(operations.delete("missing-zone", "r1"))

    assert isinstance(blank, Failed)
    assert isinstance(unknown, Failed)
    assert isinstance(unknown.error, InputValidationError)
    assert service.calls == []
