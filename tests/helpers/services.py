"""In-memory fakes for the remote service ports plus entity builders."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from itertools import count

from gitzone.domain.errors import RemoteOperationError
from gitzone.domain.model import (
    Account,
    CommitEntry,
    CountKind,
    DnsRecord,
    PageProbeResult,
    RealAccount,
    RecordDraft,
    Repository,
    RepositoryDraft,
    User,
    Zone,
)
from gitzone.domain.ports import DnsService, RepoService

BASE_TIME = datetime(2024, 5, 1, 12, tzinfo=UTC)


def make_repo(
    name: str,
    *,
    owner: str = "octo",
    hours_ago: int = 0,
    private: bool = False,
    fork: bool = False,
    stars: int = 0,
    description: str | None = None,
) -> Repository:
    return Repository(
        owner=owner,
        name=name,
        updated_at=BASE_TIME - timedelta(hours=hours_ago),
        private=private,
        fork=fork,
        stars=stars,
        description=description,
        clone_url=f"https://github.com/{owner}/{name}.git",
        html_url=f"https://github.com/{owner}/{name}",
    )


def make_commit(sha: str, *, hours_ago: int = 0, message: str = "Update") -> CommitEntry:
    return CommitEntry(
        sha=sha,
        message=message,
        author="Octo Cat",
        committed_at=BASE_TIME - timedelta(hours=hours_ago),
    )


def make_account(name: str = "main", *, account_id: str | None = None) -> Account:
    return Account(id=account_id or f"acc-{name}", name=name, api_key=f"key-{name}")


def make_zone(
    zone_id: str,
    *,
    name: str | None = None,
    status: str = "active",
    owner: RealAccount | None = None,
) -> Zone:
    return Zone(id=zone_id, name=name or f"{zone_id}.example", status=status, owner=owner)


def make_record(
    record_id: str,
    zone_id: str,
    *,
    type_: str = "A",
    name: str = "www.example.com",
    content: str = "1.1.1.1",
    proxied: bool = True,
    ttl: int = 300,
) -> DnsRecord:
    return DnsRecord(
        id=record_id,
        zone_id=zone_id,
        type=type_,
        name=name,
        content=content,
        proxied=proxied,
        ttl=ttl,
    )


class FakeRepoService(RepoService):
    """Scripted source-hosting service; an ``Exception`` value is raised instead of returned."""

    def __init__(
        self,
        repos: list[Repository] | None = None,
        *,
        user: User | None = None,
    ) -> None:
        self.repos = list(repos or [])
        self.user = user or User(login="octo", name="Octo Cat", avatar_url=None)
        self.probes: dict[tuple[str, CountKind], PageProbeResult | Exception] = {}
        self.commits: dict[str, list[CommitEntry] | Exception] = {}
        self.failures: dict[str, Exception] = {}
        self.calls: list[tuple[str, ...]] = []

    def _maybe_fail(self, operation: str) -> None:
        error = self.failures.get(operation)
        if error is not None:
            raise error

    async def get_user(self) -> User:
        self.calls.append(("get_user",))
        self._maybe_fail("get_user")
        return self.user

    async def list_repos(self) -> list[Repository]:
        self.calls.append(("list_repos",))
        self._maybe_fail("list_repos")
        return list(self.repos)

    async def create_repo(self, draft: RepositoryDraft) -> Repository:
        self.calls.append(("create_repo", draft.name))
        self._maybe_fail("create_repo")
        repo = make_repo(draft.name, owner=self.user.login, private=draft.private)
        self.repos.insert(0, repo)
        return repo

    async def rename_repo(self, owner: str, name: str, new_name: str) -> Repository:
        self.calls.append(("rename_repo", f"{owner}/{name}", new_name))
        self._maybe_fail("rename_repo")
        for index, repo in enumerate(self.repos):
            if (repo.owner, repo.name) == (owner, name):
                renamed = replace(repo, name=new_name, updated_at=BASE_TIME + timedelta(hours=1))
                self.repos[index] = renamed
                return renamed
        raise RemoteOperationError("Not Found", status_code=404)

    async def delete_repo(self, owner: str, name: str) -> None:
        self.calls.append(("delete_repo", f"{owner}/{name}"))
        self._maybe_fail(f"delete_repo:{owner}/{name}")
        self._maybe_fail("delete_repo")
        self.repos = [repo for repo in self.repos if (repo.owner, repo.name) != (owner, name)]

    async def probe_count(self, owner: str, name: str, kind: CountKind) -> PageProbeResult:
        full_name = f"{owner}/{name}"
        self.calls.append(("probe_count", full_name, kind.value))
        outcome = self.probes.get((full_name, kind), PageProbeResult())
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def list_commits(
        self,
        owner: str,
        name: str,
        *,
        per_page: int = 10,
        page: int = 1,
    ) -> list[CommitEntry]:
        full_name = f"{owner}/{name}"
        self.calls.append(("list_commits", full_name))
        outcome = self.commits.get(full_name, [])
        if isinstance(outcome, Exception):
            raise outcome
        start = (page - 1) * per_page
        return outcome[start : start + per_page]


class FakeDnsService(DnsService):
    """Mutable fake DNS provider keyed by zone id."""

    def __init__(self) -> None:
        self.zones: dict[str, list[Zone] | Exception] = {}
        self.records: dict[str, list[DnsRecord]] = {}
        self.list_failures: dict[str, Exception] = {}
        self.update_failures: dict[str, Exception] = {}
        self.calls: list[tuple[str, ...]] = []
        self._ids = count(1)

    async def list_zones(self, account: Account) -> list[Zone]:
        self.calls.append(("list_zones", account.id))
        outcome = self.zones.get(account.id, [])
        if isinstance(outcome, Exception):
            raise outcome
        return [replace(zone, account_id=account.id) for zone in outcome]

    async def list_records(self, account: Account, zone_id: str) -> list[DnsRecord]:
        self.calls.append(("list_records", account.id, zone_id))
        error = self.list_failures.get(zone_id)
        if error is not None:
            raise error
        return list(self.records.get(zone_id, []))

    async def create_record(
        self, account: Account, zone_id: str, draft: RecordDraft
    ) -> DnsRecord:
        self.calls.append(("create_record", account.id, zone_id))
        record = DnsRecord(
            id=f"rec-new-{next(self._ids)}",
            zone_id=zone_id,
            type=draft.type,
            name=draft.name,
            content=draft.content,
            proxied=draft.proxied,
            ttl=draft.ttl,
        )
        self.records.setdefault(zone_id, []).append(record)
        return record

    async def update_record(
        self, account: Account, zone_id: str, record_id: str, draft: RecordDraft
    ) -> DnsRecord:
        self.calls.append(("update_record", account.id, zone_id, record_id))
        error = self.update_failures.get(record_id)
        if error is not None:
            raise error
        records = self.records.get(zone_id, [])
        for index, record in enumerate(records):
            if record.id == record_id:
                updated = replace(
                    record,
                    type=draft.type,
                    name=draft.name,
                    content=draft.content,
                    proxied=draft.proxied,
                    ttl=draft.ttl,
                )
                records[index] = updated
                return updated
        raise RemoteOperationError("Record not found", status_code=404)

    async def delete_record(self, account: Account, zone_id: str, record_id: str) -> None:
        self.calls.append(("delete_record", account.id, zone_id, record_id))
        records = self.records.get(zone_id, [])
        remaining = [record for record in records if record.id != record_id]
        if len(remaining) == len(records):
            raise RemoteOperationError("Record not found", status_code=404)
        self.records[zone_id] = remaining

    def updates(self) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0] == "update_record"]
