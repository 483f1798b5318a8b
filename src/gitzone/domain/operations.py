"""Single-entity mutations with confirm-then-apply semantics.

Every operation talks to the remote service first and only touches the store
once the service has confirmed the change. The outcome is returned as
``Confirmed`` or ``Failed``; nothing here raises for a remote failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import InputValidationError, RemoteServiceError, UnauthorizedError
from .model import EntityKind, RepositoryDraft
from .results import Confirmed, Failed

if TYPE_CHECKING:
    from .model import Account, DnsRecord, RecordDraft, Repository, RepositoryRef
    from .ports import DnsService, RepoService
    from .results import MutationResult
    from .store import ReconciliationStore

log = getLogger(__name__)


@dataclass(slots=True)
class BulkDeleteReport:
    deleted: list[RepositoryRef] = field(default_factory=list["RepositoryRef"])
    failed: dict[RepositoryRef, str] = field(default_factory=dict["RepositoryRef", str])


class RepositoryOperations:
    def __init__(self, store: ReconciliationStore, service: RepoService) -> None:
        self._store = store
        self._service = service

    async def refresh(self) -> list[Repository]:
        """Replace the repository collection with a fresh listing (raises on failure)."""

        repositories = await self._service.list_repos()
        self._store.replace_all(EntityKind.REPOSITORY, repositories)
        return repositories

    async def create(self, draft: RepositoryDraft) -> MutationResult[Repository]:
        name = draft.name.strip()
        if not name:
            return Failed(InputValidationError("Repository name is required"))
        cleaned = RepositoryDraft(
            name=name, description=draft.description.strip(), private=draft.private
        )
        try:
            created = await self._service.create_repo(cleaned)
        except RemoteServiceError as exc:
            log.warning("Creating repository %s failed: %s", name, exc)
            return Failed(exc)

        try:
            await self.refresh()
        except UnauthorizedError as exc:
            log.warning("Repository list refresh after create was rejected: %s", exc)
            return Confirmed(created)
        except RemoteServiceError as exc:
            log.warning("Repository list refresh after create failed: %s", exc)
            self._store.replace_all(EntityKind.REPOSITORY, [*self._store.repositories, created])
        return Confirmed(created)

    async def rename(self, ref: RepositoryRef, new_name: str) -> MutationResult[Repository]:
        name = new_name.strip()
        if not name:
            return Failed(InputValidationError("New repository name is required"))
        if name == ref.name:
            return Failed(InputValidationError(f"{ref} already has that name"))
        try:
            confirmed = await self._service.rename_repo(ref.owner, ref.name, name)
        except RemoteServiceError as exc:
            log.warning("Renaming %s failed: %s", ref, exc)
            return Failed(exc)

        if self._store.repository(ref) is None:
            return Confirmed(confirmed)
        updated: Repository = self._store.apply_local_mutation(
            EntityKind.REPOSITORY,
            ref,
            {
                "owner": confirmed.owner,
                "name": confirmed.name,
                "updated_at": confirmed.updated_at,
                "clone_url": confirmed.clone_url,
                "html_url": confirmed.html_url,
            },
        )
        return Confirmed(updated)

    async def delete(self, ref: RepositoryRef) -> MutationResult[RepositoryRef]:
        try:
            await self._service.delete_repo(ref.owner, ref.name)
        except RemoteServiceError as exc:
            log.warning("Deleting %s failed: %s", ref, exc)
            return Failed(exc)
        self._store.remove(EntityKind.REPOSITORY, ref)
        return Confirmed(ref)

    async def delete_selected(self) -> BulkDeleteReport:
        """Delete every selected repository in turn; failures stay selected."""

        report = BulkDeleteReport()
        for ref in self._store.selection:
            result = await self.delete(ref)
            if isinstance(result, Failed):
                report.failed[ref] = result.message
            else:
                report.deleted.append(ref)
        log.info(
            "Bulk delete finished: deleted=%s, failed=%s", len(report.deleted), len(report.failed)
        )
        return report


class RecordOperations:
    def __init__(self, store: ReconciliationStore, service: DnsService) -> None:
        self._store = store
        self._service = service

    async def load(self, zone_id: str, *, force: bool = False) -> list[DnsRecord]:
        """Make ``zone_id`` the active zone, fetching its records unless cached."""

        account = self._account_for(zone_id)
        self._store.record_filter.zone_id = zone_id
        cached = self._store.records_for(zone_id)
        if cached is not None and not force:
            return cached
        records = await self._service.list_records(account, zone_id)
        self._store.replace_all(EntityKind.DNS_RECORD, records, scope=zone_id)
        return records

    async def create(self, zone_id: str, draft: RecordDraft) -> MutationResult[DnsRecord]:
        try:
            _validate_draft(draft)
            account = self._account_for(zone_id)
            record = await self._service.create_record(account, zone_id, draft)
        except (InputValidationError, RemoteServiceError) as exc:
            log.warning("Creating %s record in zone %s failed: %s", draft.type, zone_id, exc)
            return Failed(exc)
        await self._reload(account, zone_id)
        return Confirmed(record)

    async def update(
        self, zone_id: str, record_id: str, draft: RecordDraft
    ) -> MutationResult[DnsRecord]:
        try:
            _validate_draft(draft)
            account = self._account_for(zone_id)
            record = await self._service.update_record(account, zone_id, record_id, draft)
        except (InputValidationError, RemoteServiceError) as exc:
            log.warning("Updating record %s in zone %s failed: %s", record_id, zone_id, exc)
            return Failed(exc)
        await self._reload(account, zone_id)
        return Confirmed(record)

    async def delete(self, zone_id: str, record_id: str) -> MutationResult[str]:
        try:
            account = self._account_for(zone_id)
            await self._service.delete_record(account, zone_id, record_id)
        except (InputValidationError, RemoteServiceError) as exc:
            log.warning("Deleting record %s in zone %s failed: %s", record_id, zone_id, exc)
            return Failed(exc)
        await self._reload(account, zone_id)
        return Confirmed(record_id)

    async def _reload(self, account: Account, zone_id: str) -> None:
        # Re-list rather than patch: the service may rewrite proxied records.
        try:
            records = await self._service.list_records(account, zone_id)
        except RemoteServiceError as exc:
            log.warning("Reloading records of zone %s failed: %s", zone_id, exc)
            self._store.forget_records(zone_id)
            return
        self._store.replace_all(EntityKind.DNS_RECORD, records, scope=zone_id)

    def _account_for(self, zone_id: str) -> Account:
        zone = self._store.zone(zone_id)
        if zone is None or zone.account_id is None:
            raise InputValidationError(f"Unknown zone: {zone_id}")
        account = self._store.account(zone.account_id)
        if account is None:
            raise InputValidationError(f"Zone {zone.name} has no configured credential")
        return account


def _validate_draft(draft: RecordDraft) -> None:
    missing = [name for name in ("type", "name", "content") if not getattr(draft, name).strip()]
    if missing:
        raise InputValidationError(f"Missing record fields: {', '.join(missing)}")
    if draft.ttl < 1:
        raise InputValidationError("TTL must be 1 (automatic) or a positive number of seconds")
