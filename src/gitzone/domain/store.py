"""In-memory source of truth for everything fetched from the remote services.

Components never splice collections themselves: they hand complete results to
``replace_all``, confirmed changes to ``apply_local_mutation`` and deletions to
``remove``. The store performs no I/O, so any interleaving of finished async
operations leaves it consistent.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, fields, replace
from logging import getLogger
from typing import TYPE_CHECKING, Any

from .model import (
    Account,
    CommitEntry,
    DnsRecord,
    EntityKind,
    RealAccount,
    Repository,
    RepositoryRef,
    RepositorySort,
    RepositoryVisibility,
    StatsEntry,
    User,
    Zone,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

log = getLogger(__name__)

StoreListener = Callable[[EntityKind], None]

_IMMUTABLE_FIELDS: Mapping[EntityKind, frozenset[str]] = {
    EntityKind.ZONE: frozenset({"id", "account_id"}),
    EntityKind.DNS_RECORD: frozenset({"id", "zone_id"}),
}


@dataclass(slots=True)
class RepositoryFilter:
    search: str = ""
    visibility: RepositoryVisibility = RepositoryVisibility.ALL
    owner: str | None = None
    sort: RepositorySort = RepositorySort.UPDATED


@dataclass(slots=True)
class ZoneFilter:
    search: str = ""
    account_id: str | None = None
    real_account_id: str | None = None
    status: str | None = None


@dataclass(slots=True)
class RecordFilter:
    zone_id: str | None = None
    search: str = ""
    type: str | None = None


class ReconciliationStore:
    def __init__(self) -> None:
        self.user: User | None = None
        self.repository_filter = RepositoryFilter()
        self.zone_filter = ZoneFilter()
        self.record_filter = RecordFilter()
        self._repositories: dict[RepositoryRef, Repository] = {}
        self._stats: dict[RepositoryRef, StatsEntry] = {}
        self._commits: list[CommitEntry] = []
        self._accounts: dict[str, Account] = {}
        self._zones: dict[str, dict[str, Zone]] = {}
        self._records: dict[str, dict[str, DnsRecord]] = {}
        self._selection: set[RepositoryRef] = set()
        self._listeners: list[StoreListener] = []

    # -- change notification -------------------------------------------------

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register ``listener`` for change notifications; returns an unsubscribe hook."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, kind: EntityKind) -> None:
        for listener in list(self._listeners):
            listener(kind)

    # -- the three mutation entry points ------------------------------------

    def replace_all(
        self,
        kind: EntityKind,
        items: Iterable[Any],
        *,
        scope: str | None = None,
    ) -> None:
        """Replace a whole collection with a fresh remote listing.

        Zones are scoped to the local account id that fetched them and records to
        their zone id; ``scope`` is required for both.
        """

        match kind:
            case EntityKind.REPOSITORY:
                repositories = {repo.ref: repo for repo in items}
                self._repositories = repositories
                self._selection = {ref for ref in self._selection if ref in repositories}
            case EntityKind.COMMIT:
                self._commits = list(items)
            case EntityKind.ZONE:
                account_id = _require_scope(kind, scope)
                if account_id not in self._accounts:
                    log.debug("Dropping zones for unconfigured account %s", account_id)
                    return
                self._zones[account_id] = {
                    zone.id: _tagged(zone, account_id) for zone in items
                }
            case EntityKind.DNS_RECORD:
                zone_id = _require_scope(kind, scope)
                self._records[zone_id] = {record.id: record for record in items}
            case EntityKind.STATS:
                raise ValueError("Stats entries are created one at a time with set_stats")
        self._notify(kind)

    def apply_local_mutation(
        self,
        kind: EntityKind,
        identity: RepositoryRef | str,
        patch: Mapping[str, object],
    ) -> Any:
        """Apply a change the remote service has already confirmed.

        The patch replaces the named fields all at once. Unknown identities, unknown
        fields and identity clashes raise without touching the store.
        """

        match kind:
            case EntityKind.REPOSITORY:
                updated = self._patch_repository(_as_ref(identity), patch)
            case EntityKind.ZONE:
                updated = self._patch_zone(str(identity), patch)
            case EntityKind.DNS_RECORD:
                updated = self._patch_record(str(identity), patch)
            case _:
                raise ValueError(f"{kind} entries cannot be mutated individually")
        self._notify(kind)
        return updated

    def remove(self, kind: EntityKind, identity: RepositoryRef | str) -> bool:
        """Drop an entity after a confirmed delete; returns whether it was present."""

        removed = False
        match kind:
            case EntityKind.REPOSITORY:
                ref = _as_ref(identity)
                removed = self._repositories.pop(ref, None) is not None
                self._stats.pop(ref, None)
                self._selection.discard(ref)
            case EntityKind.STATS:
                removed = self._stats.pop(_as_ref(identity), None) is not None
            case EntityKind.ZONE:
                zone_id = str(identity)
                for bucket in self._zones.values():
                    if bucket.pop(zone_id, None) is not None:
                        removed = True
                self._records.pop(zone_id, None)
            case EntityKind.DNS_RECORD:
                record_id = str(identity)
                for bucket in self._records.values():
                    if bucket.pop(record_id, None) is not None:
                        removed = True
            case EntityKind.COMMIT:
                raise ValueError("Commit entries are rebuilt by the aggregator, not removed")
        if removed:
            self._notify(kind)
        return removed

    # -- projections ---------------------------------------------------------

    def get_filtered(self, kind: EntityKind) -> list[Any]:
        """Return the searched, filtered and sorted view of a collection."""

        match kind:
            case EntityKind.REPOSITORY:
                return self._filtered_repositories()
            case EntityKind.ZONE:
                return self._filtered_zones()
            case EntityKind.DNS_RECORD:
                return self._filtered_records()
            case EntityKind.COMMIT:
                return list(self._commits)
            case EntityKind.STATS:
                return [
                    self._stats[repo.ref]
                    for repo in self._filtered_repositories()
                    if repo.ref in self._stats
                ]

    def _filtered_repositories(self) -> list[Repository]:
        flt = self.repository_filter
        query = flt.search.strip().casefold()
        matches = [
            repo
            for repo in self._repositories.values()
            if _repository_matches(repo, flt, query)
        ]
        if flt.sort is RepositorySort.NAME:
            return sorted(matches, key=lambda repo: repo.name.casefold())
        if flt.sort is RepositorySort.STARS:
            return sorted(matches, key=lambda repo: repo.stars, reverse=True)
        return sorted(matches, key=lambda repo: repo.updated_at, reverse=True)

    def _filtered_zones(self) -> list[Zone]:
        flt = self.zone_filter
        query = flt.search.strip().casefold()
        matches: list[Zone] = []
        for account_id, bucket in self._zones.items():
            if account_id not in self._accounts:
                continue
            if flt.account_id is not None and account_id != flt.account_id:
                continue
            matches.extend(zone for zone in bucket.values() if _zone_matches(zone, flt, query))
        return sorted(matches, key=lambda zone: (zone.name, zone.account_id or ""))

    def _filtered_records(self) -> list[DnsRecord]:
        flt = self.record_filter
        if flt.zone_id is None:
            return []
        query = flt.search.strip().casefold()
        records = self._records.get(flt.zone_id, {}).values()
        matches = [
            record
            for record in records
            if (flt.type is None or record.type == flt.type)
            and (not query or query in record.name.casefold() or query in record.content.casefold())
        ]
        return sorted(matches, key=lambda record: (record.type, record.name))

    # -- repositories, stats and selection -----------------------------------

    @property
    def repositories(self) -> list[Repository]:
        return list(self._repositories.values())

    def repository(self, ref: RepositoryRef) -> Repository | None:
        return self._repositories.get(ref)

    def owners(self) -> list[str]:
        return sorted({repo.owner for repo in self._repositories.values()}, key=str.casefold)

    def stats_for(self, ref: RepositoryRef) -> StatsEntry | None:
        return self._stats.get(ref)

    def has_stats(self, ref: RepositoryRef) -> bool:
        return ref in self._stats

    def set_stats(self, ref: RepositoryRef, entry: StatsEntry) -> bool:
        """Store stats for ``ref`` unless an entry exists already; returns whether stored."""

        if ref in self._stats:
            return False
        self._stats[ref] = entry
        self._notify(EntityKind.STATS)
        return True

    @property
    def commits(self) -> list[CommitEntry]:
        return list(self._commits)

    @property
    def selection(self) -> list[RepositoryRef]:
        return sorted(self._selection)

    def select(self, ref: RepositoryRef) -> bool:
        if ref not in self._repositories:
            return False
        self._selection.add(ref)
        return True

    def deselect(self, ref: RepositoryRef) -> None:
        self._selection.discard(ref)

    def toggle_selection(self, ref: RepositoryRef) -> bool:
        """Flip the selection state of ``ref``; returns whether it is now selected."""

        if ref in self._selection:
            self._selection.discard(ref)
            return False
        return self.select(ref)

    def clear_selection(self) -> None:
        self._selection.clear()

    def _patch_repository(self, ref: RepositoryRef, patch: Mapping[str, object]) -> Repository:
        current = self._repositories.get(ref)
        if current is None:
            raise KeyError(f"Unknown repository: {ref}")
        updated = replace(current, **_checked_patch(Repository, patch, frozenset()))
        new_ref = updated.ref
        if new_ref != ref:
            if new_ref in self._repositories:
                raise ValueError(f"Repository {new_ref} already exists")
            del self._repositories[ref]
            if ref in self._stats:
                self._stats[new_ref] = self._stats.pop(ref)
            if ref in self._selection:
                self._selection.discard(ref)
                self._selection.add(new_ref)
        self._repositories[new_ref] = updated
        return updated

    # -- accounts, zones and records -----------------------------------------

    @property
    def accounts(self) -> list[Account]:
        return list(self._accounts.values())

    def account(self, account_id: str) -> Account | None:
        return self._accounts.get(account_id)

    def set_accounts(self, accounts: Sequence[Account]) -> None:
        """Replace the configured credentials, dropping state owned by removed ones."""

        self._accounts = {account.id: account for account in accounts}
        for account_id in [key for key in self._zones if key not in self._accounts]:
            self._drop_account_state(account_id)
        self._notify(EntityKind.ZONE)

    def add_account(self, account: Account) -> None:
        self._accounts[account.id] = account
        self._notify(EntityKind.ZONE)

    def remove_account(self, account_id: str) -> bool:
        if self._accounts.pop(account_id, None) is None:
            return False
        self._drop_account_state(account_id)
        self._notify(EntityKind.ZONE)
        return True

    def _drop_account_state(self, account_id: str) -> None:
        for zone_id in self._zones.pop(account_id, {}):
            self._records.pop(zone_id, None)
            if self.record_filter.zone_id == zone_id:
                self.record_filter.zone_id = None
        if self.zone_filter.account_id == account_id:
            self.zone_filter.account_id = None

    def has_zones(self, account_id: str) -> bool:
        return account_id in self._zones

    def zones_for(self, account_id: str) -> list[Zone]:
        return list(self._zones.get(account_id, {}).values())

    def zone(self, zone_id: str) -> Zone | None:
        for bucket in self._zones.values():
            if zone_id in bucket:
                return bucket[zone_id]
        return None

    def real_accounts(self) -> list[RealAccount]:
        """Distinct provider-side accounts seen across all cached zones."""

        seen: dict[str, RealAccount] = {}
        for account_id, bucket in self._zones.items():
            if account_id not in self._accounts:
                continue
            for zone in bucket.values():
                if zone.owner is not None:
                    seen.setdefault(zone.owner.id, zone.owner)
        return sorted(seen.values(), key=lambda owner: (owner.name.casefold(), owner.id))

    def records_for(self, zone_id: str) -> list[DnsRecord] | None:
        bucket = self._records.get(zone_id)
        return None if bucket is None else list(bucket.values())

    def forget_records(self, zone_id: str) -> None:
        if self._records.pop(zone_id, None) is not None:
            self._notify(EntityKind.DNS_RECORD)

    def _patch_zone(self, zone_id: str, patch: Mapping[str, object]) -> Zone:
        for bucket in self._zones.values():
            current = bucket.get(zone_id)
            if current is not None:
                checked = _checked_patch(Zone, patch, _IMMUTABLE_FIELDS[EntityKind.ZONE])
                bucket[zone_id] = replace(current, **checked)
                return bucket[zone_id]
        raise KeyError(f"Unknown zone: {zone_id}")

    def _patch_record(self, record_id: str, patch: Mapping[str, object]) -> DnsRecord:
        for bucket in self._records.values():
            current = bucket.get(record_id)
            if current is not None:
                checked = _checked_patch(DnsRecord, patch, _IMMUTABLE_FIELDS[EntityKind.DNS_RECORD])
                bucket[record_id] = replace(current, **checked)
                return bucket[record_id]
        raise KeyError(f"Unknown DNS record: {record_id}")

    # -- session -------------------------------------------------------------

    def clear_session(self) -> None:
        """Forget every fetched entity and filter; configured accounts are kept."""

        self.user = None
        self._repositories.clear()
        self._stats.clear()
        self._commits.clear()
        self._selection.clear()
        self._zones.clear()
        self._records.clear()
        self.repository_filter = RepositoryFilter()
        self.zone_filter = ZoneFilter()
        self.record_filter = RecordFilter()
        for kind in EntityKind:
            self._notify(kind)


def _require_scope(kind: EntityKind, scope: str | None) -> str:
    if not scope:
        raise ValueError(f"replace_all({kind}) requires a scope")
    return scope


def _as_ref(identity: RepositoryRef | str) -> RepositoryRef:
    if isinstance(identity, RepositoryRef):
        return identity
    return RepositoryRef.parse(identity)


def _checked_patch(
    entity_type: type[Any],
    patch: Mapping[str, object],
    immutable: frozenset[str],
) -> dict[str, object]:
    allowed = {field.name for field in fields(entity_type)} - immutable
    unknown = set(patch) - allowed
    if unknown:
        names = ", ".join(sorted(unknown))
        raise ValueError(f"Cannot patch {entity_type.__name__} fields: {names}")
    return dict(patch)


def _repository_matches(repo: Repository, flt: RepositoryFilter, query: str) -> bool:
    if query and query not in repo.name.casefold():
        description = (repo.description or "").casefold()
        if query not in description:
            return False
    if flt.owner is not None and repo.owner != flt.owner:
        return False
    match flt.visibility:
        case RepositoryVisibility.PUBLIC:
            return not repo.private
        case RepositoryVisibility.PRIVATE:
            return repo.private
        case RepositoryVisibility.FORKS:
            return repo.fork
        case RepositoryVisibility.SOURCES:
            return not repo.fork
        case _:
            return True


def _zone_matches(zone: Zone, flt: ZoneFilter, query: str) -> bool:
    if query and query not in zone.name.casefold():
        return False
    if flt.status is not None and zone.status != flt.status:
        return False
    if flt.real_account_id is not None:
        return zone.owner is not None and zone.owner.id == flt.real_account_id
    return True


def _tagged(zone: Zone, account_id: str) -> Zone:
    if zone.account_id == account_id:
        return zone
    return replace(zone, account_id=account_id)
