"""Cross-account rewrite of DNS record values.

The executor walks the current zone candidate set one zone at a time and
replaces every record of the target type whose content equals the old value.
A zone that fails is logged and left behind; the run always reaches ``done``.
There is no cancellation: once running, every candidate zone is visited.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from gitzone.config.aggregation import BULK_RECORD_TYPE

from .errors import InputValidationError, RemoteOperationError
from .model import BulkRunState, EntityKind, RecordDraft

if TYPE_CHECKING:
    from .model import Account, DnsRecord, Zone
    from .ports import DnsService
    from .store import ReconciliationStore

log = getLogger(__name__)


@dataclass(slots=True)
class BulkReplaceReport:
    updated_records: int = 0
    touched_zones: list[str] = field(default_factory=list[str])
    failed_zones: list[str] = field(default_factory=list[str])
    candidate_zones: int = 0

    @property
    def nothing_to_do(self) -> bool:
        return self.candidate_zones == 0

    @property
    def touched_zone_count(self) -> int:
        return len(self.touched_zones)

    def summary(self) -> str:
        if self.nothing_to_do:
            return "Nothing to do: no zones match the current filters"
        text = f"Updated {self.updated_records} records in {self.touched_zone_count} zones"
        if self.failed_zones:
            text += f" ({len(self.failed_zones)} zones failed)"
        return text


@dataclass(frozen=True, slots=True)
class BulkProgress:
    state: BulkRunState
    zone_index: int = 0
    zone_total: int = 0


def select_matching_records(
    records: list[DnsRecord],
    *,
    record_type: str,
    old_value: str,
) -> list[DnsRecord]:
    return [
        record for record in records if record.type == record_type and record.content == old_value
    ]


def unique_zones(zones: list[Zone]) -> list[Zone]:
    """Keep the first row of each zone id; a zone shared by two credentials is visited once."""

    seen: set[str] = set()
    unique: list[Zone] = []
    for zone in zones:
        if zone.id not in seen:
            seen.add(zone.id)
            unique.append(zone)
    return unique


class BulkMutationExecutor:
    def __init__(
        self,
        store: ReconciliationStore,
        service: DnsService,
        *,
        record_type: str = BULK_RECORD_TYPE,
    ) -> None:
        self._store = store
        self._service = service
        self._record_type = record_type
        self._progress = BulkProgress(state=BulkRunState.IDLE)

    @property
    def progress(self) -> BulkProgress:
        return self._progress

    @property
    def state(self) -> BulkRunState:
        return self._progress.state

    async def replace_record_values(
        self,
        old_value: str,
        new_value: str,
        *,
        record_type: str | None = None,
    ) -> BulkReplaceReport:
        """Replace ``old_value`` with ``new_value`` in matching records of every candidate zone.

        Raises ``InputValidationError`` (before any request) when either value is blank.
        An empty candidate set yields a report whose ``nothing_to_do`` is true.
        """

        if self._progress.state in {BulkRunState.VALIDATING, BulkRunState.RUNNING}:
            raise InputValidationError("A bulk replacement is already running")

        self._progress = BulkProgress(state=BulkRunState.VALIDATING)
        old = old_value.strip()
        new = new_value.strip()
        if not old or not new:
            self._progress = BulkProgress(state=BulkRunState.IDLE)
            raise InputValidationError("Both the old and the new value are required")

        candidates = unique_zones(self._store.get_filtered(EntityKind.ZONE))
        if not candidates:
            self._progress = BulkProgress(state=BulkRunState.IDLE)
            log.info("Bulk replace skipped: no candidate zones")
            return BulkReplaceReport()

        target_type = record_type or self._record_type
        report = BulkReplaceReport(candidate_zones=len(candidates))
        total = len(candidates)
        try:
            for index, zone in enumerate(candidates, start=1):
                self._progress = BulkProgress(
                    state=BulkRunState.RUNNING, zone_index=index, zone_total=total
                )
                try:
                    updated = await self._rewrite_zone(zone, target_type, old, new, report)
                except Exception as exc:  # noqa: BLE001
                    log.warning("Bulk replace failed for zone %s: %s", zone.name, exc)
                    report.failed_zones.append(zone.id)
                    continue
                if updated:
                    log.info("Updated %s records in zone %s", updated, zone.name)
            self._progress = BulkProgress(
                state=BulkRunState.DONE, zone_index=total, zone_total=total
            )
        finally:
            # An interrupted run must not block the next one.
            if self._progress.state is BulkRunState.RUNNING:
                self._progress = BulkProgress(state=BulkRunState.IDLE)
        log.info(report.summary())
        return report

    async def _rewrite_zone(
        self,
        zone: Zone,
        record_type: str,
        old_value: str,
        new_value: str,
        report: BulkReplaceReport,
    ) -> int:
        account = self._account_for(zone)
        records = await self._service.list_records(account, zone.id)
        matches = select_matching_records(records, record_type=record_type, old_value=old_value)
        updated = 0
        try:
            for record in matches:
                draft = RecordDraft.from_record(record, content=new_value)
                await self._service.update_record(account, zone.id, record.id, draft)
                updated += 1
                report.updated_records += 1
                if zone.id not in report.touched_zones:
                    report.touched_zones.append(zone.id)
        finally:
            if updated:
                # The cached listing is stale now; the next view re-fetches it.
                self._store.forget_records(zone.id)
        return updated

    def _account_for(self, zone: Zone) -> Account:
        account = self._store.account(zone.account_id) if zone.account_id else None
        if account is None:
            raise RemoteOperationError(f"No configured credential for zone {zone.name}")
        return account
