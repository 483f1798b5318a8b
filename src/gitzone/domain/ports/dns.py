"""Port for the DNS-management service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from gitzone.domain.model import Account, DnsRecord, RecordDraft, Zone


@runtime_checkable
class DnsService(Protocol):
    """Async access to zones and records, always scoped to one local credential.

    A response whose success flag is false is raised as ``RemoteOperationError``,
    exactly like a transport failure.
    """

    async def list_zones(self, account: Account) -> list[Zone]: ...

    async def list_records(self, account: Account, zone_id: str) -> list[DnsRecord]: ...

    async def create_record(
        self, account: Account, zone_id: str, draft: RecordDraft
    ) -> DnsRecord: ...

    async def update_record(
        self, account: Account, zone_id: str, record_id: str, draft: RecordDraft
    ) -> DnsRecord: ...

    async def delete_record(self, account: Account, zone_id: str, record_id: str) -> None: ...
