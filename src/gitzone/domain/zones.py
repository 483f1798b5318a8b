"""Zone listing across every configured DNS credential.

Credentials are visited one after another on purpose: it keeps each credential
under the provider's request rate and lets consumers see each account's zones as
soon as they arrive.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .guards import BusyFlag, skip_if_busy
from .model import EntityKind

if TYPE_CHECKING:
    from .model import RealAccount, Zone
    from .ports import DnsService
    from .store import ReconciliationStore

log = getLogger(__name__)


@dataclass(slots=True)
class ZoneRefreshResult:
    fetched: list[str] = field(default_factory=list[str])
    skipped: list[str] = field(default_factory=list[str])
    failed: list[str] = field(default_factory=list[str])


@dataclass(frozen=True, slots=True)
class ZoneOverview:
    """Zones of all credentials with both back-references, plus the owners seen."""

    zones: list[Zone]
    real_accounts: list[RealAccount]


class ZoneAggregator:
    def __init__(self, store: ReconciliationStore, service: DnsService) -> None:
        self._store = store
        self._service = service
        self._busy = BusyFlag()

    @property
    def busy_flag(self) -> BusyFlag:
        return self._busy

    @skip_if_busy
    async def refresh(self, *, force: bool = False) -> ZoneRefreshResult:
        """Fetch zones for every credential whose zones are not cached yet."""

        result = ZoneRefreshResult()
        for account in self._store.accounts:
            if not force and self._store.has_zones(account.id):
                result.skipped.append(account.id)
                continue
            try:
                zones = await self._service.list_zones(account)
            except Exception as exc:  # noqa: BLE001
                log.warning("Failed to fetch zones for account %s: %s", account.name, exc)
                result.failed.append(account.id)
                continue
            self._store.replace_all(EntityKind.ZONE, zones, scope=account.id)
            result.fetched.append(account.id)
            log.info("Loaded %s zones for account %s", len(zones), account.name)
        return result

    def overview(self) -> ZoneOverview:
        return ZoneOverview(
            zones=self._store.get_filtered(EntityKind.ZONE),
            real_accounts=self._store.real_accounts(),
        )
