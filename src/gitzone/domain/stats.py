"""Branch and commit counts for the visible repositories.

Counts come from single-item page probes rather than full listings: with a page
size of one, the page number of the ``last`` pagination link equals the item count.
A probe without pagination links only proves there is at least one item, so it
counts as one.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from gitzone.config.aggregation import STATS_WINDOW

from .guards import BusyFlag, skip_if_busy
from .model import CountKind, EntityKind, PageProbeResult, StatsEntry

if TYPE_CHECKING:
    from .model import Repository, RepositoryRef
    from .ports import RepoService
    from .store import ReconciliationStore

log = getLogger(__name__)


def derive_page_count(probe: PageProbeResult) -> int:
    """Turn a page probe into an approximate item count."""

    if probe.empty:
        return 0
    if not probe.has_continuation:
        return 1
    return probe.last_page if probe.last_page is not None else 1


@dataclass(slots=True)
class StatsRunResult:
    probed: list[RepositoryRef] = field(default_factory=list["RepositoryRef"])
    skipped: list[RepositoryRef] = field(default_factory=list["RepositoryRef"])
    failed: list[RepositoryRef] = field(default_factory=list["RepositoryRef"])


class StatsEnrichmentPipeline:
    def __init__(
        self,
        store: ReconciliationStore,
        service: RepoService,
        *,
        window: int = STATS_WINDOW,
    ) -> None:
        self._store = store
        self._service = service
        self._window = window
        self._busy = BusyFlag()

    @property
    def busy_flag(self) -> BusyFlag:
        return self._busy

    @skip_if_busy
    async def run(self) -> StatsRunResult:
        """Probe every uncached repository of the visible window, one repository at a time."""

        result = StatsRunResult()
        visible: list[Repository] = self._store.get_filtered(EntityKind.REPOSITORY)[: self._window]
        for repo in visible:
            ref = repo.ref
            if self._store.repository(ref) is None:
                # Removed (or the session torn down) since the window was taken.
                continue
            if self._store.has_stats(ref):
                result.skipped.append(ref)
                continue
            try:
                entry = await self._probe(ref)
            except Exception as exc:  # noqa: BLE001
                log.warning("Failed to fetch stats for %s: %s", ref, exc)
                result.failed.append(ref)
                continue
            if self._store.repository(ref) is None:
                log.debug("Discarding stats for %s; repository no longer present", ref)
                continue
            self._store.set_stats(ref, entry)
            result.probed.append(ref)

        log.info(
            "Stats run finished: probed=%s, skipped=%s, failed=%s",
            len(result.probed),
            len(result.skipped),
            len(result.failed),
        )
        return result

    async def _probe(self, ref: RepositoryRef) -> StatsEntry:
        branches, commits = await asyncio.gather(
            self._service.probe_count(ref.owner, ref.name, CountKind.BRANCHES),
            self._service.probe_count(ref.owner, ref.name, CountKind.COMMITS),
        )
        return StatsEntry(branches=derive_page_count(branches), commits=derive_page_count(commits))
