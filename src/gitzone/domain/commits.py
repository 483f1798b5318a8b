"""Recent-commit feed built from the most recently updated repositories.

The hosting service's commit search is unreliable across many repositories, so the
feed is assembled by listing commits per repository concurrently and merging the
bounded per-repository lists by author timestamp.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from itertools import chain
from logging import getLogger
from typing import TYPE_CHECKING

from gitzone.config.aggregation import (
    COMMIT_FEED_SIZE,
    COMMIT_SOURCE_REPOSITORIES,
    COMMITS_PER_REPOSITORY,
)

from .guards import BusyFlag, skip_if_busy
from .model import CommitEntry, EntityKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .model import Repository
    from .ports import RepoService
    from .store import ReconciliationStore

log = getLogger(__name__)


def most_recent_repositories(repositories: Iterable[Repository], limit: int) -> list[Repository]:
    return sorted(repositories, key=lambda repo: repo.updated_at, reverse=True)[:limit]


def merge_commit_lists(lists: Sequence[Sequence[CommitEntry]], limit: int) -> list[CommitEntry]:
    """Merge per-repository lists into one feed, newest first, at most ``limit`` long.

    ``sorted`` is stable, so equal timestamps keep the order of ``lists``.
    """

    merged = sorted(
        chain.from_iterable(lists), key=lambda commit: commit.committed_at, reverse=True
    )
    return merged[:limit]


class CommitAggregator:
    def __init__(
        self,
        store: ReconciliationStore,
        service: RepoService,
        *,
        source_repositories: int = COMMIT_SOURCE_REPOSITORIES,
        per_repository: int = COMMITS_PER_REPOSITORY,
        feed_size: int = COMMIT_FEED_SIZE,
    ) -> None:
        self._store = store
        self._service = service
        self._source_repositories = source_repositories
        self._per_repository = per_repository
        self._feed_size = feed_size
        self._busy = BusyFlag()

    @property
    def busy_flag(self) -> BusyFlag:
        return self._busy

    @skip_if_busy
    async def refresh(self) -> list[CommitEntry]:
        sources = most_recent_repositories(self._store.repositories, self._source_repositories)
        if not sources:
            self._store.replace_all(EntityKind.COMMIT, [])
            return []

        fetched = await asyncio.gather(*(self._fetch(repo) for repo in sources))
        # Repositories removed while the fan-out ran (including a session teardown)
        # contribute nothing.
        per_repository = [
            commits
            for repo, commits in zip(sources, fetched, strict=True)
            if self._store.repository(repo.ref) is not None
        ]
        feed = merge_commit_lists(per_repository, self._feed_size)
        self._store.replace_all(EntityKind.COMMIT, feed)
        log.info("Commit feed rebuilt from %s repositories: %s commits", len(sources), len(feed))
        return feed

    async def _fetch(self, repo: Repository) -> list[CommitEntry]:
        try:
            commits = await self._service.list_commits(
                repo.owner, repo.name, per_page=self._per_repository
            )
        except Exception as exc:  # noqa: BLE001
            log.warning("Failed to fetch commits for %s: %s", repo.full_name, exc)
            return []
        ref = repo.ref
        return [replace(commit, repository=ref) for commit in commits[: self._per_repository]]
