"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    """Collections held by the reconciliation store."""

    REPOSITORY = "repository"
    STATS = "stats"
    COMMIT = "commit"
    ZONE = "zone"
    DNS_RECORD = "dns_record"


class CountKind(StrEnum):
    """Paginated collections that can be probed for a page-derived count."""

    BRANCHES = "branches"
    COMMITS = "commits"


class RepositoryVisibility(StrEnum):
    ALL = "all"
    PUBLIC = "public"
    PRIVATE = "private"
    FORKS = "forks"
    SOURCES = "sources"


class RepositorySort(StrEnum):
    UPDATED = "updated"
    NAME = "name"
    STARS = "stars"


class BulkRunState(StrEnum):
    IDLE = "idle"
    VALIDATING = "validating"
    RUNNING = "running"
    DONE = "done"
