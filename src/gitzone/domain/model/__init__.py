"""Domain model package."""

from __future__ import annotations

from .dns import Account, DnsRecord, RealAccount, RecordDraft, Zone
from .enums import BulkRunState, CountKind, EntityKind, RepositorySort, RepositoryVisibility
from .source_hosting import (
    CommitEntry,
    PageProbeResult,
    Repository,
    RepositoryDraft,
    RepositoryRef,
    StatsEntry,
    User,
)

__all__ = [
    "Account",
    "BulkRunState",
    "CommitEntry",
    "CountKind",
    "DnsRecord",
    "EntityKind",
    "PageProbeResult",
    "RealAccount",
    "RecordDraft",
    "Repository",
    "RepositoryDraft",
    "RepositoryRef",
    "RepositorySort",
    "RepositoryVisibility",
    "StatsEntry",
    "User",
    "Zone",
]
