"""Domain layer: entities, the reconciliation store and the aggregation components."""

from __future__ import annotations

from .bulk import BulkMutationExecutor, BulkReplaceReport
from .commits import CommitAggregator
from .errors import (
    EmptyResourceError,
    InputValidationError,
    RemoteOperationError,
    RemoteServiceError,
    UnauthorizedError,
)
from .operations import BulkDeleteReport, RecordOperations, RepositoryOperations
from .results import Confirmed, Failed, MutationResult
from .stats import StatsEnrichmentPipeline, derive_page_count
from .store import ReconciliationStore, RecordFilter, RepositoryFilter, ZoneFilter
from .zones import ZoneAggregator, ZoneOverview

__all__ = [
    "BulkDeleteReport",
    "BulkMutationExecutor",
    "BulkReplaceReport",
    "CommitAggregator",
    "Confirmed",
    "EmptyResourceError",
    "Failed",
    "InputValidationError",
    "MutationResult",
    "ReconciliationStore",
    "RecordFilter",
    "RecordOperations",
    "RemoteOperationError",
    "RemoteServiceError",
    "RepositoryFilter",
    "RepositoryOperations",
    "StatsEnrichmentPipeline",
    "UnauthorizedError",
    "ZoneAggregator",
    "ZoneFilter",
    "ZoneOverview",
    "derive_page_count",
]
