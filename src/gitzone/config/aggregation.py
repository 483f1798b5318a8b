"""Working-set limits for the aggregation components."""

from __future__ import annotations

from dataclasses import dataclass

STATS_WINDOW = 50
COMMIT_SOURCE_REPOSITORIES = 10
COMMITS_PER_REPOSITORY = 10
COMMIT_FEED_SIZE = 50
BULK_RECORD_TYPE = "A"


@dataclass(frozen=True, slots=True)
class AggregationConfig:
    stats_window: int = STATS_WINDOW
    commit_source_repositories: int = COMMIT_SOURCE_REPOSITORIES
    commits_per_repository: int = COMMITS_PER_REPOSITORY
    commit_feed_size: int = COMMIT_FEED_SIZE
    bulk_record_type: str = BULK_RECORD_TYPE


def get_aggregation_config() -> AggregationConfig:
    return AggregationConfig()
