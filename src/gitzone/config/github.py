"""GitHub configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy, cache_from_setting
from .storage import StorageConfig, get_storage_config

GITHUB_BASE_URL = "https://api.github.com"
GITHUB_TIMEOUT_SECONDS = 15.0
GITHUB_ACCEPT = "application/vnd.github.v3+json"


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    """Holds GitHub API configuration values.

    The token is optional here: it is usually supplied at login time and kept in the
    credential store rather than in the environment.
    """

    resilience: ResilienceConfig
    token: str | None = None


def get_github_config(
    *,
    resilience: ResilienceConfig | None = None,
    storage: StorageConfig | None = None,
) -> GitHubConfig:
    base_url = optional_env_var("GITHUB_API_URL", GITHUB_BASE_URL)
    cache_setting = optional_env_var("GITZONE_HTTP_CACHE")
    storage_config = storage or get_storage_config()
    cache = (
        cache_from_setting(cache_setting, sqlite_path=str(storage_config.http_cache_path()))
        if cache_setting
        else None
    )
    return GitHubConfig(
        token=optional_env_var("GITHUB_TOKEN"),
        resilience=resilience
        or ResilienceConfig(
            name="github",
            base_url=base_url,
            timeout_seconds=GITHUB_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            retry=RetryPolicy(total=3),
            cache=cache,
            default_headers={"Accept": GITHUB_ACCEPT},
        ),
    )
