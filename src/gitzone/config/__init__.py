"""Application configuration helpers."""

from __future__ import annotations

from .aggregation import AggregationConfig, get_aggregation_config
from .cloudflare import CloudflareConfig, get_cloudflare_config
from .env import optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .github import GitHubConfig, get_github_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import StorageConfig, get_storage_config

__all__ = [
    "AggregationConfig",
    "CacheConfig",
    "CloudflareConfig",
    "ConfigurationError",
    "GitHubConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_aggregation_config",
    "get_cloudflare_config",
    "get_github_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
