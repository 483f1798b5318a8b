"""Cloudflare DNS configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

CLOUDFLARE_BASE_URL = "https://api.cloudflare.com/client/v4"
CLOUDFLARE_TIMEOUT_SECONDS = 20.0
ZONES_PAGE_SIZE = 50
RECORDS_PAGE_SIZE = 100


@dataclass(frozen=True, slots=True)
class CloudflareConfig:
    resilience: ResilienceConfig
    zones_page_size: int = ZONES_PAGE_SIZE
    records_page_size: int = RECORDS_PAGE_SIZE


def get_cloudflare_config(*, resilience: ResilienceConfig | None = None) -> CloudflareConfig:
    # Record listings must reflect our own writes immediately, so no response cache here.
    base_url = optional_env_var("CLOUDFLARE_API_URL", CLOUDFLARE_BASE_URL)
    return CloudflareConfig(
        resilience=resilience
        or ResilienceConfig(
            name="cloudflare",
            base_url=base_url,
            timeout_seconds=CLOUDFLARE_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=4, per_seconds=1.0),
            retry=RetryPolicy(total=3),
            cache=None,
            default_headers={"Content-Type": "application/json"},
        ),
    )
