"""Route adapter HTTP traffic through ``httpx.MockTransport``."""

from __future__ import annotations

from collections.abc import Callable  # noqa: TC003

import httpx

from gitzone.adapters.http_resilience import ResilientClient
from gitzone.config.http_resilience import ResilienceConfig  # noqa: TC001


def make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=resilience.base_url or "",
            headers=dict(resilience.default_headers or {}),
            transport=httpx.MockTransport(async_handler),
        )
        return client

    return factory
