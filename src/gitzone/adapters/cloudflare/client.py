"""HTTP client for the Cloudflare v4 DNS API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from gitzone.adapters.http_resilience import ResilientClient
from gitzone.domain.errors import RemoteOperationError, UnauthorizedError

from .schema import CloudflareEnvelope
from .translator import record_body, translate_record, translate_zone

if TYPE_CHECKING:
    from collections.abc import Callable

    from gitzone.config.cloudflare import CloudflareConfig
    from gitzone.config.http_resilience import ResilienceConfig
    from gitzone.domain.model import Account, DnsRecord, RecordDraft, Zone

log = getLogger(__name__)

_UNAUTHORIZED_STATUSES = frozenset({401, 403})


class CloudflareAPIError(RemoteOperationError):
    """Raised when a Cloudflare response carries ``success: false``."""


def auth_headers(account: Account) -> dict[str, str]:
    if account.email.strip():
        return {"X-Auth-Email": account.email.strip(), "X-Auth-Key": account.api_key}
    return {"Authorization": f"Bearer {account.api_key}"}


class CloudflareClient:
    """One client serves every credential; each call carries its account's headers."""

    def __init__(
        self,
        *,
        config: CloudflareConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._http: ResilientClient | None = None

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def list_zones(self, account: Account) -> list[Zone]:
        payloads = await self._collect_pages(account, "/zones", self._config.zones_page_size)
        return [_parse(translate_zone, item, account_id=account.id) for item in payloads]

    async def list_records(self, account: Account, zone_id: str) -> list[DnsRecord]:
        payloads = await self._collect_pages(
            account, f"/zones/{zone_id}/dns_records", self._config.records_page_size
        )
        return [_parse(translate_record, item, zone_id=zone_id) for item in payloads]

    async def create_record(
        self, account: Account, zone_id: str, draft: RecordDraft
    ) -> DnsRecord:
        envelope = await self._request(
            account, "POST", f"/zones/{zone_id}/dns_records", json=record_body(draft)
        )
        return _parse(translate_record, envelope.result, zone_id=zone_id)

    async def update_record(
        self, account: Account, zone_id: str, record_id: str, draft: RecordDraft
    ) -> DnsRecord:
        envelope = await self._request(
            account,
            "PUT",
            f"/zones/{zone_id}/dns_records/{record_id}",
            json=record_body(draft),
        )
        return _parse(translate_record, envelope.result, zone_id=zone_id)

    async def delete_record(self, account: Account, zone_id: str, record_id: str) -> None:
        await self._request(account, "DELETE", f"/zones/{zone_id}/dns_records/{record_id}")

    async def _collect_pages(self, account: Account, path: str, per_page: int) -> list[object]:
        items: list[object] = []
        page = 1
        while True:
            envelope = await self._request(
                account, "GET", path, params={"page": page, "per_page": per_page}
            )
            if not isinstance(envelope.result, list):
                raise CloudflareAPIError(f"Unexpected Cloudflare listing for {path}")
            items.extend(envelope.result)
            info = envelope.result_info
            if info is None or info.total_pages is None or page >= info.total_pages:
                return items
            page += 1

    def _session(self) -> ResilientClient:
        if self._http is None:
            self._http = self._client_factory(self._resilience)
        return self._http

    async def _request(
        self,
        account: Account,
        method: str,
        path: str,
        *,
        params: dict[str, str | int] | None = None,
        json: object = None,
    ) -> CloudflareEnvelope:
        try:
            response = await self._session().request(
                method, path, params=params, json=json, headers=auth_headers(account)
            )
        except httpx.HTTPError as exc:
            raise RemoteOperationError(f"Cloudflare request failed: {exc}") from exc

        status = response.status_code
        if status in _UNAUTHORIZED_STATUSES:
            log.warning("Cloudflare rejected credential %s (%s %s)", account.name, method, path)
            raise UnauthorizedError(
                f"Cloudflare rejected the credential for {account.name}", status_code=status
            )

        try:
            envelope = CloudflareEnvelope.model_validate_json(response.content)
        except ValidationError as exc:
            if response.is_error:
                raise RemoteOperationError(
                    response.text or f"Cloudflare request failed with {status}",
                    status_code=status,
                ) from exc
            raise RemoteOperationError("Unexpected Cloudflare response payload") from exc

        if not envelope.success or response.is_error:
            messages = [error.message for error in envelope.errors if error.message]
            summary = "; ".join(messages) or f"Cloudflare request failed with {status}"
            raise CloudflareAPIError(summary, status_code=status, errors=messages)
        return envelope


def _parse[T](translate: Callable[..., T], payload: object, **kwargs: str) -> T:
    try:
        return translate(payload, **kwargs)
    except ValidationError as exc:
        raise RemoteOperationError(f"Unexpected Cloudflare payload: {exc}") from exc
