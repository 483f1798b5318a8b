"""Translate Cloudflare payloads into domain entities and request bodies."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gitzone.domain.model import DnsRecord, RealAccount, Zone

from .schema import CloudflareRecord, CloudflareZone

if TYPE_CHECKING:
    from gitzone.domain.model import RecordDraft


def translate_zone(payload: object, *, account_id: str | None = None) -> Zone:
    model = CloudflareZone.model_validate(payload)
    owner = (
        RealAccount(id=model.account.id, name=model.account.name or model.account.id)
        if model.account is not None
        else None
    )
    return Zone(
        id=model.id,
        name=model.name,
        status=model.status,
        owner=owner,
        account_id=account_id,
    )


def translate_record(payload: object, *, zone_id: str) -> DnsRecord:
    model = CloudflareRecord.model_validate(payload)
    return DnsRecord(
        id=model.id,
        zone_id=model.zone_id or zone_id,
        type=model.type,
        name=model.name,
        content=model.content,
        proxied=model.proxied,
        ttl=model.ttl,
    )


def record_body(draft: RecordDraft) -> dict[str, object]:
    """Request body for create and full update; every writable field is sent."""

    return {
        "type": draft.type,
        "name": draft.name,
        "content": draft.content,
        "proxied": draft.proxied,
        "ttl": draft.ttl,
    }
