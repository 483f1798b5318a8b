"""Cloudflare DNS adapter package."""

from __future__ import annotations

from .client import CloudflareAPIError, CloudflareClient, auth_headers
from .schema import CloudflareEnvelope, CloudflareRecord, CloudflareZone
from .translator import record_body, translate_record, translate_zone

__all__ = [
    "CloudflareAPIError",
    "CloudflareClient",
    "CloudflareEnvelope",
    "CloudflareRecord",
    "CloudflareZone",
    "auth_headers",
    "record_body",
    "translate_record",
    "translate_zone",
]
