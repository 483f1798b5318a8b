"""Minimal Pydantic models for the Cloudflare v4 API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CloudflareBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class CloudflareMessage(CloudflareBaseModel):
    code: int | None = None
    message: str = ""


class ResultInfo(CloudflareBaseModel):
    page: int = 1
    per_page: int | None = None
    count: int | None = None
    total_count: int | None = None
    total_pages: int | None = None


class CloudflareEnvelope(CloudflareBaseModel):
    """Every v4 response: a success flag, structured errors and the result."""

    success: bool = False
    errors: list[CloudflareMessage] = Field(default_factory=list["CloudflareMessage"])
    messages: list[CloudflareMessage] = Field(default_factory=list["CloudflareMessage"])
    result: object = None
    result_info: ResultInfo | None = None


class CloudflareZoneAccount(CloudflareBaseModel):
    id: str
    name: str = ""


class CloudflareZone(CloudflareBaseModel):
    id: str
    name: str
    status: str = "unknown"
    account: CloudflareZoneAccount | None = None


class CloudflareRecord(CloudflareBaseModel):
    id: str
    type: str
    name: str
    content: str
    proxied: bool = False
    ttl: int = 1
    zone_id: str | None = None
