"""DNS entities: local credentials, zones and records."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True, slots=True)
class Account:
    """A caller-supplied DNS credential.

    A blank ``email`` means ``api_key`` is an API token; otherwise it is a global key
    paired with the login email.
    """

    id: str
    name: str
    api_key: str
    email: str = ""

    @classmethod
    def create(cls, *, name: str, api_key: str, email: str = "") -> Account:
        return cls(id=uuid4().hex, name=name, api_key=api_key, email=email)


@dataclass(frozen=True, slots=True)
class RealAccount:
    """The provider-side account that owns a zone."""

    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Zone:
    id: str
    name: str
    status: str
    owner: RealAccount | None = None
    account_id: str | None = None


@dataclass(frozen=True, slots=True)
class DnsRecord:
    id: str
    zone_id: str
    type: str
    name: str
    content: str
    proxied: bool = False
    ttl: int = 1


@dataclass(frozen=True, slots=True)
class RecordDraft:
    """Full set of writable record fields sent on create and update."""

    type: str
    name: str
    content: str
    proxied: bool = False
    ttl: int = 1

    @classmethod
    def from_record(cls, record: DnsRecord, *, content: str | None = None) -> RecordDraft:
        return cls(
            type=record.type,
            name=record.name,
            content=record.content if content is None else content,
            proxied=record.proxied,
            ttl=record.ttl,
        )
