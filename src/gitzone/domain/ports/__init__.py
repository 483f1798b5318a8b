"""Domain port definitions for adapters."""

from __future__ import annotations

from .credentials import CredentialStore
from .dns import DnsService
from .source_hosting import RepoService

__all__ = ["CredentialStore", "DnsService", "RepoService"]
