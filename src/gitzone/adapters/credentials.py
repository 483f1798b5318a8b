"""Credential store backed by a JSON file in the gitzone data directory."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from gitzone.config.errors import ConfigurationError
from gitzone.config.storage import get_storage_config

if TYPE_CHECKING:
    from pathlib import Path

log = getLogger(__name__)

_ENTRIES = TypeAdapter(dict[str, str])


class JsonFileCredentialStore:
    """Key-value credential store persisted as one JSON object.

    Every write rewrites the whole file; the store is meant for a handful of keys.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or get_storage_config().credentials_path()
        self._entries: dict[str, str] | None = None

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        entries = self._load()
        entries[key] = value
        self._save(entries)

    def delete(self, key: str) -> None:
        entries = self._load()
        if entries.pop(key, None) is not None:
            self._save(entries)

    def _load(self) -> dict[str, str]:
        if self._entries is None:
            if self.path.exists():
                try:
                    self._entries = _ENTRIES.validate_json(self.path.read_bytes())
                except ValidationError as exc:
                    raise ConfigurationError(
                        f"Credential file {self.path} is not a JSON object of strings"
                    ) from exc
            else:
                self._entries = {}
        return self._entries

    def _save(self, entries: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(entries, indent=2, sort_keys=True), encoding="utf-8")
        self.path.chmod(0o600)
        log.debug("Wrote %s credential entries to %s", len(entries), self.path)


class InMemoryCredentialStore:
    def __init__(self, entries: dict[str, str] | None = None) -> None:
        self._entries = dict(entries or {})

    def get(self, key: str) -> str | None:
        return self._entries.get(key)

    def set(self, key: str, value: str) -> None:
        self._entries[key] = value

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)
