from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep tests away from the real data directory and any local ``.env`` values."""

    monkeypatch.setenv("GITZONE_DATA_DIR", str(tmp_path / "gitzone-data"))
    for name in ("GITHUB_TOKEN", "GITHUB_API_URL", "CLOUDFLARE_API_URL", "GITZONE_HTTP_CACHE"):
        monkeypatch.delenv(name, raising=False)
