from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest

from gitzone.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_cloudflare_config,
    get_github_config,
    get_storage_config,
    optional_env_var,
    require_env_var,
    require_env_vars,
)
from gitzone.config.github import GITHUB_BASE_URL
from gitzone.config.http_resilience import cache_from_setting


def test_require_env_vars_returns_stripped_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  value ")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("MISSING_B", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_optional_env_var_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "")

    assert optional_env_var("EXAMPLE_VAR", "fallback") == "fallback"


def test_github_config_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("GITHUB_API_URL", raising=False)
    monkeypatch.delenv("GITZONE_HTTP_CACHE", raising=False)
    monkeypatch.setenv("GITHUB_TOKEN", "env-token")
    monkeypatch.setenv("GITZONE_DATA_DIR", str(tmp_path))

    config = get_github_config()

    assert config.token == "env-token"
    assert config.resilience.base_url == GITHUB_BASE_URL
    assert config.resilience.cache is None
    assert config.resilience.ratelimit is not None


def test_github_config_enables_sqlite_cache(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("GITZONE_HTTP_CACHE", "sqlite")
    monkeypatch.setenv("GITZONE_DATA_DIR", str(tmp_path))

    cache = get_github_config().resilience.cache

    assert cache is not None
    assert cache.backend == "sqlite"
    assert cache.sqlite_path == str(tmp_path.resolve() / "http_cache.db")


def test_cloudflare_config_reads_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLOUDFLARE_API_URL", "https://cf.internal/client/v4")

    config = get_cloudflare_config()

    assert config.resilience.base_url == "https://cf.internal/client/v4"
    assert config.resilience.cache is None


@pytest.mark.parametrize(
    ("value", "backend"),
    [(None, None), ("off", None), ("MEMORY", "memory"), ("sqlite", "sqlite")],
)
def test_cache_from_setting(value: str | None, backend: str | None) -> None:
    cache = cache_from_setting(value)

    assert (cache.backend if cache else None) == backend


def test_cache_from_setting_rejects_unknown_backend() -> None:
    with pytest.raises(ConfigurationError):
        cache_from_setting("redis")


def test_storage_config_prefers_explicit_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    custom = tmp_path / "custom-data"
    monkeypatch.setenv("GITZONE_DATA_DIR", str(custom))

    config = get_storage_config()

    assert config.credentials_path() == custom.resolve() / "credentials.json"
    assert custom.exists()
