"""Translate GitHub payloads into domain entities."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import httpx

from gitzone.domain.model import CommitEntry, PageProbeResult, Repository, User

from .schema import GitHubCommit, GitHubRepository, GitHubUser

if TYPE_CHECKING:
    from collections.abc import Mapping

_EPOCH = datetime.fromtimestamp(0, UTC)


def translate_repository(payload: object) -> Repository:
    model = GitHubRepository.model_validate(payload)
    return Repository(
        owner=model.owner.login,
        name=model.name,
        updated_at=_as_utc(model.updated_at),
        private=model.private,
        fork=model.fork,
        stars=model.stargazers_count,
        forks=model.forks_count,
        language=model.language,
        description=model.description,
        clone_url=model.clone_url,
        html_url=model.html_url,
    )


def translate_user(payload: object) -> User:
    model = GitHubUser.model_validate(payload)
    return User(login=model.login, name=model.name, avatar_url=model.avatar_url)


def translate_commit(payload: object) -> CommitEntry:
    model = GitHubCommit.model_validate(payload)
    detail = model.commit
    timestamp = next(
        (sig.date for sig in (detail.author, detail.committer) if sig is not None and sig.date),
        None,
    )
    author = detail.author.name if detail.author is not None else None
    if not author:
        author = model.author.login if model.author is not None else "unknown"
    return CommitEntry(
        sha=model.sha,
        message=detail.message,
        author=author,
        committed_at=_as_utc(timestamp) if timestamp is not None else _EPOCH,
        html_url=model.html_url,
    )


def translate_probe(links: Mapping[str, Mapping[str, str]]) -> PageProbeResult:
    """Read the pagination links of a page-size-one response."""

    if not links:
        return PageProbeResult(has_continuation=False)
    last = links.get("last")
    last_page = _page_number(last.get("url")) if last is not None else None
    return PageProbeResult(has_continuation=True, last_page=last_page)


def _page_number(url: str | None) -> int | None:
    if not url:
        return None
    value = httpx.URL(url).params.get("page")
    if value is None or not value.isdigit():
        return None
    return int(value)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
