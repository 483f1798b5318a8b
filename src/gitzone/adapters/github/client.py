"""HTTP client for the GitHub REST API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from gitzone.adapters.http_resilience import ResilientClient
from gitzone.domain.errors import (
    EmptyResourceError,
    RemoteOperationError,
    UnauthorizedError,
)
from gitzone.domain.model import CountKind, PageProbeResult

from .schema import GitHubErrorResponse
from .translator import translate_commit, translate_probe, translate_repository, translate_user

if TYPE_CHECKING:
    from collections.abc import Callable

    from gitzone.config.github import GitHubConfig
    from gitzone.config.http_resilience import ResilienceConfig
    from gitzone.domain.model import CommitEntry, Repository, RepositoryDraft, User

log = getLogger(__name__)

REPOSITORY_PAGE_SIZE = 100
_EMPTY_STATUSES = frozenset({404, 409})


class GitHubClient:
    """Issues one REST call per logical operation and maps failures onto domain errors."""

    def __init__(
        self,
        *,
        config: GitHubConfig,
        token: str | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._http: ResilientClient | None = None
        self.token = token if token is not None else config.token

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def get_user(self) -> User:
        response = await self._request("GET", "/user")
        return _parse(translate_user, _json(response))

    async def list_repos(self) -> list[Repository]:
        response = await self._request(
            "GET",
            "/user/repos",
            params={"sort": "updated", "per_page": REPOSITORY_PAGE_SIZE},
        )
        return [_parse(translate_repository, item) for item in _json_list(response)]

    async def create_repo(self, draft: RepositoryDraft) -> Repository:
        response = await self._request(
            "POST",
            "/user/repos",
            json={"name": draft.name, "description": draft.description, "private": draft.private},
        )
        return _parse(translate_repository, _json(response))

    async def rename_repo(self, owner: str, name: str, new_name: str) -> Repository:
        response = await self._request("PATCH", f"/repos/{owner}/{name}", json={"name": new_name})
        return _parse(translate_repository, _json(response))

    async def delete_repo(self, owner: str, name: str) -> None:
        await self._request("DELETE", f"/repos/{owner}/{name}")

    async def probe_count(self, owner: str, name: str, kind: CountKind) -> PageProbeResult:
        try:
            response = await self._request(
                "GET", f"/repos/{owner}/{name}/{kind.value}", params={"per_page": 1}
            )
        except EmptyResourceError as exc:
            if exc.status_code == 409:
                return PageProbeResult(empty=True)
            raise
        return translate_probe(response.links)

    async def list_commits(
        self,
        owner: str,
        name: str,
        *,
        per_page: int = 10,
        page: int = 1,
    ) -> list[CommitEntry]:
        response = await self._request(
            "GET",
            f"/repos/{owner}/{name}/commits",
            params={"per_page": per_page, "page": page},
        )
        return [_parse(translate_commit, item) for item in _json_list(response)]

    def _session(self) -> ResilientClient:
        if self._http is None:
            self._http = self._client_factory(self._resilience)
        return self._http

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str | int] | None = None,
        json: object = None,
    ) -> httpx.Response:
        if not self.token:
            raise UnauthorizedError("No GitHub token configured")
        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            response = await self._session().request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.HTTPError as exc:
            raise RemoteOperationError(f"GitHub request failed: {exc}") from exc

        status = response.status_code
        if status == 401:
            log.warning("GitHub rejected the token (%s %s)", method, path)
            raise UnauthorizedError("Invalid or expired token", status_code=status)
        if status in _EMPTY_STATUSES:
            raise EmptyResourceError(_error_message(response), status_code=status)
        if response.is_error:
            raise RemoteOperationError(_error_message(response), status_code=status)
        return response


def _json(response: httpx.Response) -> object:
    try:
        return response.json()
    except ValueError as exc:
        raise RemoteOperationError("GitHub returned a non-JSON response") from exc


def _json_list(response: httpx.Response) -> list[object]:
    payload = _json(response)
    if not isinstance(payload, list):
        raise RemoteOperationError("Unexpected GitHub response payload")
    return payload


def _parse[T](translate: Callable[[object], T], payload: object) -> T:
    try:
        return translate(payload)
    except ValidationError as exc:
        raise RemoteOperationError(f"Unexpected GitHub payload: {exc}") from exc


def _error_message(response: httpx.Response) -> str:
    fallback = response.text or "GitHub API request failed"
    try:
        error = GitHubErrorResponse.model_validate_json(response.content)
    except ValidationError:
        return fallback
    return error.message or fallback
