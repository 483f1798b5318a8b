from __future__ import annotations

import asyncio
import json
from collections.abc import Callable  # noqa: TC003
from datetime import UTC, datetime

import httpx
import pytest

from gitzone.adapters.github import GitHubClient, translate_commit, translate_probe
from gitzone.config.github import GitHubConfig
from gitzone.config.http_resilience import ResilienceConfig
from gitzone.domain.errors import EmptyResourceError, RemoteOperationError, UnauthorizedError
from gitzone.domain.model import CountKind, PageProbeResult, RepositoryDraft
from tests.helpers.http import make_client_factory

API = "https://api.github.test"


def _repo_payload(name: str, **extra: object) -> dict[str, object]:
    return {
        "name": name,
        "owner": {"login": "octo"},
        "updated_at": "2024-05-01T12:00:00Z",
        "private": False,
        "fork": False,
        "stargazers_count": 4,
        "forks_count": 1,
        "clone_url": f"https://github.com/octo/{name}.git",
        "html_url": f"https://github.com/octo/{name}",
        **extra,
    }


def _client(
    handler: Callable[[httpx.Request], httpx.Response], *, token: str | None = "secret"
) -> GitHubClient:
    config = GitHubConfig(resilience=ResilienceConfig(name="github", base_url=API), token=token)
    return GitHubClient(config=config, client_factory=make_client_factory(handler))


def test_list_repos_sends_token_and_translates() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[_repo_payload("alpha"), _repo_payload("beta")])

    repos = asyncio.run(_client(handler).list_repos())

    assert [repo.name for repo in repos] == ["alpha", "beta"]
    assert repos[0].updated_at == datetime(2024, 5, 1, 12, tzinfo=UTC)
    assert repos[0].stars == 4
    request = seen[0]
    assert request.headers["Authorization"] == "Bearer secret"
    assert request.url.path == "/user/repos"
    assert request.url.params["sort"] == "updated"


def test_probe_reads_last_page_from_link_header() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["per_page"] == "1"
        link = (
            f'<{API}/repos/octo/alpha/commits?per_page=1&page=2>; rel="next", '
            f'<{API}/repos/octo/alpha/commits?per_page=1&page=317>; rel="last"'
        )
        return httpx.Response(200, json=[{}], headers={"Link": link})

    probe = asyncio.run(_client(handler).probe_count("octo", "alpha", CountKind.COMMITS))

    assert probe == PageProbeResult(has_continuation=True, last_page=317)


def test_probe_without_link_header_has_no_continuation() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"name": "main"}])

    probe = asyncio.run(_client(handler).probe_count("octo", "alpha", CountKind.BRANCHES))

    assert probe == PageProbeResult()


def test_probe_of_empty_repository_is_the_empty_sentinel() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"message": "Git Repository is empty."})

    probe = asyncio.run(_client(handler).probe_count("octo", "alpha", CountKind.COMMITS))

    assert probe == PageProbeResult(empty=True)


def test_probe_of_missing_repository_raises() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Not Found"})

    with pytest.raises(EmptyResourceError) as excinfo:
        asyncio.run(_client(handler).probe_count("octo", "gone", CountKind.COMMITS))

    assert excinfo.value.status_code == 404


def test_unauthorized_response_raises() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Bad credentials"})

    with pytest.raises(UnauthorizedError):
        asyncio.run(_client(handler).get_user())


def test_missing_token_raises_without_a_request() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(UnauthorizedError):
        asyncio.run(_client(handler, token=None).list_repos())


def test_error_message_comes_from_the_body() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            422, json={"message": "Repository creation failed.", "errors": [{"code": "custom"}]}
        )

    with pytest.raises(RemoteOperationError, match="Repository creation failed"):
        asyncio.run(_client(handler).create_repo(RepositoryDraft(name="alpha")))


def test_create_and_rename_send_json_bodies() -> None:
    bodies: list[tuple[str, str, dict[str, object]]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        bodies.append((request.method, request.url.path, payload))
        return httpx.Response(201, json=_repo_payload(str(payload["name"])))

    client = _client(handler)
    created = asyncio.run(client.create_repo(RepositoryDraft(name="alpha", private=True)))
    renamed = asyncio.run(client.rename_repo("octo", "alpha", "omega"))

    assert created.name == "alpha"
    assert renamed.name == "omega"
    assert bodies == [
        ("POST", "/user/repos", {"name": "alpha", "description": "", "private": True}),
        ("PATCH", "/repos/octo/alpha", {"name": "omega"}),
    ]


def test_list_commits_passes_page_and_size() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["per_page"] == "5"
        assert request.url.params["page"] == "2"
        return httpx.Response(
            200,
            json=[
                {
                    "sha": "abc123",
                    "commit": {
                        "message": "Fix bug\n\nLong description",
                        "author": {"name": "Octo Cat", "date": "2024-05-01T10:00:00Z"},
                    },
                }
            ],
        )

    (commit,) = asyncio.run(_client(handler).list_commits("octo", "alpha", per_page=5, page=2))

    assert commit.summary == "Fix bug"
    assert commit.author == "Octo Cat"


def test_translate_commit_falls_back_to_committer_date_and_login() -> None:
    commit = translate_commit(
        {
            "sha": "def456",
            "commit": {"message": "Init", "committer": {"date": "2024-01-02T03:04:05+02:00"}},
            "author": {"login": "octo"},
        }
    )

    assert commit.author == "octo"
    assert commit.committed_at == datetime(2024, 1, 2, 1, 4, 5, tzinfo=UTC)


def test_translate_probe_without_last_link() -> None:
    links = {"next": {"url": f"{API}/repos/o/r/branches?page=2", "rel": "next"}}

    assert translate_probe(links) == PageProbeResult(has_continuation=True, last_page=None)
