"""Port for the source-hosting service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from gitzone.domain.model import (
        CommitEntry,
        CountKind,
        PageProbeResult,
        Repository,
        RepositoryDraft,
        User,
    )


@runtime_checkable
class RepoService(Protocol):
    """Async access to repositories of the authenticated user.

    Implementations raise ``UnauthorizedError`` when the token is rejected,
    ``EmptyResourceError`` for the empty-repository sentinel and
    ``RemoteOperationError`` for everything else.
    """

    async def get_user(self) -> User: ...

    async def list_repos(self) -> list[Repository]: ...

    async def create_repo(self, draft: RepositoryDraft) -> Repository: ...

    async def rename_repo(self, owner: str, name: str, new_name: str) -> Repository: ...

    async def delete_repo(self, owner: str, name: str) -> None: ...

    async def probe_count(self, owner: str, name: str, kind: CountKind) -> PageProbeResult: ...

    async def list_commits(
        self,
        owner: str,
        name: str,
        *,
        per_page: int = 10,
        page: int = 1,
    ) -> list[CommitEntry]: ...
