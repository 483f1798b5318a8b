"""Source-hosting entities: repositories, their stats and commits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True, order=True)
class RepositoryRef:
    """Identity of a repository: the owner login and the repository name."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, value: str) -> RepositoryRef:
        owner, sep, name = value.strip().partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(f"Expected OWNER/NAME, got: {value!r}")
        return cls(owner=owner, name=name)

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True, slots=True)
class Repository:
    owner: str
    name: str
    updated_at: datetime
    private: bool = False
    fork: bool = False
    stars: int = 0
    forks: int = 0
    language: str | None = None
    description: str | None = None
    clone_url: str | None = None
    html_url: str | None = None

    @property
    def ref(self) -> RepositoryRef:
        return RepositoryRef(owner=self.owner, name=self.name)

    @property
    def full_name(self) -> str:
        return self.ref.full_name


@dataclass(frozen=True, slots=True)
class RepositoryDraft:
    """Values for a repository that does not exist yet."""

    name: str
    description: str = ""
    private: bool = False


@dataclass(frozen=True, slots=True)
class StatsEntry:
    """Page-derived branch and commit counts; approximate by construction."""

    branches: int
    commits: int


@dataclass(frozen=True, slots=True)
class PageProbeResult:
    """What a single-item page request revealed about a paginated collection.

    ``empty`` marks the empty-repository sentinel. ``has_continuation`` is true when
    the response carried pagination links; ``last_page`` is the page number of the
    ``last`` link when one was present.
    """

    empty: bool = False
    has_continuation: bool = False
    last_page: int | None = None


@dataclass(frozen=True, slots=True)
class CommitEntry:
    sha: str
    message: str
    author: str
    committed_at: datetime
    html_url: str | None = None
    repository: RepositoryRef | None = None

    @property
    def summary(self) -> str:
        return self.message.splitlines()[0] if self.message else ""


@dataclass(frozen=True, slots=True)
class User:
    login: str
    name: str | None = None
    avatar_url: str | None = None
