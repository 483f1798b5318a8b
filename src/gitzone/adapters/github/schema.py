"""Minimal Pydantic models for the GitHub REST API."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict


class GitHubBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class GitHubAccount(GitHubBaseModel):
    login: str


class GitHubUser(GitHubAccount):
    name: str | None = None
    avatar_url: str | None = None


class GitHubRepository(GitHubBaseModel):
    name: str
    owner: GitHubAccount
    updated_at: datetime
    private: bool = False
    fork: bool = False
    stargazers_count: int = 0
    forks_count: int = 0
    language: str | None = None
    description: str | None = None
    clone_url: str | None = None
    html_url: str | None = None


class GitHubSignature(GitHubBaseModel):
    name: str | None = None
    email: str | None = None
    date: datetime | None = None


class GitHubCommitDetail(GitHubBaseModel):
    message: str = ""
    author: GitHubSignature | None = None
    committer: GitHubSignature | None = None


class GitHubCommit(GitHubBaseModel):
    sha: str
    commit: GitHubCommitDetail
    author: GitHubAccount | None = None
    html_url: str | None = None


class GitHubErrorResponse(GitHubBaseModel):
    message: str = ""
    documentation_url: str | None = None
