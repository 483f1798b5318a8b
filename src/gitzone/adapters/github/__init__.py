"""GitHub adapter package."""

from __future__ import annotations

from .client import GitHubClient
from .schema import GitHubCommit, GitHubRepository, GitHubUser
from .translator import translate_commit, translate_probe, translate_repository, translate_user

__all__ = [
    "GitHubClient",
    "GitHubCommit",
    "GitHubRepository",
    "GitHubUser",
    "translate_commit",
    "translate_probe",
    "translate_repository",
    "translate_user",
]
