"""Result types for mutations whose outcome the caller must inspect."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import RemoteServiceError


@dataclass(frozen=True, slots=True)
class Confirmed[T]:
    """The remote service accepted the mutation; ``value`` is the confirmed state."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Failed:
    """The mutation was rejected before or by the remote service."""

    error: RemoteServiceError | ValueError

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return str(self.error)


type MutationResult[T] = Confirmed[T] | Failed
