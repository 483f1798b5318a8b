"""Failure taxonomy shared by the service ports and the domain components."""

from __future__ import annotations

from collections.abc import Sequence


class RemoteServiceError(RuntimeError):
    """Base class for failures reported by a remote service or its transport."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UnauthorizedError(RemoteServiceError):
    """The credential used for the call was rejected."""


class EmptyResourceError(RemoteServiceError):
    """The resource does not exist or has no content yet (e.g. an empty repository)."""


class RemoteOperationError(RemoteServiceError):
    """Any other remote failure, carrying the structured error messages if present."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        errors: Sequence[str] = (),
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.errors = tuple(errors)


class InputValidationError(ValueError):
    """Raised before any network call when required input is missing or malformed."""
