"""Error types raised by acquisition backends and the URL policy."""

from enum import Enum


class FetchErrorKind(str, Enum):
    """Coarse classification of a failed fetch."""

    NETWORK = "network"
    FORBIDDEN = "forbidden"
    TIMEOUT = "timeout"
    BLOCKED = "blocked"


class FetchError(Exception):
    """A backend could not produce HTML for a URL.

    Never escapes the orchestrator: it is turned into a soft failure there.
    """

    def __init__(self, kind: FetchErrorKind, message: str, status: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.kind.value}: {self.message} (HTTP {self.status})"
        return f"{self.kind.value}: {self.message}"


class InvalidInputError(ValueError):
    """The URL was rejected before any network activity."""
