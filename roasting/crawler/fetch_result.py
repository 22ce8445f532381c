"""Result types for a single acquisition attempt."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from roasting.crawler.errors import FetchErrorKind
from roasting.utils.schemas import PageContent

SYNTHETIC_BACKEND = "synthetic"


class RelativeCost(str, Enum):
    FREE = "free"
    LOW = "low"
    HIGH = "high"


@dataclass(frozen=True)
class BackendCapability:
    """Static description of a backend, used for logging and ordering only."""

    name: str
    requires_external_service: bool = False
    supports_js_execution: bool = False
    relative_cost: RelativeCost = RelativeCost.FREE


@dataclass(frozen=True)
class Success:
    content: PageContent
    backend: str


@dataclass(frozen=True)
class SoftFailure:
    """The backend failed; the pipeline moves on to the next one."""

    reason: str
    backend: str
    kind: FetchErrorKind | None = None


@dataclass(frozen=True)
class HardFailure:
    """The pipeline must stop. Only produced for invalid input."""

    reason: str
    backend: str = "validation"


AcquisitionAttemptResult = Union[Success, SoftFailure, HardFailure]


@dataclass
class AcquisitionReport:
    """What happened during one acquisition, in order.

    ``resolved_by`` is the backend name whose content was returned, or
    ``"synthetic"`` when the URL-derived fallback was used.
    """

    url: str
    content: PageContent | None = None
    resolved_by: str | None = None
    attempts: list[AcquisitionAttemptResult] = field(default_factory=list)

    @property
    def is_synthetic(self) -> bool:
        return self.resolved_by == SYNTHETIC_BACKEND

    def record(self, attempt: AcquisitionAttemptResult) -> None:
        self.attempts.append(attempt)

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "resolved_by": self.resolved_by,
            "attempts": [
                {
                    "backend": a.backend,
                    "outcome": type(a).__name__,
                    "reason": getattr(a, "reason", None),
                    "kind": a.kind.value if getattr(a, "kind", None) else None,
                }
                for a in self.attempts
            ],
            "content": self.content.to_prompt_dict() if self.content else None,
        }
