"""
Acquisition backend abstraction for roasting.

Every way of getting HTML for a URL (plain HTTP, external solver, local
browser, public cache) implements the same small interface so the
orchestrator can walk an ordered list of them.
"""

from abc import ABC, abstractmethod

from roasting.crawler.fetch_result import BackendCapability
from roasting.utils.logging import get_logger

logger = get_logger(__name__)


class AcquisitionBackend(ABC):
    """
    Abstract base class for acquisition backends.

    Subclasses implement ``capability`` and ``fetch``. ``fetch`` returns raw
    HTML or raises ``FetchError``; any other exception escaping it is treated
    by the orchestrator as a network failure.
    """

    # Cache backends serve pages wrapped in the provider's UI and need the
    # cache-aware title resolution of ContentExtractor.extract_cached.
    uses_cache_title_resolution: bool = False

    def __init__(self) -> None:
        self._is_closed = False

    @property
    @abstractmethod
    def capability(self) -> BackendCapability:
        """Static description of this backend."""

    @property
    def name(self) -> str:
        return self.capability.name

    @property
    def is_closed(self) -> bool:
        return self._is_closed

    def is_available(self) -> bool:
        """Whether the backend can run in this environment."""
        return True

    @abstractmethod
    async def fetch(self, url: str) -> str:
        """Fetch raw HTML for ``url``.

        Raises:
            FetchError: On any network, status, timeout or blocking failure.
        """

    async def close(self) -> None:
        """Release backend resources."""
        self._is_closed = True
        logger.debug("Acquisition backend closed", backend=self.name)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
