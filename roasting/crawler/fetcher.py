"""
Page acquisition orchestrator for roasting.

Walks a fixed, declaratively built list of backends until one yields usable
content:

1. managed solver (trusted, only when configured): returned as is
2. direct HTTP: returned unless the content is minimal
3. headless browser, then public cache: first non-minimal result wins
4. otherwise: synthetic content derived from the URL

Backends run strictly one after another. Every backend failure is logged and
turned into a soft failure; only an invalid URL aborts the pipeline.
"""

from dataclasses import dataclass
from enum import Enum

from roasting.crawler.backend import AcquisitionBackend
from roasting.crawler.browser_fetcher import HeadlessBrowserFetcher
from roasting.crawler.browser_provider import BrowserHandle
from roasting.crawler.cache_fetcher import PublicCacheFetcher
from roasting.crawler.challenge_detector import ChallengeDetector
from roasting.crawler.errors import FetchError, FetchErrorKind, InvalidInputError
from roasting.crawler.fallback import build_synthetic_fallback, indicates_protection
from roasting.crawler.fetch_result import (
    SYNTHETIC_BACKEND,
    AcquisitionAttemptResult,
    AcquisitionReport,
    HardFailure,
    SoftFailure,
    Success,
)
from roasting.crawler.http_fetcher import DirectHttpFetcher
from roasting.crawler.managed_solver import ManagedSolverClient
from roasting.extractor.content import ContentExtractor
from roasting.extractor.quality_analyzer import QualityClassifier
from roasting.utils.config import Settings, get_settings
from roasting.utils.logging import (
    LogContext,
    ensure_logging_configured,
    get_logger,
    new_acquisition_id,
)
from roasting.utils.schemas import PageContent
from roasting.utils.url_policy import validate_url

logger = get_logger(__name__)

MINIMAL_CONTENT_REASON = "minimal content (page is empty or rendered by JavaScript)"


class BackendRole(str, Enum):
    """How the orchestrator treats a backend's result."""

    TRUSTED = "trusted"  # returned without a quality check
    PRIMARY = "primary"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class BackendSlot:
    backend: AcquisitionBackend
    role: BackendRole

    @property
    def name(self) -> str:
        return self.backend.name


def build_backends(
    settings: Settings | None = None,
    browser_handle: BrowserHandle | None = None,
) -> list[BackendSlot]:
    """Build the ordered backend list from configuration.

    Backends that cannot run here (no solver endpoint, browser automation
    disabled or not installed, cache disabled) are left out.

    Args:
        settings: Settings to build from. Uses get_settings() if None.
        browser_handle: Shared browser. Without it the headless backend is
            left out.

    Returns:
        Ordered list of BackendSlot.
    """
    settings = settings or get_settings()
    detector = ChallengeDetector(settings.markers.challenge)
    quality = QualityClassifier(settings.markers.spa, settings.quality)

    slots: list[BackendSlot] = []

    solver = ManagedSolverClient(settings.solver)
    if solver.is_available():
        slots.append(BackendSlot(solver, BackendRole.TRUSTED))

    slots.append(BackendSlot(DirectHttpFetcher(settings.direct, detector), BackendRole.PRIMARY))

    if browser_handle is not None:
        headless = HeadlessBrowserFetcher(browser_handle, settings.browser, detector, quality)
        if headless.is_available():
            slots.append(BackendSlot(headless, BackendRole.FALLBACK))

    cache = PublicCacheFetcher(settings.cache)
    if cache.is_available():
        slots.append(BackendSlot(cache, BackendRole.FALLBACK))

    logger.info(
        "Acquisition backends configured",
        backends=[f"{s.name}:{s.role.value}" for s in slots],
    )
    return slots


class AcquisitionOrchestrator:
    """Runs the backend cascade for one URL at a time.

    Instances are safe to share between concurrent acquisitions: the only
    shared mutable state lives in the injected BrowserHandle.
    """

    def __init__(
        self,
        slots: list[BackendSlot],
        extractor: ContentExtractor | None = None,
        quality: QualityClassifier | None = None,
        owned_handle: BrowserHandle | None = None,
        wrapper_title_markers: list[str] | None = None,
    ) -> None:
        self._slots = list(slots)
        self._extractor = extractor or ContentExtractor()
        self._quality = quality or QualityClassifier()
        self._owned_handle = owned_handle
        # None means the cache markers of the global settings
        self._wrapper_title_markers = wrapper_title_markers

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        browser_handle: BrowserHandle | None = None,
    ) -> "AcquisitionOrchestrator":
        """Build an orchestrator from configuration.

        When browser automation is enabled and no handle is given, a handle
        is created and owned (closed by close()).
        """
        settings = settings or get_settings()
        owned = None
        if (
            browser_handle is None
            and settings.browser.enabled
            and BrowserHandle.playwright_installed()
        ):
            browser_handle = owned = BrowserHandle(settings.browser)

        return cls(
            build_backends(settings, browser_handle),
            extractor=ContentExtractor(settings.extractor),
            quality=QualityClassifier(settings.markers.spa, settings.quality),
            owned_handle=owned,
            wrapper_title_markers=settings.cache.wrapper_title_markers,
        )

    @property
    def slots(self) -> list[BackendSlot]:
        return list(self._slots)

    async def acquire(self, url: str) -> PageContent:
        """Acquire PageContent for ``url``.

        Raises:
            InvalidInputError: If the URL is structurally invalid. No other
                error reaches the caller.
        """
        report = await self.acquire_with_report(url)
        if report.content is None:
            raise RuntimeError(f"Acquisition of {report.url} finished without content")
        return report.content

    async def acquire_with_report(self, url: str) -> AcquisitionReport:
        """Like acquire(), but also return every attempt made."""
        report = AcquisitionReport(url=url)

        try:
            normalized = validate_url(url)
        except InvalidInputError as e:
            report.record(HardFailure(str(e)))
            logger.warning("Rejected URL", url=str(url)[:80], reason=str(e))
            raise

        report.url = normalized
        with LogContext(acquisition_id=new_acquisition_id(), url=normalized[:80]):
            for slot in self._slots:
                logger.info("Trying backend", backend=slot.name, role=slot.role.value)
                attempt = await self._attempt(slot, normalized)

                if isinstance(attempt, HardFailure):
                    report.record(attempt)
                    logger.warning("Aborting acquisition", backend=slot.name, reason=attempt.reason)
                    raise InvalidInputError(attempt.reason)

                if isinstance(attempt, SoftFailure):
                    report.record(attempt)
                    continue

                if slot.role is BackendRole.TRUSTED or not self._quality.is_minimal(attempt.content):
                    report.record(attempt)
                    report.content = attempt.content
                    report.resolved_by = slot.name
                    logger.info("Acquisition resolved", backend=slot.name)
                    return report

                logger.info("Minimal content, trying next backend", backend=slot.name)
                report.record(SoftFailure(MINIMAL_CONTENT_REASON, slot.name))

            reason = self._synthetic_reason(report.attempts)
            logger.info("All backends exhausted, using URL-derived content", reason=reason)
            report.content = build_synthetic_fallback(normalized, reason)
            report.resolved_by = SYNTHETIC_BACKEND
            return report

    async def _attempt(self, slot: BackendSlot, url: str) -> AcquisitionAttemptResult:
        backend = slot.backend
        try:
            html = await backend.fetch(url)
        except InvalidInputError as e:
            return HardFailure(str(e), backend.name)
        except FetchError as e:
            return SoftFailure(str(e), backend.name, e.kind)
        except Exception as e:
            logger.warning(
                "Backend raised unexpected error",
                backend=backend.name,
                error=str(e),
                exc_info=True,
            )
            return SoftFailure(f"network: {e}", backend.name, FetchErrorKind.NETWORK)

        if backend.uses_cache_title_resolution:
            content = self._extractor.extract_cached(html, url, self._wrapper_title_markers)
        else:
            content = self._extractor.extract(html, url)
        return Success(content, backend.name)

    def _synthetic_reason(self, attempts: list[AcquisitionAttemptResult]) -> str | None:
        """Pick the reason shown in synthetic content.

        A bot-protection reason from any backend wins; otherwise the primary
        backend's reason; otherwise the last one.
        """
        failures = [a for a in attempts if isinstance(a, SoftFailure)]
        if not failures:
            return None

        for failure in failures:
            if indicates_protection(failure.reason):
                return failure.reason

        primary = {s.name for s in self._slots if s.role is BackendRole.PRIMARY}
        for failure in failures:
            if failure.backend in primary:
                return failure.reason

        return failures[-1].reason

    async def close(self) -> None:
        """Close all backends, and the browser handle if owned."""
        for slot in self._slots:
            try:
                await slot.backend.close()
            except Exception as e:
                logger.error("Failed to close backend", backend=slot.name, error=str(e))

        if self._owned_handle is not None:
            await self._owned_handle.close()
            self._owned_handle = None


# ============================================================================
# Global Instance
# ============================================================================

_orchestrator: AcquisitionOrchestrator | None = None


def get_orchestrator() -> AcquisitionOrchestrator:
    """Get or create the process-wide orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        ensure_logging_configured()
        _orchestrator = AcquisitionOrchestrator.from_settings()
    return _orchestrator


async def acquire_page(url: str) -> PageContent:
    """Acquire PageContent for ``url`` with the process-wide orchestrator.

    Raises:
        InvalidInputError: If the URL is structurally invalid.
    """
    return await get_orchestrator().acquire(url)


async def close_orchestrator() -> None:
    """Close the process-wide orchestrator."""
    global _orchestrator
    if _orchestrator is not None:
        await _orchestrator.close()
        _orchestrator = None


def reset_orchestrator() -> None:
    """Reset the global orchestrator without closing. For testing only."""
    global _orchestrator
    _orchestrator = None
