"""
roasting crawler module.

Acquisition backends, challenge handling and the orchestrator that chains
them.
"""

from roasting.crawler.backend import AcquisitionBackend
from roasting.crawler.browser_fetcher import HeadlessBrowserFetcher
from roasting.crawler.browser_provider import BrowserHandle
from roasting.crawler.cache_fetcher import PublicCacheFetcher
from roasting.crawler.challenge_control import ChallengeControlLocator, ControlTarget
from roasting.crawler.challenge_detector import ChallengeDetector
from roasting.crawler.errors import FetchError, FetchErrorKind, InvalidInputError
from roasting.crawler.fallback import build_synthetic_fallback
from roasting.crawler.fetch_result import (
    AcquisitionReport,
    BackendCapability,
    HardFailure,
    RelativeCost,
    SoftFailure,
    Success,
)
from roasting.crawler.fetcher import (
    AcquisitionOrchestrator,
    BackendRole,
    BackendSlot,
    acquire_page,
    build_backends,
)
from roasting.crawler.http_fetcher import DirectHttpFetcher
from roasting.crawler.managed_solver import ManagedSolverClient

__all__ = [
    # Backends
    "AcquisitionBackend",
    "DirectHttpFetcher",
    "ManagedSolverClient",
    "HeadlessBrowserFetcher",
    "PublicCacheFetcher",
    "BrowserHandle",
    "ChallengeControlLocator",
    "ControlTarget",
    "ChallengeDetector",
    # Results and errors
    "AcquisitionReport",
    "BackendCapability",
    "RelativeCost",
    "Success",
    "SoftFailure",
    "HardFailure",
    "FetchError",
    "FetchErrorKind",
    "InvalidInputError",
    # Orchestration
    "AcquisitionOrchestrator",
    "BackendRole",
    "BackendSlot",
    "build_backends",
    "build_synthetic_fallback",
    "acquire_page",
]
