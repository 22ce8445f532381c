"""
roasting: website content acquisition for startup roasts.

Turns a startup URL into a PageContent record (title, description, headings,
body summary), falling back across several acquisition backends and, when
nothing works, synthesising content from the URL itself.
"""

__version__ = "0.1.0"

from roasting.crawler.errors import InvalidInputError
from roasting.crawler.fetcher import (
    AcquisitionOrchestrator,
    acquire_page,
    close_orchestrator,
    get_orchestrator,
)
from roasting.utils.schemas import PageContent

__all__ = [
    "AcquisitionOrchestrator",
    "InvalidInputError",
    "PageContent",
    "acquire_page",
    "close_orchestrator",
    "get_orchestrator",
]
