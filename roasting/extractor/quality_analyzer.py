"""
Minimal-content detection for roasting.

Decides whether extracted content is real or whether the fetch most likely hit
a JavaScript shell or a challenge wall. Cheap heuristic, no JS execution:

1. headings and a substantial body summary -> usable
2. no headings, no body, no meaningful description -> minimal
3. body summary contains an SPA loading marker -> minimal
4. otherwise minimal only if both headings and body are missing
"""

import re

from bs4 import BeautifulSoup

from roasting.utils.config import QualityConfig, get_settings
from roasting.utils.schemas import PageContent

_NON_WORD = re.compile(r"[^\w\s]", re.UNICODE)


class QualityClassifier:
    """Classifies PageContent as minimal or usable.

    Stateless apart from its configuration; the same input always yields the
    same answer.
    """

    def __init__(
        self,
        spa_markers: list[str] | None = None,
        config: QualityConfig | None = None,
    ):
        settings = get_settings() if spa_markers is None or config is None else None
        if spa_markers is None:
            spa_markers = settings.markers.spa
        self._spa_markers = tuple(m.lower() for m in spa_markers)
        self._config = config or settings.quality

    def is_minimal(self, content: PageContent) -> bool:
        """Return True when the content looks like a failed scrape."""
        cfg = self._config
        summary = content.body_summary

        has_headings = bool(content.headings)
        has_body = len(summary.strip()) > cfg.min_body_chars
        has_description = (
            content.description is not None
            and len(content.description) > cfg.min_description_chars
        )

        if has_headings and has_body:
            return False

        if not has_headings and not has_body and not has_description:
            return True

        if self.contains_spa_marker(summary):
            return True

        return not has_headings and not has_body

    def contains_spa_marker(self, text: str) -> bool:
        lower = text.lower()
        return any(marker in lower for marker in self._spa_markers)

    def is_spa_loading(self, html: str) -> bool:
        """Raw-HTML check for a client-rendered page that has not rendered yet.

        True when an SPA marker appears anywhere in the document, or when the
        <body> holds fewer words than ``spa_min_body_words``.
        """
        if self.contains_spa_marker(html):
            return True

        soup = BeautifulSoup(html or "", "html.parser")
        body = soup.find("body")
        if body is None:
            return False
        words = _NON_WORD.sub("", body.get_text(" ")).split()
        return len(words) < self._config.spa_min_body_words
