"""
Content extraction for roasting.
Turns raw HTML into a PageContent record: title, meta description, headings
and a short body summary.
"""

from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from roasting.utils.config import ExtractorConfig, get_settings
from roasting.utils.logging import get_logger
from roasting.utils.schemas import PageContent

logger = get_logger(__name__)

HEADING_TAGS = ("h1", "h2", "h3")


def _text(element: Tag) -> str:
    return element.get_text(strip=False).strip()


def _meta_content(soup: BeautifulSoup, **attrs: str) -> str | None:
    meta = soup.find("meta", attrs=attrs)
    if not isinstance(meta, Tag):
        return None
    content = meta.get("content")
    if not isinstance(content, str):
        return None
    content = content.strip()
    return content or None


def domain_name_from_url(url: str) -> str:
    """Second-level label of the URL host ("acme" for www.acme.io)."""
    host = urlparse(url).hostname or ""
    if not host:
        return "unknown"
    parts = host.split(".")
    if len(parts) > 1:
        return parts[-2]
    return host


class ContentExtractor:
    """Extracts a PageContent from HTML.

    Never raises: broken or empty markup yields a record with empty fields.
    """

    def __init__(self, config: ExtractorConfig | None = None):
        self._config = config or get_settings().extractor

    def extract(self, html: str, source_url: str = "") -> PageContent:
        """Extract title, description, headings and body summary.

        Args:
            html: Raw HTML document.
            source_url: URL the HTML was fetched from.

        Returns:
            PageContent for the document.
        """
        soup = self._parse(html)
        if soup is None:
            return PageContent(source_url=source_url)

        return PageContent(
            source_url=source_url,
            title=self._extract_title(soup),
            description=_meta_content(soup, name="description"),
            headings=tuple(self._extract_headings(soup)),
            body_summary=self._extract_summary(soup),
        )

    def extract_cached(
        self,
        html: str,
        source_url: str,
        wrapper_markers: list[str] | None = None,
    ) -> PageContent:
        """Extract content from a page served by a public cache.

        Cache services wrap the original document in their own UI, so the
        title is resolved as og:title, then twitter:title, then <title>,
        skipping any candidate that looks like the wrapper's own title.
        When nothing survives, a title is derived from the domain.

        Args:
            html: Cached HTML.
            source_url: Original (not cache) URL.
            wrapper_markers: Lowercase substrings identifying wrapper titles.

        Returns:
            PageContent with the resolved title.
        """
        if wrapper_markers is None:
            wrapper_markers = get_settings().cache.wrapper_title_markers

        content = self.extract(html, source_url)
        soup = self._parse(html)

        candidates: list[str | None] = []
        if soup is not None:
            candidates = [
                _meta_content(soup, property="og:title"),
                _meta_content(soup, name="twitter:title"),
                content.title,
            ]

        title = next(
            (c for c in candidates if c and not self._is_wrapper_title(c, wrapper_markers)),
            None,
        )
        if title is None:
            title = f"{domain_name_from_url(source_url)} (from cache)"

        return content.model_copy(update={"title": title})

    @staticmethod
    def _is_wrapper_title(title: str, markers: list[str]) -> bool:
        lower = title.lower()
        return any(marker in lower for marker in markers)

    @staticmethod
    def _parse(html: str) -> BeautifulSoup | None:
        if not html:
            return None
        try:
            return BeautifulSoup(html, "html.parser")
        except Exception as e:
            # html.parser is lenient; this only guards against pathological input
            logger.debug("HTML parse failed", error=str(e))
            return None

    @staticmethod
    def _extract_title(soup: BeautifulSoup) -> str | None:
        title = soup.find("title")
        if not isinstance(title, Tag):
            return None
        text = _text(title)
        return text or None

    def _extract_headings(self, soup: BeautifulSoup) -> list[str]:
        cfg = self._config
        headings: list[str] = []
        for tag in HEADING_TAGS:
            for element in soup.find_all(tag, limit=cfg.max_per_heading_level):
                text = _text(element)
                if text and len(text) < cfg.max_heading_chars:
                    headings.append(text)
        return headings[: cfg.max_headings]

    def _extract_summary(self, soup: BeautifulSoup) -> str:
        cfg = self._config
        summary = ""
        for element in soup.find_all("p", limit=cfg.max_paragraphs):
            text = _text(element)
            if len(text) > cfg.min_paragraph_chars:
                summary += text + " "
            if len(summary) > cfg.max_summary_chars:
                break

        if len(summary) > cfg.max_summary_chars:
            return summary[: cfg.max_summary_chars] + cfg.ellipsis
        return summary.rstrip()
