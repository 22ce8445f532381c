"""
Public page-cache backend for roasting.

Last real-content resort before the synthetic fallback: asks a third-party
cache (Wayback Machine by default) for its copy of the page.
"""

import re
from urllib.parse import quote

from roasting.crawler.backend import AcquisitionBackend
from roasting.crawler.errors import FetchError, FetchErrorKind
from roasting.crawler.fetch_result import BackendCapability, RelativeCost
from roasting.crawler.http_fetcher import build_browser_headers
from roasting.utils.config import CacheConfig, get_settings
from roasting.utils.logging import get_logger

logger = get_logger(__name__)

WAYBACK_RAW_TEMPLATE = "https://web.archive.org/web/2id_/{raw_url}"
GOOGLE_CACHE_TEMPLATE = "https://webcache.googleusercontent.com/search?q=cache:{url}"

_TOOLBAR_PATTERNS = [
    re.compile(
        r"<!-- BEGIN WAYBACK TOOLBAR INSERT -->.*?<!-- END WAYBACK TOOLBAR INSERT -->",
        re.DOTALL | re.IGNORECASE,
    ),
    re.compile(r"<script[^>]*>.*?wm\.wombat\.js.*?</script>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<script[^>]*>.*?wb-ext-header\.js.*?</script>", re.DOTALL | re.IGNORECASE),
]


def build_cache_url(template: str, url: str) -> str:
    """Fill a cache URL template.

    ``{url}`` receives the percent-encoded original URL, ``{raw_url}`` the
    URL as is.
    """
    return template.format(url=quote(url, safe=""), raw_url=url)


def strip_cache_toolbar(html: str) -> str:
    """Remove archive toolbar blocks injected around the original page."""
    for pattern in _TOOLBAR_PATTERNS:
        html = pattern.sub("", html)
    return html


class PublicCacheFetcher(AcquisitionBackend):
    """Fetches a cached copy of the page through curl_cffi."""

    uses_cache_title_resolution = True

    _capability = BackendCapability(
        name="public_cache",
        requires_external_service=True,
        supports_js_execution=False,
        relative_cost=RelativeCost.FREE,
    )

    def __init__(self, config: CacheConfig | None = None, user_agent: str | None = None) -> None:
        super().__init__()
        settings = get_settings()
        self._config = config or settings.cache
        self._user_agent = user_agent or settings.direct.user_agents[0]
        self._accept_language = settings.direct.accept_language

    @property
    def capability(self) -> BackendCapability:
        return self._capability

    def is_available(self) -> bool:
        return self._config.enabled

    async def fetch(self, url: str) -> str:
        """Fetch the cached copy of ``url``.

        Raises:
            FetchError: timeout, or network on transport errors, non-2xx
                responses and missing cached copies.
        """
        from curl_cffi.requests import AsyncSession
        from curl_cffi.requests.exceptions import RequestException, Timeout

        cfg = self._config
        cache_url = build_cache_url(cfg.url_template, url)
        logger.info("Trying public cache", url=url[:80], cache_url=cache_url[:120])

        try:
            async with AsyncSession() as session:
                response = await session.get(
                    cache_url,
                    headers=build_browser_headers(self._user_agent, self._accept_language),
                    impersonate="chrome",
                    # (connect, read): each network leg gets the same budget
                    timeout=(cfg.timeout, cfg.timeout),
                    allow_redirects=True,
                )
                status = response.status_code
                body = response.text
        except Timeout as e:
            logger.warning("Public cache timeout", url=url[:80], error=str(e))
            raise FetchError(FetchErrorKind.TIMEOUT, "public cache timed out")
        except RequestException as e:
            logger.warning("Public cache error", url=url[:80], error=str(e))
            raise FetchError(FetchErrorKind.NETWORK, f"public cache unreachable: {e}")

        if not 200 <= status < 300:
            logger.info("Public cache bad status", url=url[:80], status=status)
            raise FetchError(FetchErrorKind.NETWORK, "public cache returned an error", status=status)

        lower = body.lower()
        if len(body) < cfg.min_body_bytes or any(m in lower for m in cfg.no_cache_markers):
            logger.info("No cached copy available", url=url[:80], length=len(body))
            raise FetchError(FetchErrorKind.NETWORK, "no cached version available", status=status)

        html = strip_cache_toolbar(body)
        logger.info("Public cache success", url=url[:80], content_length=len(html))
        return html
