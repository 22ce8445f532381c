"""Direct HTTP backend for the acquisition pipeline."""

import random

from roasting.crawler.backend import AcquisitionBackend
from roasting.crawler.challenge_detector import ChallengeDetector, detect_challenge_type
from roasting.crawler.errors import FetchError, FetchErrorKind
from roasting.crawler.fetch_result import BackendCapability, RelativeCost
from roasting.utils.config import DirectFetchConfig, get_settings
from roasting.utils.logging import get_logger

logger = get_logger(__name__)

BLOCKED_STATUSES = frozenset({403, 503})
FORBIDDEN_STATUSES = frozenset({401, 451})


def build_browser_headers(user_agent: str, accept_language: str) -> dict[str, str]:
    """Headers of a top-level, user-initiated document navigation."""
    return {
        "User-Agent": user_agent,
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/avif,image/webp,*/*;q=0.8"
        ),
        "Accept-Language": accept_language,
        "Accept-Encoding": "gzip, deflate, br",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Sec-Fetch-User": "?1",
        "Cache-Control": "max-age=0",
    }


class DirectHttpFetcher(AcquisitionBackend):
    """HTTP client fetcher using curl_cffi.

    Features:
    - Chrome impersonation for TLS fingerprint consistency
    - User-agent rotated per request from a small desktop pool
    - Bounded redirects and a short timeout
    - Challenge pages and tiny bodies reported as blocked
    """

    _capability = BackendCapability(
        name="direct",
        requires_external_service=False,
        supports_js_execution=False,
        relative_cost=RelativeCost.FREE,
    )

    def __init__(
        self,
        config: DirectFetchConfig | None = None,
        detector: ChallengeDetector | None = None,
    ) -> None:
        super().__init__()
        self._config = config or get_settings().direct
        self._detector = detector or ChallengeDetector()

    @property
    def capability(self) -> BackendCapability:
        return self._capability

    def _pick_user_agent(self) -> str:
        return random.choice(self._config.user_agents)

    async def fetch(self, url: str) -> str:
        """Fetch URL with a plain GET.

        Args:
            url: URL to fetch.

        Returns:
            Response body as text.

        Raises:
            FetchError: blocked (403/503, tiny body, challenge page),
                forbidden (401/451), timeout, or network.
        """
        from curl_cffi.requests import AsyncSession
        from curl_cffi.requests.exceptions import RequestException, Timeout

        cfg = self._config
        headers = build_browser_headers(self._pick_user_agent(), cfg.accept_language)

        try:
            async with AsyncSession() as session:
                response = await session.get(
                    url,
                    headers=headers,
                    impersonate=cfg.impersonate,
                    timeout=cfg.request_timeout,
                    allow_redirects=True,
                    max_redirects=cfg.max_redirects,
                )
                status = response.status_code
                body = response.text
        except Timeout as e:
            logger.warning("Direct fetch timeout", url=url[:80], error=str(e))
            raise FetchError(FetchErrorKind.TIMEOUT, f"timed out after {cfg.request_timeout}s")
        except RequestException as e:
            logger.warning("Direct fetch error", url=url[:80], error=str(e))
            raise FetchError(FetchErrorKind.NETWORK, str(e))

        if status in BLOCKED_STATUSES:
            logger.info("Direct fetch blocked", url=url[:80], status=status)
            raise FetchError(FetchErrorKind.BLOCKED, "blocked by server", status=status)

        if status in FORBIDDEN_STATUSES:
            logger.info("Direct fetch forbidden", url=url[:80], status=status)
            raise FetchError(FetchErrorKind.FORBIDDEN, "access denied", status=status)

        if not 200 <= status < 300:
            logger.info("Direct fetch bad status", url=url[:80], status=status)
            raise FetchError(FetchErrorKind.NETWORK, "unexpected status", status=status)

        if len(body) < cfg.min_body_bytes:
            logger.info("Direct fetch body too small", url=url[:80], length=len(body))
            raise FetchError(
                FetchErrorKind.BLOCKED,
                f"response too small ({len(body)} bytes), likely blocked",
                status=status,
            )

        if self._detector.is_challenge_page(body):
            logger.info(
                "Challenge detected",
                url=url[:80],
                challenge_type=detect_challenge_type(body),
            )
            raise FetchError(
                FetchErrorKind.BLOCKED, "cloudflare challenge detected", status=status
            )

        logger.info(
            "Direct fetch success",
            url=url[:80],
            status=status,
            content_length=len(body),
        )
        return body
