"""
Headless browser backend for roasting.

Renders the page in the shared Chromium process (see browser_provider) with
stealth countermeasures, then:
- challenge page: re-poll within an attempt and wall-clock budget, pressing
  the challenge control once from the second poll on
- SPA still loading: wait once more and re-read
- otherwise: return the HTML as rendered
"""

import asyncio
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from roasting.crawler.backend import AcquisitionBackend
from roasting.crawler.browser_provider import BrowserHandle
from roasting.crawler.challenge_control import ChallengeControlLocator
from roasting.crawler.challenge_detector import ChallengeDetector, detect_challenge_type
from roasting.crawler.errors import FetchError, FetchErrorKind
from roasting.crawler.fetch_result import BackendCapability, RelativeCost
from roasting.crawler.human_behavior import SleepFn
from roasting.crawler.stealth import StealthProfile, apply_stealth_to_context, jittered_viewport
from roasting.extractor.quality_analyzer import QualityClassifier
from roasting.utils.config import BrowserConfig, get_settings
from roasting.utils.logging import get_logger

if TYPE_CHECKING:
    from playwright.async_api import Browser, Page

logger = get_logger(__name__)


class HeadlessBrowserFetcher(AcquisitionBackend):
    """Fetches pages through local browser automation.

    Available only when ``browser.enabled`` is set and Playwright is
    installed. ``VISIBLE_BROWSER`` switches the shared browser to headful
    mode without changing this logic.
    """

    _capability = BackendCapability(
        name="headless_browser",
        requires_external_service=False,
        supports_js_execution=True,
        relative_cost=RelativeCost.HIGH,
    )

    def __init__(
        self,
        handle: BrowserHandle,
        config: BrowserConfig | None = None,
        detector: ChallengeDetector | None = None,
        quality: QualityClassifier | None = None,
        locator: ChallengeControlLocator | None = None,
        sleep: SleepFn | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        super().__init__()
        self._handle = handle
        self._config = config or get_settings().browser
        self._detector = detector or ChallengeDetector()
        self._quality = quality or QualityClassifier()
        self._locator = locator or ChallengeControlLocator()
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or time.monotonic

    @property
    def capability(self) -> BackendCapability:
        return self._capability

    def is_available(self) -> bool:
        return self._config.enabled and self._handle.is_available()

    async def fetch(self, url: str) -> str:
        """Render ``url`` in a fresh browser context.

        Raises:
            FetchError: timeout on navigation timeout, blocked when a
                challenge never clears, network for anything else.
        """
        if not self.is_available():
            raise FetchError(FetchErrorKind.NETWORK, "local browser automation unavailable")

        logger.info("Trying headless browser", url=url[:80])
        try:
            return await self._handle.run(lambda browser: self._render(browser, url))
        except FetchError as e:
            logger.warning("Headless fetch failed", url=url[:80], kind=e.kind.value, error=e.message)
            raise
        except Exception as e:
            logger.warning("Headless browser error", url=url[:80], error=str(e))
            raise FetchError(FetchErrorKind.NETWORK, f"headless browser error: {e}") from e

    async def _render(self, browser: "Browser", url: str) -> str:
        cfg = self._config
        context = await browser.new_context(
            user_agent=cfg.user_agent,
            viewport=jittered_viewport(
                cfg.viewport_width,
                cfg.viewport_height,
                cfg.viewport_width_jitter,
                cfg.viewport_height_jitter,
            ),
            locale=cfg.locale,
            extra_http_headers={"Accept-Language": ",".join(cfg.languages)},
        )
        try:
            await apply_stealth_to_context(context, StealthProfile(languages=tuple(cfg.languages)))
            page = await context.new_page()
            return await self._load(page, url)
        finally:
            try:
                await context.close()
            except Exception as e:
                logger.debug("Browser context close failed", error=str(e))

    async def _load(self, page: "Page", url: str) -> str:
        cfg = self._config
        await self._navigate(page, url)
        await self._sleep(cfg.settle_delay)
        html = await page.content()

        if self._detector.is_active_challenge(html):
            logger.info(
                "Challenge page in browser",
                url=url[:80],
                challenge_type=detect_challenge_type(html),
            )
            return await self._wait_out_challenge(page, url)

        if self._quality.is_spa_loading(html):
            logger.info("SPA still loading, waiting once more", url=url[:80])
            await self._sleep(cfg.spa_extra_wait)
            html = await page.content()

        logger.info("Headless fetch success", url=url[:80], content_length=len(html))
        return html

    async def _navigate(self, page: "Page", url: str) -> None:
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError

        try:
            await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self._config.navigation_timeout * 1000,
            )
        except PlaywrightTimeoutError as e:
            raise FetchError(FetchErrorKind.TIMEOUT, f"navigation timed out: {e}") from e

    async def _wait_out_challenge(self, page: "Page", url: str) -> str:
        """Poll until the challenge clears, pressing its control once."""
        cfg = self._config
        deadline = self._clock() + cfg.challenge_timeout
        clicked = False

        for attempt in range(1, cfg.max_challenge_attempts + 1):
            if self._clock() >= deadline:
                break

            if not clicked and attempt >= cfg.click_after_attempt:
                await self._locator.locate_and_activate(page)
                clicked = True
                await self._sleep(cfg.post_click_wait)
            else:
                await self._sleep(cfg.poll_interval)

            html = await page.content()
            if not self._detector.is_active_challenge(html):
                logger.info("Challenge cleared", url=url[:80], attempt=attempt, clicked=clicked)
                return html

            logger.debug("Challenge still present", url=url[:80], attempt=attempt)

        raise FetchError(FetchErrorKind.BLOCKED, "cloudflare challenge not resolved in browser")
