"""
Process-wide Playwright browser handle for roasting.

All browser work runs on a dedicated worker thread with its own event loop,
so page waits and process control never stall the request loop. The handle
owns one Chromium process:

- the create-or-reuse decision is serialized by a lock on the worker loop
- a health check runs before each reuse; a dead browser is relaunched
- each request gets its own isolated context, so page loads run concurrently
"""

import asyncio
import importlib.util
import threading
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from roasting.crawler.stealth import get_stealth_args
from roasting.utils.config import BrowserConfig, get_settings
from roasting.utils.logging import get_logger

if TYPE_CHECKING:
    from playwright.async_api import Browser

logger = get_logger(__name__)

T = TypeVar("T")

Launcher = Callable[[BrowserConfig], Awaitable[tuple[Any, "Browser"]]]


async def launch_chromium(config: BrowserConfig) -> tuple[Any, "Browser"]:
    """Start Playwright and launch Chromium with stealth arguments.

    Returns:
        Tuple of (playwright, browser).
    """
    try:
        from playwright.async_api import async_playwright
    except ImportError as e:
        raise RuntimeError("Playwright not installed") from e

    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(
            headless=config.headless,
            args=get_stealth_args(config.viewport_width, config.viewport_height),
        )
    except Exception:
        await playwright.stop()
        raise

    logger.info("Chromium launched", headless=config.headless, version=browser.version)
    return playwright, browser


class BrowserHandle:
    """Lock-guarded owner of the shared browser process.

    Created once by the application and injected into the headless backend.

    Example:
        handle = BrowserHandle()
        html = await handle.run(lambda browser: render(browser, url))
        await handle.close()
    """

    def __init__(
        self,
        config: BrowserConfig | None = None,
        launcher: Launcher | None = None,
    ) -> None:
        self._config = config or get_settings().browser
        self._launcher = launcher or launch_chromium
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._thread_lock = threading.Lock()
        # Created on the worker loop
        self._browser_lock: asyncio.Lock | None = None
        self._playwright: Any = None
        self._browser: Browser | None = None
        self._launch_count = 0
        self._is_closed = False

    @property
    def launch_count(self) -> int:
        return self._launch_count

    @property
    def is_closed(self) -> bool:
        return self._is_closed

    @staticmethod
    def playwright_installed() -> bool:
        return importlib.util.find_spec("playwright") is not None

    def is_available(self) -> bool:
        return not self._is_closed and self.playwright_installed()

    # ------------------------------------------------------------------
    # Worker thread
    # ------------------------------------------------------------------

    def _ensure_worker(self) -> asyncio.AbstractEventLoop:
        with self._thread_lock:
            if self._is_closed:
                raise RuntimeError("Browser handle is closed")
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=self._run_worker,
                    args=(loop,),
                    name="roasting-browser",
                    daemon=True,
                )
                thread.start()
                self._loop = loop
                self._thread = thread
                logger.debug("Browser worker thread started")
            return self._loop

    @staticmethod
    def _run_worker(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_forever()
        finally:
            loop.close()

    async def run(self, fn: Callable[["Browser"], Awaitable[T]]) -> T:
        """Run ``fn(browser)`` on the worker loop and await its result.

        Args:
            fn: Coroutine function receiving a healthy browser.

        Returns:
            Whatever ``fn`` returns. Exceptions propagate to the caller.
        """
        loop = self._ensure_worker()
        future = asyncio.run_coroutine_threadsafe(self._run_on_worker(fn), loop)
        return await asyncio.wrap_future(future)

    async def _run_on_worker(self, fn: Callable[["Browser"], Awaitable[T]]) -> T:
        browser = await self._acquire_browser()
        return await fn(browser)

    # ------------------------------------------------------------------
    # Browser lifecycle (worker loop only)
    # ------------------------------------------------------------------

    async def _acquire_browser(self) -> "Browser":
        if self._browser_lock is None:
            self._browser_lock = asyncio.Lock()

        async with self._browser_lock:
            if self._browser is not None:
                if await self._is_healthy(self._browser):
                    return self._browser
                logger.warning("Browser failed health check, relaunching")
                await self._dispose()

            self._playwright, self._browser = await self._launcher(self._config)
            self._launch_count += 1
            return self._browser

    async def _is_healthy(self, browser: "Browser") -> bool:
        """Health check: connected and answering a CDP round trip."""
        if not browser.is_connected():
            return False
        try:
            session = await browser.new_browser_cdp_session()
            try:
                await session.send("Browser.getVersion")
            finally:
                await session.detach()
        except Exception as e:
            logger.debug("Browser health check failed", error=str(e))
            return False
        return True

    async def _dispose(self) -> None:
        browser, playwright = self._browser, self._playwright
        self._browser = None
        self._playwright = None

        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.debug("Browser close failed", error=str(e))
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.debug("Playwright stop failed", error=str(e))

    async def close(self) -> None:
        """Close the browser and stop the worker thread."""
        with self._thread_lock:
            if self._is_closed:
                return
            self._is_closed = True
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None

        if loop is None:
            return

        future = asyncio.run_coroutine_threadsafe(self._dispose(), loop)
        await asyncio.wrap_future(future)
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            await asyncio.get_running_loop().run_in_executor(None, thread.join, 5.0)
        logger.info("Browser handle closed", launches=self._launch_count)

