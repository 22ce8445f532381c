"""
Challenge control location and activation.

Finds the clickable part of a bot-verification widget on a live page and
presses it with a human-like pointer. Search order:

1. iframe served by a known challenge-widget domain
2. container element carrying the widget class or a site key
3. generic challenge form containers
4. interactive element near the page centre
5. point derived from the viewport size
6. fixed coordinates
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from roasting.crawler.human_behavior import HumanPointer
from roasting.utils.logging import get_logger

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = get_logger(__name__)

WIDGET_FRAME_HINTS = ("challenges.cloudflare.com", "turnstile")
WIDGET_CONTAINER_SELECTORS = (".cf-turnstile", "[class*='cf-turnstile']", "div[data-sitekey]")
CHALLENGE_FORM_SELECTORS = ("#challenge-form", "#challenge-stage", ".challenge-form")

# The checkbox sits near the left edge of the widget.
CHECKBOX_X_OFFSET = 28.0
FALLBACK_POINT = (200.0, 400.0)

_FIND_CENTER_INTERACTIVE_JS = """
() => {
    const main = document.querySelector('main') || document.body;
    if (!main) return null;
    const rect = main.getBoundingClientRect();
    const cx = rect.x + rect.width / 2;
    const cy = rect.y + rect.height / 2;
    for (let dy = -100; dy <= 100; dy += 50) {
        const el = document.elementFromPoint(cx, cy + dy);
        if (!el) continue;
        const role = el.getAttribute('role');
        if (el.tagName === 'INPUT' || el.tagName === 'BUTTON' ||
            role === 'checkbox' || role === 'button') {
            const r = el.getBoundingClientRect();
            return { x: r.x + r.width / 2, y: r.y + r.height / 2 };
        }
    }
    return null;
}
"""

_VIEWPORT_SIZE_JS = "() => ({ width: window.innerWidth, height: window.innerHeight })"


@dataclass(frozen=True)
class ControlTarget:
    """Where to click, and which search step found it."""

    x: float
    y: float
    kind: str


class ChallengeControlLocator:
    """Locate-and-activate capability for challenge widgets.

    The headless backend only talks to this class, so the polling logic can
    be exercised against fake pages.
    """

    def __init__(self, pointer: HumanPointer | None = None):
        self._pointer = pointer or HumanPointer()

    async def locate(self, page: "Page") -> ControlTarget:
        """Find the most likely challenge control. Always returns a target."""
        for step in (
            self._find_widget_frame,
            self._find_widget_container,
            self._find_challenge_form,
            self._find_center_interactive,
            self._viewport_point,
        ):
            try:
                target = await step(page)
            except Exception as e:
                logger.debug("Challenge control lookup step failed", step=step.__name__, error=str(e))
                continue
            if target is not None:
                return target

        return ControlTarget(*FALLBACK_POINT, kind="fixed-fallback")

    async def activate(self, page: "Page", target: ControlTarget) -> None:
        """Press the control with a human-like pointer movement."""
        logger.info(
            "Activating challenge control",
            kind=target.kind,
            x=round(target.x),
            y=round(target.y),
        )
        await self._pointer.click(page, target.x, target.y)

    async def locate_and_activate(self, page: "Page") -> ControlTarget:
        target = await self.locate(page)
        await self.activate(page, target)
        return target

    # ------------------------------------------------------------------
    # Search steps
    # ------------------------------------------------------------------

    async def _find_widget_frame(self, page: "Page") -> ControlTarget | None:
        for frame in await page.query_selector_all("iframe"):
            parts = []
            for name in ("src", "id", "class"):
                parts.append((await frame.get_attribute(name)) or "")
            attrs = " ".join(parts).lower()
            if not any(hint in attrs for hint in WIDGET_FRAME_HINTS):
                continue
            box = await frame.bounding_box()
            if box:
                return _checkbox_target(box, "widget-iframe")
        return None

    async def _find_widget_container(self, page: "Page") -> ControlTarget | None:
        for selector in WIDGET_CONTAINER_SELECTORS:
            element = await page.query_selector(selector)
            if element is None:
                continue
            box = await element.bounding_box()
            if box:
                return _checkbox_target(box, "widget-container")
        return None

    async def _find_challenge_form(self, page: "Page") -> ControlTarget | None:
        for selector in CHALLENGE_FORM_SELECTORS:
            element = await page.query_selector(selector)
            if element is None:
                continue
            box = await element.bounding_box()
            if box:
                return _center_target(box, "challenge-form")
        return None

    async def _find_center_interactive(self, page: "Page") -> ControlTarget | None:
        point = await page.evaluate(_FIND_CENTER_INTERACTIVE_JS)
        if not point:
            return None
        return ControlTarget(float(point["x"]), float(point["y"]), kind="center-interactive")

    async def _viewport_point(self, page: "Page") -> ControlTarget | None:
        size = page.viewport_size or await page.evaluate(_VIEWPORT_SIZE_JS)
        if not size or not size.get("width") or not size.get("height"):
            return None
        return ControlTarget(
            size["width"] / 2 - 100.0,
            size["height"] / 2,
            kind="viewport-estimate",
        )


def _checkbox_target(box: dict[str, Any], kind: str) -> ControlTarget:
    return ControlTarget(box["x"] + CHECKBOX_X_OFFSET, box["y"] + box["height"] / 2, kind=kind)


def _center_target(box: dict[str, Any], kind: str) -> ControlTarget:
    return ControlTarget(box["x"] + box["width"] / 2, box["y"] + box["height"] / 2, kind=kind)
