"""
Browser stealth utilities for roasting.

Countermeasures applied to every headless browser context before navigation:
- automation flags (navigator.webdriver, driver globals) hidden
- realistic plugins, languages, hardware and platform values
- WebGL vendor/renderer strings of a common laptop GPU
- per-request viewport jitter
"""

import json
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from roasting.utils.logging import get_logger

if TYPE_CHECKING:
    from playwright.async_api import BrowserContext

logger = get_logger(__name__)


# =============================================================================
# Stealth JavaScript Injection
# =============================================================================

_STEALTH_JS_TEMPLATE = """
(() => {
    const hide = (obj, prop, value) => {
        try {
            Object.defineProperty(obj, prop, { get: () => value, configurable: true });
        } catch (e) {}
    };

    hide(navigator, 'webdriver', undefined);

    for (const prop of [
        '__webdriver_script_fn', '__driver_evaluate', '__webdriver_evaluate',
        '__selenium_evaluate', '__driver_unwrapped', '__webdriver_unwrapped',
        '__selenium_unwrapped'
    ]) {
        try { delete navigator[prop]; } catch (e) {}
    }

    hide(navigator, 'plugins', (() => {
        const plugins = [
            { name: 'Chrome PDF Plugin', filename: 'internal-pdf-viewer' },
            { name: 'Chrome PDF Viewer', filename: 'mhjfbmdgcfjbbpaeojofohoefgiehjai' },
            { name: 'Native Client', filename: 'internal-nacl-plugin' }
        ];
        plugins.item = (i) => plugins[i];
        plugins.namedItem = (name) => plugins.find(p => p.name === name);
        plugins.refresh = () => {};
        return plugins;
    })());

    hide(navigator, 'languages', __LANGUAGES__);
    hide(navigator, 'hardwareConcurrency', __HARDWARE_CONCURRENCY__);
    hide(navigator, 'deviceMemory', __DEVICE_MEMORY__);
    hide(navigator, 'maxTouchPoints', 0);
    hide(navigator, 'platform', __PLATFORM__);
    hide(navigator, 'vendor', 'Google Inc.');

    window.chrome = window.chrome || {};
    window.chrome.runtime = window.chrome.runtime || {};

    const originalQuery = navigator.permissions?.query?.bind(navigator.permissions);
    if (originalQuery) {
        navigator.permissions.query = (parameters) => (
            parameters.name === 'notifications'
                ? Promise.resolve({ state: Notification.permission })
                : originalQuery(parameters)
        );
    }

    const patchWebGL = (proto) => {
        if (!proto) return;
        const getParameter = proto.getParameter;
        proto.getParameter = function(parameter) {
            if (parameter === 37445) return __WEBGL_VENDOR__;
            if (parameter === 37446) return __WEBGL_RENDERER__;
            return getParameter.call(this, parameter);
        };
    };
    patchWebGL(window.WebGLRenderingContext && WebGLRenderingContext.prototype);
    patchWebGL(window.WebGL2RenderingContext && WebGL2RenderingContext.prototype);

    for (const key of Object.keys(window)) {
        if (key.startsWith('cdc_') || key.startsWith('$cdc_')) {
            try { delete window[key]; } catch (e) {}
        }
    }
    delete window.__playwright;
    delete window.__pwInitScripts;
    delete window.callPhantom;
    delete window._phantom;
})();
"""


@dataclass(frozen=True)
class StealthProfile:
    """Values reported to page scripts."""

    languages: tuple[str, ...] = ("en-US", "en", "id-ID", "id")
    hardware_concurrency: int = 8
    device_memory: int = 8
    platform: str = "MacIntel"
    webgl_vendor: str = "Intel Inc."
    webgl_renderer: str = "Intel Iris OpenGL Engine"


def build_stealth_script(profile: StealthProfile | None = None) -> str:
    """Render the init script for a profile."""
    profile = profile or StealthProfile()
    replacements = {
        "__LANGUAGES__": json.dumps(list(profile.languages)),
        "__HARDWARE_CONCURRENCY__": str(int(profile.hardware_concurrency)),
        "__DEVICE_MEMORY__": str(int(profile.device_memory)),
        "__PLATFORM__": json.dumps(profile.platform),
        "__WEBGL_VENDOR__": json.dumps(profile.webgl_vendor),
        "__WEBGL_RENDERER__": json.dumps(profile.webgl_renderer),
    }
    script = _STEALTH_JS_TEMPLATE
    for placeholder, value in replacements.items():
        script = script.replace(placeholder, value)
    return script


# =============================================================================
# Viewport Jitter
# =============================================================================


def jittered_viewport(
    base_width: int,
    base_height: int,
    max_width_jitter: int,
    max_height_jitter: int,
    rng: random.Random | None = None,
) -> dict[str, int]:
    """Viewport dimensions with narrow random jitter.

    Returns:
        Dict with 'width' and 'height' keys, as Playwright expects.
    """
    rng = rng or random
    return {
        "width": base_width + rng.randint(-max_width_jitter, max_width_jitter),
        "height": base_height + rng.randint(-max_height_jitter, max_height_jitter),
    }


# =============================================================================
# Stealth Application
# =============================================================================


async def apply_stealth_to_context(
    context: "BrowserContext",
    profile: StealthProfile | None = None,
) -> None:
    """Apply stealth measures to a Playwright browser context.

    Must run before the first navigation; every page opened in the context
    gets the init script.

    Args:
        context: Playwright browser context.
        profile: Values to report. Defaults to StealthProfile().
    """
    await context.add_init_script(build_stealth_script(profile))
    logger.debug("Stealth script applied to context")


def get_stealth_args(window_width: int = 1920, window_height: int = 1080) -> list[str]:
    """Get Chromium launch arguments for stealth.

    Returns:
        List of command-line arguments.
    """
    return [
        "--disable-blink-features=AutomationControlled",
        "--disable-infobars",
        "--disable-dev-shm-usage",
        "--disable-extensions",
        "--disable-background-networking",
        "--disable-sync",
        "--disable-translate",
        "--no-first-run",
        "--no-default-browser-check",
        f"--window-size={window_width},{window_height}",
    ]
