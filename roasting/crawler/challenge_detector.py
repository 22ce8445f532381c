"""Challenge page detection for acquisition backends.

Marker lists come from settings (``markers.challenge``) so new provider
phrasings can be added without touching control flow.
"""

import re

from roasting.utils.config import get_settings

_H1_PATTERN = re.compile(r"<h1[^>]*>(.*?)</h1>", re.IGNORECASE | re.DOTALL)
_TAG_PATTERN = re.compile(r"<[^>]+>")

# Structural hints that the real application rendered behind the challenge.
_REAL_CONTENT_HINTS = ("<main", 'id="root"', 'id="app"', "<nav", "<article")
_REAL_CONTENT_MIN_BYTES = 5000


class ChallengeDetector:
    """Detects bot-verification interstitials.

    Challenge markers are distinct from SPA-loading markers: a challenge page
    is worth re-polling in the same browser session, a plain network failure
    is not.
    """

    def __init__(self, markers: list[str] | None = None):
        if markers is None:
            markers = get_settings().markers.challenge
        self._markers = tuple(m.lower() for m in markers if m)

    @property
    def markers(self) -> tuple[str, ...]:
        return self._markers

    def is_challenge_page(self, html: str) -> bool:
        """Case-insensitive substring match against the marker list.

        Args:
            html: Page HTML or text.

        Returns:
            True if any challenge marker is present.
        """
        if not html:
            return False
        lower = html.lower()
        return any(marker in lower for marker in self._markers)

    def has_real_content(self, html: str) -> bool:
        """Check whether the page carries a rendered application.

        Some sites keep challenge scripts around after the check passes. A
        page with a real heading or app root and enough markup is treated as
        solved.
        """
        if len(html) <= _REAL_CONTENT_MIN_BYTES:
            return False

        lower = html.lower()
        h1 = _H1_PATTERN.search(html)
        if h1 is not None:
            h1_text = _TAG_PATTERN.sub("", h1.group(1)).strip().lower()
            if h1_text and "just a moment" not in h1_text:
                return True

        return any(hint in lower for hint in _REAL_CONTENT_HINTS)

    def is_active_challenge(self, html: str) -> bool:
        """A challenge marker is present and no real content has rendered."""
        return self.is_challenge_page(html) and not self.has_real_content(html)


def detect_challenge_type(content: str) -> str | None:
    """Detect the specific type of challenge from page content.

    Used for log context only.

    Args:
        content: Page HTML content.

    Returns:
        Challenge type string, or None when no known widget is present.
    """
    content_lower = content.lower()

    if (
        'class="cf-turnstile"' in content_lower
        or "challenges.cloudflare.com/turnstile" in content_lower
    ):
        return "turnstile"

    if 'src="https://hcaptcha.com' in content_lower or 'class="h-captcha"' in content_lower:
        return "hcaptcha"

    if 'class="g-recaptcha"' in content_lower or "grecaptcha.execute" in content_lower:
        return "recaptcha"

    cloudflare_indicators = [
        "cf-browser-verification",
        "_cf_chl_opt",
        "cf-chl-bypass",
        "challenge-platform",
        "checking your browser",
        "just a moment",
    ]
    if any(ind in content_lower for ind in cloudflare_indicators):
        return "cloudflare"

    return None

