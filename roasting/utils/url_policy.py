"""
Input URL policy.

The URL is the only user input that reaches the scraper, and its text later
ends up in an LLM prompt. It is rejected before any network activity when it
is malformed, points at a local address, or carries prompt-injection phrases.
"""

from urllib.parse import urlparse, urlunparse

from roasting.crawler.errors import InvalidInputError
from roasting.utils.config import ValidationConfig, get_settings
from roasting.utils.logging import get_logger

logger = get_logger(__name__)


def contains_injection_attempt(text: str, keywords: list[str]) -> bool:
    lower = text.lower()
    return any(keyword in lower for keyword in keywords)


def validate_url(url: str, config: ValidationConfig | None = None) -> str:
    """Validate and normalize a user-supplied URL.

    Args:
        url: Raw URL text.
        config: Validation rules. Uses settings if None.

    Returns:
        Normalized URL (scheme and host lowercased, empty path as "/").

    Raises:
        InvalidInputError: If the URL is empty, too long, contains a blocked
            keyword, is not http(s), has no host, or targets a local host.
    """
    cfg = config or get_settings().validation

    if not isinstance(url, str):
        raise InvalidInputError("URL must be a string")

    url = url.strip()
    if not url:
        raise InvalidInputError("URL must not be empty")

    if len(url) > cfg.max_url_length:
        raise InvalidInputError(f"URL is longer than {cfg.max_url_length} characters")

    if contains_injection_attempt(url, cfg.blocked_keywords):
        logger.warning("Potential prompt injection in URL", url=url[:80])
        raise InvalidInputError("URL contains disallowed text")

    try:
        parsed = urlparse(url)
        # Accessing port validates it
        parsed.port
    except ValueError as e:
        raise InvalidInputError(f"Malformed URL: {e}") from e

    scheme = parsed.scheme.lower()
    if scheme not in cfg.allowed_schemes:
        raise InvalidInputError("Only HTTP and HTTPS URLs are allowed")

    host = (parsed.hostname or "").lower()
    if not host:
        raise InvalidInputError("URL must have a host")

    if host in cfg.blocked_hosts or any(host.startswith(p) for p in cfg.blocked_host_prefixes):
        raise InvalidInputError("Local URLs are not allowed")

    return urlunparse(
        (
            scheme,
            parsed.netloc.lower(),
            parsed.path or "/",
            parsed.params,
            parsed.query,
            parsed.fragment,
        )
    )
