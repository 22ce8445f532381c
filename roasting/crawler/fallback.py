"""
URL-derived synthetic content.

When no backend produced real content, the roast is still written, from what
the URL alone gives away: the name, subdomains, path, query and TLD.
"""

from urllib.parse import parse_qsl, urlparse

from roasting.utils.schemas import PageContent

PROTECTION_HINTS = ("challenge", "cloudflare", "blocked", "forbidden", "bot protection")

TLD_ROASTS = {
    "io": "went with .io to look tech-savvy, the domain is the only technical thing here",
    "co": "settled for .co because someone already owns the .com, literally second choice",
    "id": "at least it is a local .id domain, a little patriotism never hurts",
    "xyz": "picked .xyz because it is the cheapest domain on the planet",
    "app": "uses .app to look modern, whether an actual app exists is another question",
    "dev": "chose .dev, developer wannabe detected",
    "ai": "slapped on .ai so investors think it is an AI startup, probably a ChatGPT wrapper",
    "tech": "went with .tech, as generic as the startup idea",
}
DEFAULT_TLD_ROAST = "a perfectly ordinary domain, nothing to see here"

MAX_PATH_HINTS = 3
MAX_QUERY_HINTS = 3
MAX_SUMMARY_CHARS = 500


def indicates_protection(reason: str | None) -> bool:
    """Whether a failure reason points at bot protection rather than an outage."""
    if not reason:
        return False
    lower = reason.lower()
    return any(hint in lower for hint in PROTECTION_HINTS)


def tld_roast(tld: str) -> str:
    return TLD_ROASTS.get(tld.lower(), DEFAULT_TLD_ROAST)


def build_synthetic_fallback(url: str, reason: str | None = None) -> PageContent:
    """Build a PageContent purely from URL structure.

    Args:
        url: The (validated) URL that could not be fetched.
        reason: Why real content was unavailable, if known.

    Returns:
        PageContent with non-empty title, headings and body summary.
    """
    parsed = urlparse(url)
    host = (parsed.hostname or "unknown").lower()

    labels = host.split(".")
    main_name = labels[-2] if len(labels) > 1 else host
    subdomain = ".".join(labels[:-2]) if len(labels) > 2 else None
    tld = labels[-1] if len(labels) > 1 else "com"

    path_hints = [s for s in parsed.path.split("/") if len(s) > 2][:MAX_PATH_HINTS]
    query_hints = [
        f"{k}={v}" if v else k
        for k, v in parse_qsl(parsed.query, keep_blank_values=True)
        if k
    ][:MAX_QUERY_HINTS]

    protected = indicates_protection(reason)
    reason = reason or "site unreachable"
    roast = tld_roast(tld)

    if protected:
        note = "this website hides behind bot protection, must have something to hide"
    else:
        note = "this website could not be reached"

    description_parts = [f"Startup at domain {host}"]
    if subdomain:
        description_parts.append(f"subdomain: {subdomain}")
    if path_hints:
        description_parts.append(f"path: /{'/'.join(path_hints)}")
    if query_hints:
        description_parts.append(f"params: {', '.join(query_hints)}")
    description_parts.append(f"({note})")

    headings = [f"Domain: {host}", f"TLD Analysis: {roast}"]
    if subdomain:
        headings.append(f"Subdomain: {subdomain} (why is this URL so complicated)")

    path_text = parsed.path if path_hints else "/"
    name_verdict = "way too long" if len(main_name) > 10 else "trying hard to be short"
    body_summary = (
        f"The website of {main_name} could not be scraped ({reason}). "
        f"URL analysis: domain={host}, TLD=.{tld} ({roast}), "
        f"path={path_text}, subdomain={subdomain or 'none'}. "
        f"The roast can still cover the name, which is {name_verdict}, "
        f"the URL structure and their choice of TLD."
    )
    if len(body_summary) > MAX_SUMMARY_CHARS:
        body_summary = body_summary[:MAX_SUMMARY_CHARS] + "..."

    label = "Bot Protected" if protected else "Unreachable"
    return PageContent(
        source_url=url,
        title=f"{main_name.upper()} - [{label}]",
        description=", ".join(description_parts),
        headings=tuple(headings),
        body_summary=body_summary,
    )
