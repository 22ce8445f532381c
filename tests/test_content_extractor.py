"""
Tests for HTML content extraction.

## Test Perspectives Table

| Case ID | Input / Precondition | Perspective (Equivalence / Boundary) | Expected Result | Notes |
|---------|---------------------|---------------------------------------|-----------------|-------|
| TC-EX-N-01 | Landing page with title/meta/headings/p | Equivalence – normal | All fields extracted, trimmed | - |
| TC-EX-N-02 | h3 before h1 in document | Equivalence – ordering | h1, h2, h3 priority order | - |
| TC-EX-N-03 | Nested markup in heading | Equivalence – normal | Text flattened | - |
| TC-EX-B-01 | 5 h1, 5 h2, 5 h3 | Boundary – per level | 3 per level | - |
| TC-EX-B-02 | 15 headings, 5 per level allowed | Boundary – total | Truncated to 10 | custom config |
| TC-EX-B-03 | Heading of 199 / 200 chars | Boundary – length | 199 kept, 200 dropped | - |
| TC-EX-B-04 | Paragraph of 20 / 21 chars | Boundary – length | 20 skipped, 21 kept | - |
| TC-EX-B-05 | Paragraphs totalling > 500 chars | Boundary – summary | Exactly 500 chars + "..." | - |
| TC-EX-B-06 | More than 5 paragraphs | Boundary – count | Only first 5 considered | - |
| TC-EX-A-01 | Empty string | Abnormal – empty | Empty record, no error | - |
| TC-EX-A-02 | Garbage markup | Abnormal – malformed | No error, title None | - |
| TC-EX-A-03 | Missing title/description | Abnormal – missing | None values | - |
| TC-EX-A-04 | Whitespace-only meta description | Abnormal – blank | description None | - |
| TC-EC-N-01 | Cached page with og:title | Equivalence – normal | og:title wins | - |
| TC-EC-N-02 | og:title is a wrapper title | Equivalence – fallback | twitter:title used | - |
| TC-EC-N-03 | Only a real <title> | Equivalence – fallback | <title> used | - |
| TC-EC-A-01 | Only wrapper titles | Abnormal – wrapper | "<domain> (from cache)" | - |
| TC-EC-A-02 | Empty cached HTML | Abnormal – empty | "<domain> (from cache)" | - |
| TC-DN-N-01 | www.acme.io | Equivalence – normal | "acme" | - |
| TC-DN-A-01 | URL without host | Abnormal – no host | "unknown" | - |
"""

import pytest

from roasting.extractor.content import ContentExtractor, domain_name_from_url
from roasting.utils.config import ExtractorConfig

pytestmark = pytest.mark.unit

WRAPPER_MARKERS = ["wayback machine", "google cache", "cache:"]


@pytest.fixture
def extractor() -> ContentExtractor:
    return ContentExtractor(ExtractorConfig())


def _page(body: str, head: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


# =============================================================================
# extract()
# =============================================================================


class TestExtract:
    """Tests for ContentExtractor.extract."""

    def test_extracts_all_fields(self, extractor: ContentExtractor, startup_html: str) -> None:
        """TC-EX-N-01: A normal landing page yields trimmed fields."""
        # Given: A server-rendered landing page
        # When: Extracting
        content = extractor.extract(startup_html, "https://acme.io/")

        # Then: All four prompt fields are populated
        assert content.source_url == "https://acme.io/"
        assert content.title == "Acme AI - Smarter Spreadsheets"
        assert content.description == "Acme turns your spreadsheets into AI-powered dashboards."
        assert content.headings == ("Spreadsheets, but smarter", "Why Acme", "Pricing", "Starter")
        assert content.body_summary == (
            "Acme connects to your existing spreadsheets in seconds. "
            "Our AI finds the trends your finance team keeps missing."
        )

    def test_heading_priority_order(self, extractor: ContentExtractor) -> None:
        """TC-EX-N-02: h1 headings come first regardless of document order."""
        html = _page("<h3>Third</h3><h2>Second</h2><h1>First</h1>")

        content = extractor.extract(html)

        assert content.headings == ("First", "Second", "Third")

    def test_nested_heading_markup(self, extractor: ContentExtractor) -> None:
        """TC-EX-N-03: Inline markup inside headings is flattened."""
        html = _page("<h1>  Ship <b>faster</b> </h1>")

        content = extractor.extract(html)

        assert content.headings == ("Ship faster",)

    def test_three_headings_per_level(self, extractor: ContentExtractor) -> None:
        """TC-EX-B-01: At most 3 headings are taken per level."""
        body = "".join(f"<{tag}>{tag} {i}</{tag}>" for tag in ("h1", "h2", "h3") for i in range(5))

        content = extractor.extract(_page(body))

        assert content.headings == (
            "h1 0", "h1 1", "h1 2",
            "h2 0", "h2 1", "h2 2",
            "h3 0", "h3 1", "h3 2",
        )

    def test_heading_list_capped_at_ten(self) -> None:
        """TC-EX-B-02: The combined list never exceeds 10 entries."""
        extractor = ContentExtractor(ExtractorConfig(max_per_heading_level=5))
        body = "".join(f"<{tag}>{tag} {i}</{tag}>" for tag in ("h1", "h2", "h3") for i in range(5))

        content = extractor.extract(_page(body))

        assert len(content.headings) == 10
        assert content.headings[-1] == "h2 4"

    def test_heading_length_boundary(self, extractor: ContentExtractor) -> None:
        """TC-EX-B-03: Headings of 200 chars or more are dropped."""
        kept = "k" * 199
        dropped = "d" * 200
        html = _page(f"<h1>{kept}</h1><h2>{dropped}</h2>")

        content = extractor.extract(html)

        assert content.headings == (kept,)

    def test_paragraph_length_boundary(self, extractor: ContentExtractor) -> None:
        """TC-EX-B-04: Paragraphs of 20 chars or fewer are skipped."""
        skipped = "s" * 20
        kept = "k" * 21
        html = _page(f"<p>{skipped}</p><p>{kept}</p>")

        content = extractor.extract(html)

        assert content.body_summary == kept

    def test_summary_truncated_to_500_plus_ellipsis(self, extractor: ContentExtractor) -> None:
        """TC-EX-B-05: Long summaries are cut to exactly 500 chars plus '...'."""
        paragraph = "a" * 150
        html = _page("".join(f"<p>{paragraph}</p>" for _ in range(5)))

        content = extractor.extract(html)

        assert len(content.body_summary) == 503
        assert content.body_summary.endswith("...")
        assert content.body_summary == ((paragraph + " ") * 4)[:500] + "..."

    def test_only_first_five_paragraphs(self, extractor: ContentExtractor) -> None:
        """TC-EX-B-06: The sixth paragraph is never read."""
        paragraphs = [f"Paragraph number {i} with enough text." for i in range(6)]
        html = _page("".join(f"<p>{p}</p>" for p in paragraphs))

        content = extractor.extract(html)

        assert "Paragraph number 4" in content.body_summary
        assert "Paragraph number 5" not in content.body_summary

    def test_empty_html(self, extractor: ContentExtractor) -> None:
        """TC-EX-A-01: Empty input gives an empty record."""
        content = extractor.extract("", "https://acme.io/")

        assert content.source_url == "https://acme.io/"
        assert content.title is None
        assert content.description is None
        assert content.headings == ()
        assert content.body_summary == ""

    def test_garbage_markup(self, extractor: ContentExtractor) -> None:
        """TC-EX-A-02: Malformed markup never raises."""
        content = extractor.extract("<<<%%% not <html at all </p></p>")

        assert content.title is None
        assert content.headings == ()

    def test_missing_title_and_description(self, extractor: ContentExtractor) -> None:
        """TC-EX-A-03: Absent fields are None."""
        content = extractor.extract(_page("<h1>Hello</h1>"))

        assert content.title is None
        assert content.description is None

    def test_blank_meta_description(self, extractor: ContentExtractor) -> None:
        """TC-EX-A-04: A whitespace-only description counts as absent."""
        html = _page("", head='<meta name="description" content="   ">')

        content = extractor.extract(html)

        assert content.description is None


# =============================================================================
# extract_cached()
# =============================================================================


class TestExtractCached:
    """Tests for cache-aware title resolution."""

    def test_og_title_preferred(self, extractor: ContentExtractor) -> None:
        """TC-EC-N-01: og:title wins over <title>."""
        head = (
            '<title>Wayback Machine</title>'
            '<meta property="og:title" content="Acme - Home">'
        )

        content = extractor.extract_cached(_page("", head), "https://acme.io/", WRAPPER_MARKERS)

        assert content.title == "Acme - Home"

    def test_twitter_title_when_og_is_wrapper(self, extractor: ContentExtractor) -> None:
        """TC-EC-N-02: A wrapper og:title is skipped."""
        head = (
            '<meta property="og:title" content="cache: acme.io">'
            '<meta name="twitter:title" content="Acme on Twitter">'
        )

        content = extractor.extract_cached(_page("", head), "https://acme.io/", WRAPPER_MARKERS)

        assert content.title == "Acme on Twitter"

    def test_plain_title_used(self, extractor: ContentExtractor) -> None:
        """TC-EC-N-03: A real <title> is used when no meta titles exist."""
        content = extractor.extract_cached(
            _page("<p>Cached paragraph with plenty of text.</p>", "<title>Acme</title>"),
            "https://acme.io/",
            WRAPPER_MARKERS,
        )

        assert content.title == "Acme"
        assert content.body_summary == "Cached paragraph with plenty of text."

    def test_only_wrapper_titles(self, extractor: ContentExtractor) -> None:
        """TC-EC-A-01: Domain-derived title when every candidate is a wrapper."""
        head = "<title>Wayback Machine</title>"

        content = extractor.extract_cached(
            _page("", head), "https://www.acme.io/pricing", WRAPPER_MARKERS
        )

        assert content.title == "acme (from cache)"

    def test_empty_cached_html(self, extractor: ContentExtractor) -> None:
        """TC-EC-A-02: Empty cache body still gets a title."""
        content = extractor.extract_cached("", "https://acme.io/", WRAPPER_MARKERS)

        assert content.title == "acme (from cache)"
        assert content.body_summary == ""


class TestDomainName:
    """Tests for domain_name_from_url."""

    def test_second_level_label(self) -> None:
        """TC-DN-N-01: The label before the TLD is returned."""
        assert domain_name_from_url("https://www.acme.io/pricing") == "acme"

    def test_no_host(self) -> None:
        """TC-DN-A-01: URLs without a host give 'unknown'."""
        assert domain_name_from_url("not a url") == "unknown"


class TestSummaryScenario:
    """Twenty 100-char paragraphs."""

    def test_twenty_paragraphs_of_100_chars(self, extractor: ContentExtractor) -> None:
        """TC-EX-B-05: The summary is exactly 500 chars plus the marker."""
        html = _page("".join(f"<p>{str(i % 10) * 100}</p>" for i in range(20)))

        content = extractor.extract(html)

        assert len(content.body_summary) == 500 + len("...")
        assert content.body_summary[:500].startswith("0" * 100 + " " + "1" * 100)
