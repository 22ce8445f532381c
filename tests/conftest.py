"""
Pytest fixtures and configuration for roasting tests.

=============================================================================
Test Classification
=============================================================================

- @pytest.mark.unit: Single class/function, no external dependencies
  - All network and browser access mocked
  - DEFAULT: Tests without marker are auto-classified as unit

- @pytest.mark.integration: Several components wired together
  (orchestrator + real extractor/classifier), backends still faked

- @pytest.mark.e2e: Real Chromium and real network access
  - DEFAULT EXCLUDED: Must use `pytest -m e2e` to run

=============================================================================
Mock Strategy
=============================================================================

- curl_cffi: patch `curl_cffi.requests.AsyncSession` (imported lazily)
- httpx: `httpx.MockTransport` injected into ManagedSolverClient
- Playwright: fake browser/context/page objects, injected sleep and clock
"""

import os
from pathlib import Path

import pytest

# Set test environment before importing anything else
os.environ["ROASTING_CONFIG_DIR"] = str(Path(__file__).parent.parent / "config")
os.environ["ROASTING_GENERAL__LOG_LEVEL"] = "DEBUG"

# Deployment toggles must not leak into tests
for _var in ("FLARESOLVERR_URL", "VISIBLE_BROWSER", "ROASTING_HEADLESS_ENABLED"):
    os.environ.pop(_var, None)


# =============================================================================
# Pytest Hooks for Test Classification
# =============================================================================


def pytest_configure(config):
    """Register custom markers for test classification."""
    config.addinivalue_line("markers", "unit: Unit tests with no external dependencies")
    config.addinivalue_line(
        "markers", "integration: Integration tests with mocked external dependencies"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests requiring Chromium and network (excluded by default)"
    )


def pytest_collection_modifyitems(config, items):
    """Auto-apply the unit marker and skip e2e unless explicitly selected."""
    markexpr = config.getoption("-m", default="") or ""
    skip_e2e = pytest.mark.skip(reason="E2E tests skipped by default. Run with: pytest -m e2e")

    for item in items:
        has_classification = any(
            marker.name in ("unit", "integration", "e2e") for marker in item.iter_markers()
        )
        if not has_classification:
            item.add_marker(pytest.mark.unit)

        if "e2e" not in markexpr and any(m.name == "e2e" for m in item.iter_markers()):
            item.add_marker(skip_e2e)


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Rebuild settings for every test so env overrides do not leak."""
    from roasting.utils.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_global_orchestrator():
    """Reset the process-wide orchestrator between tests."""
    from roasting.crawler.fetcher import reset_orchestrator

    yield

    reset_orchestrator()


@pytest.fixture
def mock_settings():
    """Settings with every optional backend switched off."""
    from roasting.utils.config import (
        BrowserConfig,
        CacheConfig,
        GeneralConfig,
        ManagedSolverConfig,
        Settings,
    )

    return Settings(
        general=GeneralConfig(log_level="DEBUG"),
        solver=ManagedSolverConfig(endpoint=None),
        browser=BrowserConfig(enabled=False),
        cache=CacheConfig(enabled=False),
    )


# =============================================================================
# HTML Fixtures
# =============================================================================


@pytest.fixture
def startup_html() -> str:
    """A plain, fully server-rendered startup landing page."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>  Acme AI - Smarter Spreadsheets  </title>
        <meta name="description" content="  Acme turns your spreadsheets into AI-powered dashboards.  ">
    </head>
    <body>
        <h1>Spreadsheets, but smarter</h1>
        <h2>Why Acme</h2>
        <h2>Pricing</h2>
        <h3>Starter</h3>
        <p>Short one.</p>
        <p>Acme connects to your existing spreadsheets in seconds.</p>
        <p>Our AI finds the trends your finance team keeps missing.</p>
    </body>
    </html>
    """


@pytest.fixture
def cloudflare_challenge_html() -> str:
    """Cloudflare interstitial page HTML."""
    return """
    <!DOCTYPE html>
    <html>
    <head><title>Just a moment...</title></head>
    <body>
        <div id="cf-browser-verification">
            <p>Checking your browser before accessing example.com.</p>
            <p>Please wait while we verify your browser.</p>
        </div>
        <script>var _cf_chl_opt = {};</script>
    </body>
    </html>
    """


@pytest.fixture
def spa_shell_html() -> str:
    """Client-rendered shell before hydration."""
    return """
    <!DOCTYPE html>
    <html>
    <head><title>Acme</title></head>
    <body>
        <div id="root">Loading...</div>
        <script id="__NEXT_DATA__" type="application/json">{}</script>
    </body>
    </html>
    """

