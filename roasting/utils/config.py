"""
Configuration management for roasting.
Loads and validates settings from YAML files and environment variables.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from roasting.utils.dotenv import load_dotenv_if_present

DEFAULT_USER_AGENTS = [
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
]


class GeneralConfig(BaseModel):
    """General configuration."""

    project_name: str = "roasting"
    version: str = "0.1.0"
    log_level: str = "INFO"
    logs_dir: str = "logs"
    log_to_file: bool = False


class DirectFetchConfig(BaseModel):
    """Plain HTTP fetch configuration."""

    model_config = ConfigDict(extra="forbid")

    request_timeout: float = 15.0
    max_redirects: int = 5
    min_body_bytes: int = 100
    accept_language: str = "en-US,en;q=0.9,id-ID;q=0.8,id;q=0.7"
    impersonate: str = "chrome"
    user_agents: list[str] = Field(default_factory=lambda: list(DEFAULT_USER_AGENTS))


class ManagedSolverConfig(BaseModel):
    """External solver service (FlareSolverr-compatible) configuration.

    The backend is enabled only when ``endpoint`` is set, normally through
    the FLARESOLVERR_URL environment variable.
    """

    model_config = ConfigDict(extra="forbid")

    endpoint: str | None = None
    max_timeout_ms: int = 60000
    request_timeout: float = 70.0


class BrowserConfig(BaseModel):
    """Local headless browser configuration."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENTS[0]
    locale: str = "en-US"
    languages: list[str] = Field(default_factory=lambda: ["en-US", "en", "id-ID", "id"])
    viewport_width: int = 1920
    viewport_height: int = 1080
    viewport_width_jitter: int = 20
    viewport_height_jitter: int = 15
    navigation_timeout: float = 30.0
    settle_delay: float = 3.0
    poll_interval: float = 5.0
    max_challenge_attempts: int = 4
    challenge_timeout: float = 20.0
    click_after_attempt: int = 2
    post_click_wait: float = 5.0
    spa_extra_wait: float = 4.0


class CacheConfig(BaseModel):
    """Public page-cache fallback configuration.

    ``url_template`` receives the percent-encoded original URL as ``{url}``
    and the raw one as ``{raw_url}``.
    """

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    url_template: str = "https://web.archive.org/web/2id_/{raw_url}"
    timeout: float = 5.0
    min_body_bytes: int = 500
    no_cache_markers: list[str] = Field(
        default_factory=lambda: [
            "did not match any documents",
            "wayback machine has not archived that url",
            "hrm. wayback machine has not archived",
            "this url has been excluded",
            "snapshot cannot be displayed",
        ]
    )
    wrapper_title_markers: list[str] = Field(
        default_factory=lambda: [
            "google search",
            "google cache",
            "cache:",
            "webcache.googleusercontent",
            "wayback machine",
            "internet archive",
        ]
    )


class MarkersConfig(BaseModel):
    """Marker lists used by the challenge and SPA heuristics.

    Kept as data so new provider markers can be added without code changes.
    """

    challenge: list[str] = Field(
        default_factory=lambda: [
            "cf-browser-verification",
            "cf-challenge",
            "cf-turnstile",
            "checking your browser",
            "just a moment",
            "please wait while we verify",
            "enable javascript and cookies to continue",
            "challenge-platform",
            "cf-chl-bypass",
            "ray id:</",
            "cloudflare ray id",
            "verify you are human",
            "security check",
        ]
    )
    spa: list[str] = Field(
        default_factory=lambda: [
            "__next_data__",
            "__nuxt",
            "ng-app",
            "ng-controller",
            "data-reactroot",
            "data-react-helmet",
            "_app-root",
            "app-root",
            "loading your",
            "loading...",
            "memuat...",
            "please wait",
            "initializing",
        ]
    )


class ExtractorConfig(BaseModel):
    """Content extraction limits."""

    model_config = ConfigDict(extra="forbid")

    max_per_heading_level: int = 3
    max_headings: int = 10
    max_heading_chars: int = 200
    max_paragraphs: int = 5
    min_paragraph_chars: int = 20
    max_summary_chars: int = 500
    ellipsis: str = "..."


class QualityConfig(BaseModel):
    """Thresholds for the minimal-content heuristic."""

    model_config = ConfigDict(extra="forbid")

    min_body_chars: int = 0
    min_description_chars: int = 20
    spa_min_body_words: int = 30


class ValidationConfig(BaseModel):
    """Input URL validation rules."""

    max_url_length: int = 2048
    allowed_schemes: list[str] = Field(default_factory=lambda: ["http", "https"])
    blocked_hosts: list[str] = Field(default_factory=lambda: ["localhost"])
    blocked_host_prefixes: list[str] = Field(default_factory=lambda: ["127.", "192.168."])
    blocked_keywords: list[str] = Field(
        default_factory=lambda: [
            "ignore previous",
            "ignore all",
            "disregard",
            "forget your",
            "new instructions",
            "system prompt",
            "you are now",
            "pretend to be",
            "act as",
            "roleplay",
            "jailbreak",
            "dan mode",
            "developer mode",
            "bypass",
            "override",
            "abaikan instruksi",
            "lupakan",
            "instruksi baru",
        ]
    )


class Settings(BaseModel):
    """Main settings container."""

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    direct: DirectFetchConfig = Field(default_factory=DirectFetchConfig)
    solver: ManagedSolverConfig = Field(default_factory=ManagedSolverConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    markers: MarkersConfig = Field(default_factory=MarkersConfig)
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    quality: QualityConfig = Field(default_factory=QualityConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary.
        override: Override dictionary.

    Returns:
        Merged dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise TypeError(f"Top level of {path} must be a mapping, got {type(data).__name__}")
    return data


def _load_yaml_config(config_dir: Path) -> dict[str, Any]:
    """Load settings.yaml with the ``settings`` section of local.yaml on top.

    Example local.yaml:
        settings:
          browser:
            enabled: false

    Args:
        config_dir: Configuration directory path.

    Returns:
        Merged configuration dictionary.
    """
    config = _load_yaml_file(config_dir / "settings.yaml")
    local_overrides = _load_yaml_file(config_dir / "local.yaml")
    if "settings" in local_overrides:
        config = _deep_merge(config, local_overrides["settings"] or {})
    return config


def _parse_env_value(value: str) -> Any:
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        return value


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides.

    Environment variables should be prefixed with ROASTING_ and use
    double underscores for nested keys.

    Example:
        ROASTING_GENERAL__LOG_LEVEL=DEBUG

    Plain deployment toggles are honoured too:
    FLARESOLVERR_URL sets the solver endpoint, VISIBLE_BROWSER (any value)
    runs the local browser headful, ROASTING_HEADLESS_ENABLED gates local
    browser automation.

    Args:
        config: Configuration dictionary.

    Returns:
        Configuration with environment overrides.
    """
    prefix = "ROASTING_"

    for key, value in os.environ.items():
        if not key.startswith(prefix) or "__" not in key:
            continue

        key_path = key[len(prefix) :].lower().split("__")

        current = config
        for part in key_path[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[key_path[-1]] = _parse_env_value(value)

    solver_url = os.environ.get("FLARESOLVERR_URL")
    if solver_url:
        config.setdefault("solver", {})["endpoint"] = solver_url.rstrip("/")

    if "VISIBLE_BROWSER" in os.environ:
        config.setdefault("browser", {})["headless"] = False

    headless_enabled = os.environ.get("ROASTING_HEADLESS_ENABLED")
    if headless_enabled is not None:
        config.setdefault("browser", {})["enabled"] = headless_enabled.lower() in (
            "1",
            "true",
            "yes",
        )

    return config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get application settings.

    Settings are loaded from:
    1. Default values
    2. YAML configuration files
    3. Environment variables (highest priority, .env included)

    Returns:
        Settings instance.
    """
    load_dotenv_if_present()

    config_dir = Path(os.environ.get("ROASTING_CONFIG_DIR", "config"))
    config = _load_yaml_config(config_dir)
    config = _apply_env_overrides(config)

    return Settings(**config)


def get_project_root() -> Path:
    """Get the project root directory.

    Returns:
        Project root path.
    """
    # This file is at roasting/utils/config.py
    return Path(__file__).parent.parent.parent
