"""Small `.env` loader used before settings are built.

Deployments configure the solver endpoint and browser toggles through plain
environment variables (FLARESOLVERR_URL, VISIBLE_BROWSER, ...). Local runs keep
them in a `.env` file next to pyproject.toml.

Policy:
- Best-effort, no external dependency.
- Never overrides already-set environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path


def _find_project_root(start: Path) -> Path:
    cur = start
    while True:
        if (cur / "pyproject.toml").exists():
            return cur
        if cur.parent == cur:
            return start
        cur = cur.parent


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_dotenv(text: str) -> dict[str, str]:
    """Parse dotenv text into a mapping.

    Blank lines, comments and lines without ``=`` are ignored. A leading
    ``export`` is accepted and surrounding quotes are stripped.
    """
    values: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        values[key] = _strip_quotes(value.strip())
    return values


def load_dotenv_if_present(*, dotenv_path: Path | None = None) -> bool:
    """Load `.env` into os.environ.

    Returns:
        True if a dotenv file existed and was read, else False.
    """
    if dotenv_path is None:
        root = _find_project_root(Path(__file__).resolve())
        dotenv_path = root / ".env"

    if not dotenv_path.exists():
        return False

    try:
        text = dotenv_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return False

    for key, value in parse_dotenv(text).items():
        if key not in os.environ:
            os.environ[key] = value
    return True
