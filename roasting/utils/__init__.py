"""
roasting utilities module.
"""

from roasting.utils.config import Settings, get_project_root, get_settings
from roasting.utils.logging import (
    LogContext,
    configure_logging,
    ensure_logging_configured,
    get_logger,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "get_project_root",
    # Logging
    "get_logger",
    "configure_logging",
    "ensure_logging_configured",
    "LogContext",
]
