"""Core module — config, types, logging."""

from src.core.config import Settings, get_settings, load_settings, reset_settings
from src.core.logging import run_context, setup_logging
from src.core.types import (
    AiReport,
    Alert,
    AlertSeverity,
    AlertSource,
    EmptyReport,
    FallbackReport,
    RawMessage,
    Report,
    ReportTier,
    RunResult,
)

__all__ = [
    "AiReport",
    "Alert",
    "AlertSeverity",
    "AlertSource",
    "EmptyReport",
    "FallbackReport",
    "RawMessage",
    "Report",
    "ReportTier",
    "RunResult",
    "Settings",
    "get_settings",
    "load_settings",
    "reset_settings",
    "run_context",
    "setup_logging",
]
