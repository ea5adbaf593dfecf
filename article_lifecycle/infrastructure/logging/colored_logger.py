"""Colored sweep logger — ANSI-colored console logging for the background sweepers.

Provides a SweepLogger with color-coded output per sweep stage, making it easy
to follow publish and purge sweeps in the terminal.

Color scheme:
    ⚪ White   — Sweep start / summary
    🔵 Blue    — Auto-publish
    🟣 Magenta — Purge
    🟡 Yellow  — Retry / timeout
    🔴 Red     — Errors
"""

import logging
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


# ── Sweep Stage Definitions ──────────────────────────────────────────

class SweepStage:
    """Predefined sweep stages with colors and icons."""

    SWEEP = ("SWEEP", _Colors.WHITE, "🧹")
    PUBLISH = ("PUBLISH", _Colors.BLUE, "📰")
    PURGE = ("PURGE", _Colors.MAGENTA, "🗑️")
    RETRY = ("RETRY", _Colors.YELLOW, "🔁")
    TIMEOUT = ("TIMEOUT", _Colors.YELLOW, "⏱️")


# ── SweepLogger ──────────────────────────────────────────────────────

class SweepLogger:
    """Color-coded logger for the periodic sweepers.

    Usage:
        log = SweepLogger("article_lifecycle.sweepers.publisher")
        log.step_start(SweepStage.SWEEP, "3 candidates")
        log.step_complete(SweepStage.PUBLISH, "Published abc123")
        log.stats(succeeded=3, failed=0)
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)
        self._component = component_name

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the start of a sweep step with its stage color."""
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        self._logger.info(formatted + _details(kwargs))

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the successful completion of a sweep step."""
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        self._logger.info(formatted + _details(kwargs))

    def step_warning(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log a recoverable problem (retry, timeout, lost race)."""
        label, color, icon = stage
        formatted = f"{color}{icon} [{label}]{_Colors.RESET} {color}{message}{_Colors.RESET}"
        self._logger.warning(formatted + _details(kwargs))

    def step_error(self, stage: tuple[str, str, str], message: str, error: Exception | None = None) -> None:
        """Log a sweep step error in red."""
        label, _, _ = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        """Log additional detail (gray/dimmed) at debug level."""
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        self._logger.debug(formatted + _details(kwargs))

    def stats(self, **kwargs: Any) -> None:
        """Log sweep statistics."""
        parts = [f"{k}: {v}" for k, v in kwargs.items()]
        formatted = f"   {_Colors.GRAY}📈 {' | '.join(parts)}{_Colors.RESET}"
        self._logger.info(formatted)


def _details(kwargs: dict[str, Any]) -> str:
    if not kwargs:
        return ""
    details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
    return f" {_Colors.GRAY}({details}){_Colors.RESET}"
