# utils/logger.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Logging utility for directive evaluation with configurable levels

import logging
import sys
from enum import Enum
from typing import Optional


class LogLevel(Enum):
    """Log levels for directive evaluation."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


class SVAMonLogger:
    """Centralized logger for the evaluation engine with structured output."""

    def __init__(self, name: str = "svamon", level: LogLevel = LogLevel.WARNING):
        """Initialize the engine logger.

        Args:
            name: Name passed to ``logging.getLogger``
            level: Initial level for the logger and its console handler
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level.value)

        # Re-creating the logger must not stack handlers
        self.logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level.value)
        console_handler.setFormatter(SVAMonFormatter())

        self.logger.addHandler(console_handler)

        # Host applications keep their own root configuration
        self.logger.propagate = False

    def set_level(self, level: LogLevel):
        """Apply ``level`` to the logger and every attached handler."""
        self.logger.setLevel(level.value)
        for handler in self.logger.handlers:
            handler.setLevel(level.value)

    def is_debug(self) -> bool:
        """Whether DEBUG records are currently emitted."""
        return self.logger.isEnabledFor(logging.DEBUG)

    # Plain level passthroughs
    def debug(self, message: str, **kwargs):
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        self.logger.error(message, **kwargs)

    # Specialized methods for directive evaluation events
    def directive_start(self, directive_text: str, kind: str, history_depth: int):
        """Log runner initialization."""
        self.info(f"--- evaluating {kind} directive ---")
        self.info(f"Directive: {directive_text}")
        self.info(f"History depth: {history_depth}")

    def cycle_processed(self, cycle: int, live_attempts: int, status: str):
        """Log the outcome of one fed cycle."""
        self.info(f"cycle {cycle} → live attempts={live_attempts}, status={status}")

    def cycle_disabled(self, cycle: int, dropped: int):
        """Log a cycle skipped by the disable condition."""
        self.debug(f"    ⏸ cycle {cycle} disabled, {dropped} in-flight attempt(s) discarded")

    def attempt_spawned(self, what: str, start: int):
        """Log creation of an attempt or obligation."""
        self.debug(f"    ➕ {what} attempt spawned at cycle {start}")

    def attempt_pruned(self, count: int, cycle: int):
        """Log pruning of expired match attempts."""
        if count:
            self.debug(f"    ✂ {count} match attempt(s) expired at cycle {cycle}")

    def match_found(self, start: int, end: int):
        """Log a completed sequence match."""
        self.debug(f"    🟢 sequence match [{start}, {end}]")

    def obligation_spawned(self, consequent: str, cycle: int):
        """Log an implication obligation."""
        self.debug(f"    🔗 obligation {consequent} spawned at cycle {cycle}")

    def obligation_failed(self, consequent: str, cycle: int):
        """Log a violated implication obligation."""
        self.debug(f"    🔴 obligation {consequent} violated at cycle {cycle}")

    def final_verdict(self, verdict: str):
        """Log final directive verdict."""
        self.info(f"Verdict: {verdict}")


class SVAMonFormatter(logging.Formatter):
    """Custom formatter for engine logging with clean output."""

    def format(self, record):
        # Bare message for INFO and above
        if record.levelno >= logging.INFO:
            return record.getMessage()

        if record.levelno == logging.DEBUG:
            return f"[DEBUG] {record.getMessage()}"

        return f"[{record.levelname}] {record.getMessage()}"


# Shared by every engine module
_global_logger: Optional[SVAMonLogger] = None


def get_logger(name: str = "svamon") -> SVAMonLogger:
    """Return the shared engine logger, creating it on first use.

    ``name`` is accepted so modules can pass ``__name__``, but every module
    gets the same "svamon" logger and one ``set_log_level`` call controls
    the whole engine.
    """
    global _global_logger
    if _global_logger is None:
        _global_logger = SVAMonLogger("svamon")
    return _global_logger


def set_log_level(level: LogLevel):
    """Set the level of the shared engine logger."""
    get_logger().set_level(level)


def configure_logging(verbose: bool = False, debug: bool = False):
    """Configure logging from host-application flags.

    Args:
        verbose: Emit INFO records
        debug: Emit DEBUG records, taking precedence over ``verbose``
    """
    if debug:
        set_log_level(LogLevel.DEBUG)
    elif verbose:
        set_log_level(LogLevel.INFO)
    else:
        set_log_level(LogLevel.WARNING)
