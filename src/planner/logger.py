"""Verbosity-controlled logging for scheduling runs.

Level 1 prints what the scheduler decided (one line per placed task and the
project finish). Level 2 adds why: validation summaries, each task's ready
instant and rate, and every span rejected because an assignee was busy.
Level 3 adds ledger reservations and day-by-day effort consumption.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

# Custom levels sit between the standard ones
CHANGES_LEVEL = 25  # Between INFO (20) and WARNING (30)
CHECKS_LEVEL = 15  # Between DEBUG (10) and INFO (20)

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

VERBOSITY_SILENT = 0  # Errors only
VERBOSITY_CHANGES = 1  # Placed tasks and project finish
VERBOSITY_CHECKS = 2  # Readiness, rates and blocked spans
VERBOSITY_DEBUG = 3  # Reservations and per-day consumption


class PlannerLogger(logging.Logger):
    """Logger with one method per scheduling verbosity level.

    - changes(): a task was placed, or the project finish and critical path are known
    - checks(): a task became ready, a candidate span was blocked, a project validated
    - debug(): a ledger took a reservation, a day's capacity was consumed
    """

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a scheduling decision (verbosity 1)."""
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log the reasoning behind a decision (verbosity 2)."""
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> PlannerLogger:
    """Return the shared ``planner`` logger.

    Scheduler, ledger and calendar modules all log through this one instance,
    so a single setup_logger() call controls a whole run.
    """
    logging.setLoggerClass(PlannerLogger)
    logger = logging.getLogger("planner")
    assert isinstance(logger, PlannerLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Set how much of a scheduling run is reported.

    Safe to call again; earlier handlers are replaced.

    Args:
        verbosity: 0 errors only, 1 placed tasks, 2 readiness and conflicts,
            3 reservations and day-by-day arithmetic
        stream: Output stream, sys.stderr when omitted
    """
    logger = get_logger()
    logger.handlers.clear()

    level_map = {
        VERBOSITY_SILENT: logging.ERROR,
        VERBOSITY_CHANGES: CHANGES_LEVEL,
        VERBOSITY_CHECKS: CHECKS_LEVEL,
        VERBOSITY_DEBUG: logging.DEBUG,
    }
    logger.setLevel(level_map.get(verbosity, logging.ERROR))

    output_stream = stream if stream is not None else sys.stderr

    # Bare messages; indentation in the text shows nesting
    handler = logging.StreamHandler(output_stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and return to errors only."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)


def checks_enabled() -> bool:
    """True when blocked spans should be described (verbosity >= 2)."""
    return get_logger().isEnabledFor(CHECKS_LEVEL)


def debug_enabled() -> bool:
    """True when per-day calendar arithmetic should be logged (verbosity >= 3)."""
    return get_logger().isEnabledFor(logging.DEBUG)
