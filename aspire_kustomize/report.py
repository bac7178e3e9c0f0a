"""Progress reporting for pipeline steps.

The pipeline reports each meaningful step through a Reporter so that callers
decide where progress goes. The command line tool prints to the console while
the library default only logs.
"""

from abc import ABC, abstractmethod
import logging
import sys
from typing import TextIO

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "Reporter",
    "LoggingReporter",
    "ConsoleReporter",
]

DONE = "[DONE]"
WARN = "[WARN]"
FAIL = "[FAIL]"


class Reporter(ABC):
    """Receives human readable progress from the pipeline."""

    @abstractmethod
    def step(self, message: str) -> None:
        """A pipeline phase is starting."""

    @abstractmethod
    def done(self, message: str) -> None:
        """An item of work completed successfully."""

    @abstractmethod
    def warning(self, message: str) -> None:
        """An item was skipped."""

    @abstractmethod
    def error(self, message: str) -> None:
        """An item of work failed."""


class LoggingReporter(Reporter):
    """Report progress to the module logger."""

    def step(self, message: str) -> None:
        _LOGGER.info(message)

    def done(self, message: str) -> None:
        _LOGGER.info(message)

    def warning(self, message: str) -> None:
        _LOGGER.warning(message)

    def error(self, message: str) -> None:
        _LOGGER.error(message)


class ConsoleReporter(Reporter):
    """Print progress lines to the console."""

    def __init__(self, out: TextIO | None = None) -> None:
        """Initialize ConsoleReporter."""
        self._out = out or sys.stdout

    def step(self, message: str) -> None:
        print(message, file=self._out)

    def done(self, message: str) -> None:
        print(f"\t{DONE} {message}", file=self._out)

    def warning(self, message: str) -> None:
        print(f"\t{WARN} {message}", file=self._out)

    def error(self, message: str) -> None:
        print(f"\t{FAIL} {message}", file=self._out)
