"""Selection of the manifest resources to process."""

from abc import ABC, abstractmethod
from collections.abc import Callable
import logging
import sys
from typing import TextIO

from .exceptions import InputException

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "ResourceSelector",
    "SelectAll",
    "SelectNames",
    "PromptSelector",
]

ALL = "all"


class ResourceSelector(ABC):
    """Chooses a subset of the resource names to process."""

    @abstractmethod
    def select(self, names: list[str]) -> list[str]:
        """Return the chosen names in manifest order."""


class SelectAll(ResourceSelector):
    """Select every resource."""

    def select(self, names: list[str]) -> list[str]:
        return list(names)


class SelectNames(ResourceSelector):
    """Select a fixed set of resources by name."""

    def __init__(self, names: list[str]) -> None:
        """Initialize SelectNames."""
        self._names = names

    def select(self, names: list[str]) -> list[str]:
        if unknown := [name for name in self._names if name not in names]:
            raise InputException(
                f"Unknown resources selected: {', '.join(unknown)} "
                f"(available: {', '.join(names)})"
            )
        wanted = set(self._names)
        return [name for name in names if name in wanted]


def parse_choices(response: str, names: list[str]) -> list[str]:
    """Parse a comma or space separated list of indexes or names.

    A blank response or `all` selects every name.
    """
    tokens = response.replace(",", " ").split()
    if not tokens or tokens == [ALL]:
        return list(names)
    chosen: set[str] = set()
    for token in tokens:
        if token in names:
            chosen.add(token)
            continue
        if not token.isdigit() or not 1 <= int(token) <= len(names):
            raise ValueError(f"Invalid choice '{token}'")
        chosen.add(names[int(token) - 1])
    return [name for name in names if name in chosen]


class PromptSelector(ResourceSelector):
    """Ask the operator which resources to process."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        out: TextIO | None = None,
    ) -> None:
        """Initialize PromptSelector."""
        self._input = input_func
        self._out = out or sys.stdout

    def select(self, names: list[str]) -> list[str]:
        if not names:
            return []
        print("Select components to process from the loaded file:", file=self._out)
        for index, name in enumerate(names, start=1):
            print(f"  {index:>3}) {name}", file=self._out)
        while True:
            try:
                response = self._input(
                    "Components (numbers or names, blank for all): "
                )
            except EOFError as err:
                raise InputException("No components were selected") from err
            try:
                return parse_choices(response, names)
            except ValueError as err:
                print(err, file=self._out)
