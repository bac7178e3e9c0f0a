"""Tracing of pipeline phases and the resource being processed.

Each phase of a run is entered with `trace_context` and each manifest resource
within it with `resource_context`, so debug logs read like:

    [Trace] > Build and push > catalogservice
    [Trace] < Build and push > catalogservice (12.30s)
"""

import contextvars
from contextlib import contextmanager
import logging
from time import perf_counter
from typing import Generator


_LOGGER = logging.getLogger(__name__)

__all__ = [
    "trace_context",
    "resource_context",
    "current_resource",
]


trace: contextvars.ContextVar[list[str]] = contextvars.ContextVar("trace")
resource: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "resource", default=None
)


def current_resource() -> str | None:
    """Name of the manifest resource being processed, if any."""
    return resource.get()


@contextmanager
def trace_context(name: str) -> Generator[None, None, None]:
    """Log entry, exit and duration of a named pipeline phase."""
    stack = trace.get([])
    token = trace.set(stack + [name])
    label = " > ".join(stack + [name])
    t1 = perf_counter()
    _LOGGER.debug("[Trace] > %s", label)
    try:
        yield
    finally:
        t2 = perf_counter()
        trace.reset(token)
        _LOGGER.debug("[Trace] < %s (%0.2fs)", label, (t2 - t1))


@contextmanager
def resource_context(resource_name: str) -> Generator[None, None, None]:
    """Trace work on a single manifest resource within the current phase."""
    token = resource.set(resource_name)
    try:
        with trace_context(resource_name or "<unnamed>"):
            yield
    finally:
        resource.reset(token)
