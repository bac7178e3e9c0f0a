"""Shared fixtures for aspire-kustomize tests."""

from pathlib import Path

import pytest

from aspire_kustomize.processors import ProcessorRegistry, default_registry

from .fakes import FakeBuilder, FakeDetailsService, RecordingReporter


@pytest.fixture
def events() -> list[str]:
    """Ordered log of collaborator calls."""
    return []


@pytest.fixture
def failed_builds() -> set[str]:
    """Projects whose container build fails."""
    return set()


@pytest.fixture
def registry(events: list[str], failed_builds: set[str]) -> ProcessorRegistry:
    """Registry backed by fake container collaborators."""
    return default_registry(
        FakeDetailsService(events), FakeBuilder(events, failed_builds)
    )


@pytest.fixture
def reporter() -> RecordingReporter:
    """Reporter that records every message."""
    return RecordingReporter()


@pytest.fixture
def output_path(tmp_path: Path) -> Path:
    """Output directory for generated manifests."""
    return tmp_path / "output"
