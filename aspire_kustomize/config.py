"""Configuration objects for aspire-kustomize."""

from dataclasses import dataclass
from pathlib import Path

DEFAULT_OUTPUT_PATH = Path("aspire-output")
DEFAULT_BUILD_TIMEOUT = 600.0


@dataclass
class ContainerOptions:
    """Overrides applied when resolving and publishing project containers."""

    registry: str | None = None
    """Container registry to push images to, e.g. `ghcr.io/example`."""

    repository_prefix: str | None = None
    """Prefix prepended to the repository name of every image."""

    image_tag: str | None = None
    """Tag applied to every image instead of the project's own."""

    runtime_identifier: str = "linux-x64"
    """The .NET runtime identifier to publish containers for."""


@dataclass
class CommandConfig:
    """Bounds for external commands.

    Container builds are never retried; a build that exceeds its timeout is
    reported as a failure for that project only.
    """

    timeout: float | None = 60.0
    """Timeout in seconds for short commands such as reading project properties."""

    build_timeout: float | None = DEFAULT_BUILD_TIMEOUT
    """Timeout in seconds for the app host run and each container publish."""


@dataclass
class PipelineConfig:
    """Configuration for a pipeline run."""

    output_path: Path = DEFAULT_OUTPUT_PATH
    """Directory that receives one sub-directory per resource and the aggregate."""

    build_containers: bool = True
    """Build and push project containers before generating manifests."""

    generate_manifests: bool = True
    """Generate per-resource manifests and the aggregate kustomization."""
