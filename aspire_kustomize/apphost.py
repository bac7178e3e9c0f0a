"""Acquire the app host manifest that drives the pipeline.

The manifest is usually produced by running the Aspire app host project with
the manifest publisher. An existing manifest file may be used instead, which
avoids needing the .NET SDK when only generating manifests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging
from pathlib import Path

from aiofiles.ospath import isfile

from . import command
from .config import CommandConfig
from .containers import DOTNET_BIN
from .exceptions import ManifestAcquisitionException

__all__ = [
    "ManifestResult",
    "ManifestSource",
    "AppHostManifestSource",
    "ExistingManifestSource",
]

_LOGGER = logging.getLogger(__name__)

MANIFEST_FILENAME = "aspire-manifest.json"


@dataclass(frozen=True)
class ManifestResult:
    """Outcome of acquiring the manifest."""

    path: Path
    """Full path of the manifest file."""

    success: bool
    """True when the manifest exists at the path."""


class ManifestSource(ABC):
    """Produces the path to an app host manifest."""

    @abstractmethod
    async def acquire(self) -> ManifestResult:
        """Return the manifest location and whether it was produced."""

    @property
    def base_path(self) -> Path:
        """Directory that relative project paths in the manifest refer to."""
        return Path(".")


class AppHostManifestSource(ManifestSource):
    """Run the app host project with the manifest publisher."""

    def __init__(
        self, project_path: Path, command_config: CommandConfig | None = None
    ) -> None:
        """Initialize AppHostManifestSource."""
        self._project_path = project_path
        self._command_config = command_config or CommandConfig()

    @property
    def project_dir(self) -> Path:
        """Directory containing the app host project."""
        if self._project_path.suffix == ".csproj":
            return self._project_path.parent
        return self._project_path

    @property
    def project_arg(self) -> str:
        """The `--project` argument, relative to the app host directory."""
        if self._project_path.suffix == ".csproj":
            return self._project_path.name
        return "."

    @property
    def base_path(self) -> Path:
        return self.project_dir

    async def acquire(self) -> ManifestResult:
        """Run the app host and return the generated manifest."""
        manifest_path = self.project_dir / MANIFEST_FILENAME
        args = [
            DOTNET_BIN,
            "run",
            "--project",
            self.project_arg,
            "--",
            "--publisher",
            "manifest",
            "--output-path",
            MANIFEST_FILENAME,
        ]
        try:
            await command.run(
                command.Command(
                    args,
                    cwd=self.project_dir,
                    exc=ManifestAcquisitionException,
                    timeout=self._command_config.build_timeout,
                )
            )
        except ManifestAcquisitionException as err:
            _LOGGER.error("Failed to run app host %s: %s", self._project_path, err)
            return ManifestResult(path=manifest_path, success=False)
        return ManifestResult(path=manifest_path, success=await isfile(manifest_path))


class ExistingManifestSource(ManifestSource):
    """Use a manifest file that was generated ahead of time."""

    def __init__(self, manifest_path: Path) -> None:
        """Initialize ExistingManifestSource."""
        self._manifest_path = manifest_path

    @property
    def base_path(self) -> Path:
        return self._manifest_path.parent

    async def acquire(self) -> ManifestResult:
        """Return the existing manifest if present."""
        return ManifestResult(
            path=self._manifest_path, success=await isfile(self._manifest_path)
        )
