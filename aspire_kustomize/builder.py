"""Library for building and publishing project containers.

Containers are published with the .NET SDK container support, which builds the
image and pushes it to the registry in one step:

```python
from aspire_kustomize.builder import DotnetContainerBuilder

builder = DotnetContainerBuilder(base_path=Path("src/AppHost"))
await builder.build_and_push("apiservice", project, details)
```
"""

from abc import ABC, abstractmethod
import logging
from pathlib import Path

from . import command
from .config import CommandConfig, ContainerOptions
from .containers import ContainerDetails, DOTNET_BIN
from .exceptions import ContainerBuildException
from .manifest import ProjectResource

__all__ = [
    "ContainerBuilder",
    "DotnetContainerBuilder",
]

_LOGGER = logging.getLogger(__name__)

PUBLISH_PROFILE = "DefaultContainer"


class ContainerBuilder(ABC):
    """Builds a project container image and pushes it to a registry."""

    @abstractmethod
    async def build_and_push(
        self, name: str, project: ProjectResource, details: ContainerDetails
    ) -> None:
        """Build and push the image, raising ContainerBuildException on failure."""


class DotnetContainerBuilder(ContainerBuilder):
    """Publish containers with `dotnet publish`."""

    def __init__(
        self,
        base_path: Path,
        options: ContainerOptions | None = None,
        command_config: CommandConfig | None = None,
    ) -> None:
        """Initialize DotnetContainerBuilder."""
        self._base_path = base_path
        self._options = options or ContainerOptions()
        self._command_config = command_config or CommandConfig()

    def publish_args(
        self, project: ProjectResource, details: ContainerDetails
    ) -> list[str]:
        """Command line used to publish the project container."""
        args = [
            DOTNET_BIN,
            "publish",
            str(self._base_path / project.path),
            "--configuration",
            "Release",
            "--runtime",
            self._options.runtime_identifier,
            "--verbosity",
            "quiet",
            "--nologo",
            f"-p:PublishProfile={PUBLISH_PROFILE}",
            f"-p:ContainerRepository={details.repository}",
            f"-p:ContainerImageTag={details.tag}",
        ]
        if details.registry:
            args.append(f"-p:ContainerRegistry={details.registry}")
        return args

    async def build_and_push(
        self, name: str, project: ProjectResource, details: ContainerDetails
    ) -> None:
        """Build and push the image, raising ContainerBuildException on failure."""
        _LOGGER.debug(
            "Publishing container %s for project %s", details.full_image, name
        )
        await command.run(
            command.Command(
                self.publish_args(project, details),
                exc=ContainerBuildException,
                timeout=self._command_config.build_timeout,
            )
        )
