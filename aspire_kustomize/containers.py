"""Resolution and caching of container image details for project resources.

The container details of every selected project are resolved before any image
is built, and are read again when the deployment manifests are rendered. The
cache is created by the pipeline for a single run and threaded through the
project processor operations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import json
import logging
from pathlib import Path

from slugify import slugify

from . import command
from .config import CommandConfig, ContainerOptions
from .exceptions import (
    ContainerDetailsCacheError,
    ContainerDetailsException,
    MissingContainerDetailsError,
)
from .manifest import ProjectResource

__all__ = [
    "ContainerDetails",
    "ContainerDetailsCache",
    "ContainerDetailsService",
    "ProjectPropertyContainerDetailsService",
    "StaticContainerDetailsService",
]

_LOGGER = logging.getLogger(__name__)

DOTNET_BIN = "dotnet"
DEFAULT_TAG = "latest"

REGISTRY_PROPERTY = "ContainerRegistry"
REPOSITORY_PROPERTY = "ContainerRepository"
IMAGE_NAME_PROPERTY = "ContainerImageName"
TAG_PROPERTY = "ContainerImageTag"
PROPERTIES = [REGISTRY_PROPERTY, REPOSITORY_PROPERTY, IMAGE_NAME_PROPERTY, TAG_PROPERTY]


@dataclass(frozen=True)
class ContainerDetails:
    """Resolved image reference for a project container."""

    registry: str | None
    """Registry host and optional path, e.g. `ghcr.io/example`."""

    repository: str
    """Image repository within the registry."""

    tag: str
    """Image tag."""

    @property
    def full_image(self) -> str:
        """The full image reference used by the deployment."""
        image = f"{self.repository}:{self.tag}"
        if self.registry:
            return f"{self.registry.rstrip('/')}/{image}"
        return image


class ContainerDetailsCache:
    """Container details keyed by project resource name.

    Entries are written once during the populate phase and are read-only after.
    """

    def __init__(self) -> None:
        """Initialize ContainerDetailsCache."""
        self._details: dict[str, ContainerDetails] = {}

    def add(self, name: str, details: ContainerDetails) -> None:
        """Record details for a project, refusing to replace an existing entry."""
        if name in self._details:
            raise ContainerDetailsCacheError(name)
        self._details[name] = details

    def get(self, name: str) -> ContainerDetails:
        """Return details for a project that must already be populated."""
        if (details := self._details.get(name)) is None:
            raise MissingContainerDetailsError(name)
        return details

    def __contains__(self, name: object) -> bool:
        return name in self._details

    def __len__(self) -> int:
        return len(self._details)


def _repository_name(
    name: str, repository: str | None, options: ContainerOptions
) -> str:
    repository = repository or slugify(name, lowercase=True, separator="-")
    if options.repository_prefix:
        return f"{options.repository_prefix.strip('/')}/{repository}"
    return repository


class ContainerDetailsService(ABC):
    """Resolves the image reference a project will be published under."""

    @abstractmethod
    async def get_container_details(
        self, name: str, project: ProjectResource
    ) -> ContainerDetails:
        """Return the container details for the project resource."""


class StaticContainerDetailsService(ContainerDetailsService):
    """Derive container details from options and the resource name alone."""

    def __init__(self, options: ContainerOptions) -> None:
        """Initialize StaticContainerDetailsService."""
        self._options = options

    async def get_container_details(
        self, name: str, project: ProjectResource
    ) -> ContainerDetails:
        """Return the container details for the project resource."""
        return ContainerDetails(
            registry=self._options.registry,
            repository=_repository_name(name, None, self._options),
            tag=self._options.image_tag or DEFAULT_TAG,
        )


class ProjectPropertyContainerDetailsService(ContainerDetailsService):
    """Read container properties from the project file with `dotnet msbuild`.

    Explicit options take precedence over the project properties.
    """

    def __init__(
        self,
        options: ContainerOptions,
        base_path: Path,
        command_config: CommandConfig | None = None,
    ) -> None:
        """Initialize ProjectPropertyContainerDetailsService."""
        self._options = options
        self._base_path = base_path
        self._command_config = command_config or CommandConfig()

    async def _read_properties(self, project: ProjectResource) -> dict[str, str]:
        project_path = self._base_path / project.path
        args = [DOTNET_BIN, "msbuild", str(project_path)]
        args.extend(f"-getProperty:{prop}" for prop in PROPERTIES)
        out = await command.run(
            command.Command(
                args,
                exc=ContainerDetailsException,
                timeout=self._command_config.timeout,
            )
        )
        try:
            doc = json.loads(out)
        except json.JSONDecodeError as err:
            raise ContainerDetailsException(
                f"Unable to parse msbuild properties for {project_path}: {err}"
            ) from err
        properties = doc.get("Properties", {}) if isinstance(doc, dict) else None
        if not isinstance(properties, dict):
            raise ContainerDetailsException(
                f"Unexpected msbuild properties for {project_path}: {out}"
            )
        return {key: value for key, value in properties.items() if value}

    async def get_container_details(
        self, name: str, project: ProjectResource
    ) -> ContainerDetails:
        """Return the container details for the project resource."""
        properties = await self._read_properties(project)
        _LOGGER.debug("Project %s container properties: %s", name, properties)
        repository = properties.get(REPOSITORY_PROPERTY) or properties.get(
            IMAGE_NAME_PROPERTY
        )
        return ContainerDetails(
            registry=self._options.registry or properties.get(REGISTRY_PROPERTY),
            repository=_repository_name(name, repository, self._options),
            tag=self._options.image_tag
            or properties.get(TAG_PROPERTY)
            or DEFAULT_TAG,
        )
