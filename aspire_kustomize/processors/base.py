"""Base class for turning a single resource into Kubernetes manifests."""

from abc import ABC, abstractmethod
import logging
from pathlib import Path
from typing import Any, ClassVar, TypeVar

import yaml

from aspire_kustomize.containers import ContainerDetailsCache
from aspire_kustomize.exceptions import InputException
from aspire_kustomize.manifest import Resource, ResourceKind
from aspire_kustomize.templates import KUSTOMIZATION_FILE, kustomization
from aspire_kustomize.writer import ManifestWriter

_LOGGER = logging.getLogger(__name__)

R = TypeVar("R", bound=Resource)

Artifacts = dict[str, list[dict[str, Any]]]
"""Rendered documents keyed by the file name they are written to."""


def expect_resource(name: str, resource: Resource, cls: type[R]) -> R:
    """Narrow the resource to the variant a processor handles."""
    if not isinstance(resource, cls):
        raise InputException(
            f"Resource {name} expected {cls.__name__} but got {type(resource).__name__}"
        )
    return resource


def resource_directory(output_path: Path, name: str) -> Path:
    """Directory for a resource, which must be a direct child of the output path."""
    if name in ("", ".", "..") or "/" in name or "\\" in name:
        raise InputException(f"Resource name '{name}' is not a valid directory name")
    return output_path / name


class Processor(ABC):
    """Renders the manifests for one kind of resource.

    Each resource is written to its own directory under the output path along
    with a kustomization listing the files that were written.
    """

    kind: ClassVar[ResourceKind]
    """The resource kind handled by this processor."""

    def __init__(self, writer: ManifestWriter) -> None:
        """Initialize Processor."""
        self._writer = writer

    @abstractmethod
    def render(
        self, name: str, resource: Resource, cache: ContainerDetailsCache
    ) -> Artifacts:
        """Render the documents for the resource."""

    async def create_manifests(
        self,
        name: str,
        resource: Resource,
        output_path: Path,
        cache: ContainerDetailsCache,
    ) -> bool:
        """Write the manifests for the resource, returning True on success."""
        try:
            resource_path = resource_directory(output_path, name)
            artifacts = self.render(name, resource, cache)
            self._writer.reset_directory(resource_path)
            for filename, docs in artifacts.items():
                await self._writer.write(resource_path / filename, docs)
            await self._writer.write(
                resource_path / KUSTOMIZATION_FILE, [kustomization(list(artifacts))]
            )
        except (InputException, OSError, yaml.YAMLError) as err:
            _LOGGER.error("Failed to create manifests for %s: %s", name, err)
            return False
        _LOGGER.info("Generated manifests for %s in %s", name, resource_path)
        return True
