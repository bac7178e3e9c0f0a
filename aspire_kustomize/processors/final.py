"""Processor for the top level kustomization that aggregates all resources."""

from collections.abc import Mapping
import logging
from pathlib import Path

from aspire_kustomize.manifest import Resource, ResourceKind
from aspire_kustomize.templates import KUSTOMIZATION_FILE, kustomization
from aspire_kustomize.writer import ManifestWriter

_LOGGER = logging.getLogger(__name__)


class FinalProcessor:
    """Writes the aggregate kustomization referencing each resource directory."""

    kind = ResourceKind.FINAL

    def __init__(self, writer: ManifestWriter) -> None:
        """Initialize FinalProcessor."""
        self._writer = writer

    async def create_final_manifest(
        self, resources: Mapping[str, Resource], output_path: Path
    ) -> Path:
        """Write the aggregate, listing resources in insertion order."""
        path = output_path / KUSTOMIZATION_FILE
        await self._writer.write(path, [kustomization(list(resources))])
        _LOGGER.info("Generated final manifest with %d resources", len(resources))
        return path
