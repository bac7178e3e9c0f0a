"""Mapping from resource kind to the processor that handles it."""

from collections.abc import Iterable
import logging

from aspire_kustomize.builder import ContainerBuilder
from aspire_kustomize.containers import ContainerDetailsService
from aspire_kustomize.manifest import ResourceKind
from aspire_kustomize.writer import ManifestWriter

from .base import Processor
from .final import FinalProcessor
from .postgres import PostgresDatabaseProcessor, PostgresServerProcessor
from .project import ProjectProcessor
from .rabbitmq import RabbitMqProcessor
from .redis import RedisProcessor

_LOGGER = logging.getLogger(__name__)


class ProcessorRegistry:
    """Processors keyed by kind, fixed when the registry is created.

    There is one processor per kind for the lifetime of the registry.
    """

    def __init__(
        self,
        project: ProjectProcessor,
        final: FinalProcessor,
        processors: Iterable[Processor] = (),
    ) -> None:
        """Initialize ProcessorRegistry."""
        self.project = project
        self.final = final
        self._processors: dict[ResourceKind, Processor] = {project.kind: project}
        for processor in processors:
            if processor.kind in self._processors:
                raise ValueError(f"Duplicate processor for kind {processor.kind}")
            self._processors[processor.kind] = processor
        _LOGGER.debug(
            "Registered processors: %s",
            ", ".join(kind.value for kind in self._processors),
        )

    def resolve(self, kind: ResourceKind | None) -> Processor | None:
        """Return the processor for the kind, or None when there is none."""
        if kind is None:
            return None
        return self._processors.get(kind)

    @property
    def kinds(self) -> list[ResourceKind]:
        """Kinds that have a registered processor."""
        return list(self._processors)


def default_registry(
    details_service: ContainerDetailsService,
    builder: ContainerBuilder,
    writer: ManifestWriter | None = None,
) -> ProcessorRegistry:
    """Create a registry with a processor for every supported resource kind."""
    writer = writer or ManifestWriter()
    return ProcessorRegistry(
        project=ProjectProcessor(writer, details_service, builder),
        final=FinalProcessor(writer),
        processors=[
            PostgresServerProcessor(writer),
            PostgresDatabaseProcessor(writer),
            RedisProcessor(writer),
            RabbitMqProcessor(writer),
        ],
    )
