"""Pipeline that turns an app host manifest into Kustomize manifests.

The pipeline runs in strictly sequential phases:

1. Acquire the manifest from the app host (fatal on failure).
2. Select the resources to process.
3. Populate the container details of every selected project.
4. Build and push every selected project container.
5. Generate the manifests of every selected resource in selection order.
6. Write the aggregate kustomization once.

Phase 3 completes for all projects before any container is built. Failures in
phases 4 and 5 are contained to the resource that failed, which is then left
out of the aggregate.

This example runs the pipeline against an existing manifest:
```python
from aspire_kustomize import apphost, containers, builder, pipeline, selector
from aspire_kustomize.processors import default_registry

registry = default_registry(
    containers.StaticContainerDetailsService(options),
    builder.DotnetContainerBuilder(base_path),
)
result = await pipeline.Pipeline(
    apphost.ExistingManifestSource(Path("aspire-manifest.json")),
    selector.SelectAll(),
    registry,
).run()
print(list(result.final_manifests))
```
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
import logging
from pathlib import Path

from .apphost import ManifestSource
from .config import PipelineConfig
from .containers import ContainerDetailsCache
from .context import resource_context, trace_context
from .exceptions import (
    ContainerBuildException,
    InputException,
    ManifestAcquisitionException,
)
from .manifest import ProjectResource, Resource, UnsupportedResource, load_manifest
from .processors import ProcessorRegistry
from .report import LoggingReporter, Reporter
from .selector import ResourceSelector

__all__ = [
    "Pipeline",
    "PipelineResult",
]

_LOGGER = logging.getLogger(__name__)


ManifestLoader = Callable[[Path], Awaitable[dict[str, Resource]]]


@dataclass
class PipelineResult:
    """Outcome of a pipeline run."""

    selected: list[str] = field(default_factory=list)
    """Names the operator chose to process, in manifest order."""

    final_manifests: dict[str, Resource] = field(default_factory=dict)
    """Resources included in the aggregate, in processing order."""

    skipped: list[str] = field(default_factory=list)
    """Resources that were not processed because they cannot be."""

    failed: list[str] = field(default_factory=list)
    """Resources whose manifest generation failed."""

    build_failures: dict[str, str] = field(default_factory=dict)
    """Projects whose container build failed, with the error message."""

    aggregate_path: Path | None = None
    """Path of the aggregate kustomization when manifests were generated."""


class Pipeline:
    """Drives a single end to end run over an app host manifest."""

    def __init__(
        self,
        source: ManifestSource,
        selector: ResourceSelector,
        registry: ProcessorRegistry,
        config: PipelineConfig | None = None,
        reporter: Reporter | None = None,
        loader: ManifestLoader = load_manifest,
    ) -> None:
        """Initialize Pipeline."""
        self._source = source
        self._selector = selector
        self._registry = registry
        self._config = config or PipelineConfig()
        self._reporter = reporter or LoggingReporter()
        self._loader = loader

    async def run(self) -> PipelineResult:
        """Run every phase of the pipeline."""
        result = PipelineResult()
        manifest_path = await self.acquire_manifest()
        resources = await self._loader(manifest_path)

        result.selected = self._selector.select(list(resources))
        if unknown := [name for name in result.selected if name not in resources]:
            raise InputException(f"Selected resources not in manifest: {unknown}")
        selected = {name: resources[name] for name in result.selected}
        projects = {
            name: resource
            for name, resource in selected.items()
            if isinstance(resource, ProjectResource)
        }

        cache = ContainerDetailsCache()
        await self.populate_container_details(projects, cache)
        if self._config.build_containers:
            result.build_failures = await self.build_and_push(projects, cache)
        if self._config.generate_manifests:
            await self.generate_manifests(selected, cache, result)
            result.aggregate_path = await self.aggregate(result.final_manifests)

        self._reporter.step("Execution completed")
        return result

    async def acquire_manifest(self) -> Path:
        """Produce the manifest, raising ManifestAcquisitionException on failure."""
        self._reporter.step("Generating Aspire manifest")
        with trace_context("Acquire manifest"):
            result = await self._source.acquire()
        if not result.success:
            message = f"Failed to generate Aspire manifest at: {result.path}"
            self._reporter.error(message)
            raise ManifestAcquisitionException(message)
        self._reporter.done(f"Created Aspire manifest at: {result.path}")
        return result.path

    async def populate_container_details(
        self, projects: dict[str, ProjectResource], cache: ContainerDetailsCache
    ) -> None:
        """Resolve container details for every project before any build."""
        self._reporter.step("Gathering container details from projects")
        with trace_context("Populate container details"):
            for name, project in projects.items():
                with resource_context(name):
                    await self._registry.project.populate_container_details(
                        name, project, cache
                    )
                self._reporter.done(f"Populated container details for project {name}")

    async def build_and_push(
        self, projects: dict[str, ProjectResource], cache: ContainerDetailsCache
    ) -> dict[str, str]:
        """Build and push every project, returning the projects that failed."""
        self._reporter.step("Building and pushing containers")
        failures: dict[str, str] = {}
        with trace_context("Build and push"):
            for name, project in projects.items():
                try:
                    with resource_context(name):
                        await self._registry.project.build_and_push(
                            name, project, cache
                        )
                except ContainerBuildException as err:
                    _LOGGER.debug("Build failure for %s: %s", name, err)
                    self._reporter.error(
                        f"Building and pushing container for project {name} failed"
                    )
                    failures[name] = str(err)
                    continue
                self._reporter.done(
                    f"Building and pushing container for project {name}"
                )
        return failures

    async def generate_manifests(
        self,
        selected: dict[str, Resource],
        cache: ContainerDetailsCache,
        result: PipelineResult,
    ) -> None:
        """Generate the manifests of each selected resource in order."""
        self._reporter.step("Generating manifests")
        with trace_context("Generate manifests"):
            for name, resource in selected.items():
                with resource_context(name):
                    await self._process_resource(name, resource, cache, result)

    async def _process_resource(
        self,
        name: str,
        resource: Resource,
        cache: ContainerDetailsCache,
        result: PipelineResult,
    ) -> None:
        if isinstance(resource, UnsupportedResource):
            if resource.type is None:
                self._reporter.warning(f"Type unknown for resource {name}, skipping")
            elif resource.error:
                self._reporter.error(f"Invalid resource {name}: {resource.error}")
            else:
                self._reporter.warning(
                    f"Unsupported type {resource.type} for resource {name}, skipping"
                )
            result.skipped.append(name)
            return

        if name in result.build_failures:
            self._reporter.warning(
                f"Skipping manifests for project {name} since its build failed"
            )
            result.skipped.append(name)
            return

        if (processor := self._registry.resolve(resource.kind)) is None:
            self._reporter.warning(f"No processor for resource {name}, skipping")
            result.skipped.append(name)
            return

        output_path = self._config.output_path
        if not await processor.create_manifests(name, resource, output_path, cache):
            self._reporter.error(f"Failed to generate manifests for {name}")
            result.failed.append(name)
            return

        self._reporter.done(f"Generated manifests for {name}")
        # Databases are deployed by their server resource
        if resource.kind is not None and resource.kind.is_database:
            return
        result.final_manifests[name] = resource

    async def aggregate(self, final_manifests: dict[str, Resource]) -> Path:
        """Write the aggregate kustomization for the generated resources."""
        with trace_context("Aggregate"):
            path = await self._registry.final.create_final_manifest(
                final_manifests, self._config.output_path
            )
        self._reporter.done(f"Generated final manifest at {path}")
        return path
