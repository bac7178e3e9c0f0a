"""Processor for .NET projects published as containers.

Projects go through three operations in a fixed order during a run:

1. `populate_container_details` for every selected project,
2. `build_and_push` for every selected project,
3. `create_manifests` while generating the manifests of all resources.

The container details cache is owned by the pipeline and passed into each
operation so the ordering is visible at the call site.
"""

import logging

from aspire_kustomize.builder import ContainerBuilder
from aspire_kustomize.containers import ContainerDetailsCache, ContainerDetailsService
from aspire_kustomize.exceptions import ContainerDetailsCacheError
from aspire_kustomize.manifest import ProjectResource, Resource, ResourceKind
from aspire_kustomize.templates import (
    DEPLOYMENT_FILE,
    SERVICE_FILE,
    ProjectTemplateData,
    binding_ports,
    project_deployment,
    project_service,
)
from aspire_kustomize.writer import ManifestWriter

from .base import Artifacts, Processor, expect_resource

_LOGGER = logging.getLogger(__name__)

MANIFESTS = [DEPLOYMENT_FILE, SERVICE_FILE]


class ProjectProcessor(Processor):
    """Deployment and Service for a project container."""

    kind = ResourceKind.PROJECT

    def __init__(
        self,
        writer: ManifestWriter,
        details_service: ContainerDetailsService,
        builder: ContainerBuilder,
    ) -> None:
        """Initialize ProjectProcessor."""
        super().__init__(writer)
        self._details_service = details_service
        self._builder = builder

    async def populate_container_details(
        self, name: str, project: ProjectResource, cache: ContainerDetailsCache
    ) -> None:
        """Resolve the container details for the project into the cache.

        Raises ContainerDetailsCacheError if the project was already populated.
        """
        if name in cache:
            raise ContainerDetailsCacheError(name)
        details = await self._details_service.get_container_details(name, project)
        cache.add(name, details)
        _LOGGER.info(
            "Populated container details for project %s: %s", name, details.full_image
        )

    async def build_and_push(
        self, name: str, project: ProjectResource, cache: ContainerDetailsCache
    ) -> None:
        """Build and push the project container.

        Raises ContainerBuildException on failure. The build is not retried.
        """
        details = cache.get(name)
        await self._builder.build_and_push(name, project, details)
        _LOGGER.info(
            "Built and pushed container %s for project %s", details.full_image, name
        )

    def template_data(
        self, name: str, project: ProjectResource, cache: ContainerDetailsCache
    ) -> ProjectTemplateData:
        """Values used to render the project manifests."""
        return ProjectTemplateData(
            name=name,
            container_image=cache.get(name).full_image,
            env=dict(project.env),
            ports=binding_ports(project.bindings),
            manifests=list(MANIFESTS),
        )

    def render(
        self, name: str, resource: Resource, cache: ContainerDetailsCache
    ) -> Artifacts:
        project = expect_resource(name, resource, ProjectResource)
        data = self.template_data(name, project, cache)
        return {
            DEPLOYMENT_FILE: [project_deployment(data)],
            SERVICE_FILE: [project_service(data)],
        }
