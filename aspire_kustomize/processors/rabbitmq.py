"""Processor for RabbitMQ queue servers."""

from aspire_kustomize.containers import ContainerDetailsCache
from aspire_kustomize.manifest import RabbitMqResource, Resource, ResourceKind
from aspire_kustomize.templates import RABBITMQ_FILE, rabbitmq

from .base import Artifacts, Processor, expect_resource


class RabbitMqProcessor(Processor):
    """RabbitMQ as a Deployment and Service."""

    kind = ResourceKind.RABBITMQ

    def render(
        self, name: str, resource: Resource, cache: ContainerDetailsCache
    ) -> Artifacts:
        expect_resource(name, resource, RabbitMqResource)
        return {RABBITMQ_FILE: rabbitmq(name)}
