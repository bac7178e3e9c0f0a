"""Processor for Redis caches."""

from aspire_kustomize.containers import ContainerDetailsCache
from aspire_kustomize.manifest import RedisResource, Resource, ResourceKind
from aspire_kustomize.templates import REDIS_FILE, redis

from .base import Artifacts, Processor, expect_resource


class RedisProcessor(Processor):
    """Redis as a Deployment and Service."""

    kind = ResourceKind.REDIS

    def render(
        self, name: str, resource: Resource, cache: ContainerDetailsCache
    ) -> Artifacts:
        expect_resource(name, resource, RedisResource)
        return {REDIS_FILE: redis(name)}
