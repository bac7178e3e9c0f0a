"""Processors for Postgres servers and the databases they host."""

from aspire_kustomize.containers import ContainerDetailsCache
from aspire_kustomize.manifest import (
    PostgresDatabaseResource,
    PostgresServerResource,
    Resource,
    ResourceKind,
)
from aspire_kustomize.templates import (
    DATABASE_FILE,
    POSTGRES_SERVER_FILE,
    database_config,
    postgres_server,
)

from .base import Artifacts, Processor, expect_resource


class PostgresServerProcessor(Processor):
    """Postgres server as a single replica StatefulSet."""

    kind = ResourceKind.POSTGRES_SERVER

    def render(
        self, name: str, resource: Resource, cache: ContainerDetailsCache
    ) -> Artifacts:
        expect_resource(name, resource, PostgresServerResource)
        return {POSTGRES_SERVER_FILE: postgres_server(name)}


class PostgresDatabaseProcessor(Processor):
    """Database description consumed alongside its server."""

    kind = ResourceKind.POSTGRES_DATABASE

    def render(
        self, name: str, resource: Resource, cache: ContainerDetailsCache
    ) -> Artifacts:
        database = expect_resource(name, resource, PostgresDatabaseResource)
        return {DATABASE_FILE: [database_config(name, database.parent)]}
