"""Representation of the resources in an Aspire app host manifest.

An app host manifest is a JSON document produced by running the app host with
`--publisher manifest`. Each entry under `resources` is keyed by a unique
resource name and carries a `type` discriminator, for example:

```json
{
  "resources": {
    "cache": {"type": "redis.v0"},
    "apiservice": {
      "type": "project.v0",
      "path": "../Api/Api.csproj",
      "env": {"ConnectionStrings__cache": "{cache.connectionString}"},
      "bindings": {"http": {"scheme": "http", "protocol": "tcp", "transport": "http"}}
    }
  }
}
```

Resources are parsed once into immutable typed variants and then only read by
the processors.
"""

from dataclasses import dataclass, field
from enum import Enum
import json
import logging
from pathlib import Path
from typing import Any, ClassVar

import aiofiles
from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig
from mashumaro.exceptions import InvalidFieldValue, MissingField

from .exceptions import InputException

__all__ = [
    "load_manifest",
    "parse_manifest",
    "parse_resource",
    "ResourceKind",
    "Resource",
    "Binding",
    "ProjectResource",
    "PostgresServerResource",
    "PostgresDatabaseResource",
    "RedisResource",
    "RabbitMqResource",
    "UnsupportedResource",
]

_LOGGER = logging.getLogger(__name__)


PROJECT = "project.v0"
POSTGRES_SERVER = "postgres.server.v0"
POSTGRES_DATABASE = "postgres.database.v0"
REDIS = "redis.v0"
RABBITMQ = "rabbitmq.server.v0"
FINAL = "final"

RESOURCES_KEY = "resources"


class ResourceKind(str, Enum):
    """The closed set of resource kinds that have a processor."""

    PROJECT = PROJECT
    POSTGRES_SERVER = POSTGRES_SERVER
    POSTGRES_DATABASE = POSTGRES_DATABASE
    REDIS = REDIS
    RABBITMQ = RABBITMQ
    FINAL = FINAL

    @property
    def is_database(self) -> bool:
        """Databases are owned by their server and never aggregated directly."""
        return self is ResourceKind.POSTGRES_DATABASE


@dataclass(kw_only=True, frozen=True)
class BaseManifest(DataClassDictMixin):
    """Base class for all manifest objects."""

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


@dataclass(kw_only=True, frozen=True)
class Resource(BaseManifest):
    """A single named entry of the app host manifest."""

    kind: ClassVar[ResourceKind | None] = None
    """The kind used to route the resource to a processor."""

    type: str | None = None
    """The raw type discriminator from the manifest."""


@dataclass(kw_only=True, frozen=True)
class Binding(BaseManifest):
    """A network endpoint exposed by a project."""

    scheme: str = "http"
    protocol: str = "tcp"
    transport: str = "http"
    container_port: int | None = field(
        default=None, metadata=field_options(alias="containerPort")
    )
    external: bool = False


@dataclass(kw_only=True, frozen=True)
class ProjectResource(Resource):
    """A .NET project that is published as a container."""

    kind: ClassVar[ResourceKind | None] = ResourceKind.PROJECT

    path: str
    """Path to the project file, relative to the manifest."""

    env: dict[str, str] = field(default_factory=dict)
    """Environment variables passed to the running container."""

    bindings: dict[str, Binding] = field(default_factory=dict)
    """Endpoints exposed by the project keyed by binding name."""


@dataclass(kw_only=True, frozen=True)
class PostgresServerResource(Resource):
    """A Postgres server container."""

    kind: ClassVar[ResourceKind | None] = ResourceKind.POSTGRES_SERVER

    connection_string: str | None = field(
        default=None, metadata=field_options(alias="connectionString")
    )


@dataclass(kw_only=True, frozen=True)
class PostgresDatabaseResource(Resource):
    """A database hosted by a Postgres server resource."""

    kind: ClassVar[ResourceKind | None] = ResourceKind.POSTGRES_DATABASE

    parent: str
    """Name of the owning Postgres server resource."""


@dataclass(kw_only=True, frozen=True)
class RedisResource(Resource):
    """A Redis cache container."""

    kind: ClassVar[ResourceKind | None] = ResourceKind.REDIS

    connection_string: str | None = field(
        default=None, metadata=field_options(alias="connectionString")
    )


@dataclass(kw_only=True, frozen=True)
class RabbitMqResource(Resource):
    """A RabbitMQ queue server container."""

    kind: ClassVar[ResourceKind | None] = ResourceKind.RABBITMQ

    connection_string: str | None = field(
        default=None, metadata=field_options(alias="connectionString")
    )


@dataclass(kw_only=True, frozen=True)
class UnsupportedResource(Resource):
    """A resource that cannot be processed.

    The type is None when the manifest entry had no discriminator at all. The
    error is set when the discriminator was recognized but the body was invalid.
    """

    error: str | None = None


RESOURCE_TYPES: dict[str, type[Resource]] = {
    PROJECT: ProjectResource,
    POSTGRES_SERVER: PostgresServerResource,
    POSTGRES_DATABASE: PostgresDatabaseResource,
    REDIS: RedisResource,
    RABBITMQ: RabbitMqResource,
}


def parse_resource(name: str, doc: Any) -> Resource:
    """Parse a single manifest entry into its typed variant.

    Failures are contained to the entry and reported as an UnsupportedResource.
    """
    if not isinstance(doc, dict):
        _LOGGER.error("Resource %s is not an object: %s", name, doc)
        return UnsupportedResource(
            error=f"Expected object but got {type(doc).__name__}"
        )
    if not (resource_type := doc.get("type")):
        return UnsupportedResource()
    if (cls := RESOURCE_TYPES.get(resource_type)) is None:
        return UnsupportedResource(type=resource_type)
    try:
        return cls.from_dict(doc)
    except (MissingField, InvalidFieldValue) as err:
        _LOGGER.error(
            "Unable to parse resource %s of type %s: %s", name, resource_type, err
        )
        return UnsupportedResource(type=resource_type, error=str(err))


def parse_manifest(content: str) -> dict[str, Resource]:
    """Parse the serialized app host manifest contents."""
    try:
        doc = json.loads(content)
    except json.JSONDecodeError as err:
        raise InputException(f"Unable to parse manifest as json: {err}") from err
    if not isinstance(doc, dict):
        raise InputException(f"Invalid manifest expected an object: {doc}")
    resources = doc.get(RESOURCES_KEY, doc)
    if not isinstance(resources, dict):
        raise InputException(f"Invalid manifest '{RESOURCES_KEY}' is not an object")
    return {name: parse_resource(name, value) for name, value in resources.items()}


async def load_manifest(manifest_path: Path) -> dict[str, Resource]:
    """Return the resources of a manifest file in manifest order."""
    try:
        async with aiofiles.open(str(manifest_path)) as manifest_file:
            content = await manifest_file.read()
    except OSError as err:
        raise InputException(f"Unable to read manifest {manifest_path}: {err}") from err
    if not content:
        raise InputException(f"Manifest file {manifest_path} is empty")
    resources = parse_manifest(content)
    _LOGGER.debug("Loaded %d resources from %s", len(resources), manifest_path)
    return resources
