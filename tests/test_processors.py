"""Tests for the resource processors and the processor registry."""

from pathlib import Path

import pytest
import yaml

from aspire_kustomize.containers import ContainerDetails, ContainerDetailsCache
from aspire_kustomize.exceptions import (
    ContainerDetailsCacheError,
    MissingContainerDetailsError,
)
from aspire_kustomize.manifest import (
    Binding,
    PostgresDatabaseResource,
    PostgresServerResource,
    ProjectResource,
    RabbitMqResource,
    RedisResource,
    Resource,
    ResourceKind,
)
from aspire_kustomize.processors import (
    ProcessorRegistry,
    RedisProcessor,
    default_registry,
)
from aspire_kustomize.writer import ManifestWriter

from .fakes import FakeBuilder, FakeDetailsService

PROJECT = ProjectResource(
    type="project.v0",
    path="../Api/Api.csproj",
    env={"ConnectionStrings__cache": "{cache.connectionString}"},
    bindings={
        "http": Binding(scheme="http"),
        "grpc": Binding(scheme="tcp", transport="http2", container_port=5001),
    },
)


def read_docs(path: Path) -> list[dict]:
    """Read all yaml documents in a file."""
    return list(yaml.safe_load_all(path.read_text()))


def file_names(path: Path) -> list[str]:
    return sorted(child.name for child in path.iterdir())


async def test_project_manifests(
    registry: ProcessorRegistry, output_path: Path
) -> None:
    """Test rendering the deployment, service and kustomization of a project."""
    cache = ContainerDetailsCache()
    cache.add(
        "apiservice",
        ContainerDetails(registry="ghcr.io/example", repository="api", tag="1.0"),
    )
    processor = registry.resolve(ResourceKind.PROJECT)
    assert processor is registry.project

    assert await processor.create_manifests("apiservice", PROJECT, output_path, cache)

    resource_path = output_path / "apiservice"
    assert file_names(resource_path) == [
        "deployment.yml",
        "kustomization.yml",
        "service.yml",
    ]
    assert read_docs(resource_path / "kustomization.yml") == [
        {
            "apiVersion": "kustomize.config.k8s.io/v1beta1",
            "kind": "Kustomization",
            "resources": ["deployment.yml", "service.yml"],
        }
    ]

    [deployment] = read_docs(resource_path / "deployment.yml")
    assert deployment["kind"] == "Deployment"
    assert deployment["metadata"]["name"] == "apiservice"
    [container] = deployment["spec"]["template"]["spec"]["containers"]
    assert container["image"] == "ghcr.io/example/api:1.0"
    assert container["env"] == [
        {"name": "ConnectionStrings__cache", "value": "{cache.connectionString}"}
    ]
    assert container["ports"] == [
        {"name": "http", "containerPort": 8080},
        {"name": "grpc", "containerPort": 5001},
    ]

    [service] = read_docs(resource_path / "service.yml")
    assert service["kind"] == "Service"
    assert service["spec"]["selector"] == {"app": "apiservice"}
    assert service["spec"]["ports"] == [
        {"name": "http", "port": 8080, "targetPort": 8080},
        {"name": "grpc", "port": 5001, "targetPort": 5001},
    ]


async def test_project_default_port(
    registry: ProcessorRegistry, output_path: Path
) -> None:
    """Test a project without bindings listens on the default http port."""
    cache = ContainerDetailsCache()
    cache.add("worker", ContainerDetails(registry=None, repository="worker", tag="1"))
    project = ProjectResource(type="project.v0", path="Worker.csproj")

    assert await registry.project.create_manifests(
        "worker", project, output_path, cache
    )
    [deployment] = read_docs(output_path / "worker" / "deployment.yml")
    [container] = deployment["spec"]["template"]["spec"]["containers"]
    assert "env" not in container
    assert container["ports"] == [{"name": "http", "containerPort": 8080}]


async def test_project_missing_container_details(
    registry: ProcessorRegistry, output_path: Path
) -> None:
    """Test generating a project before its details were populated is fatal."""
    stale = output_path / "apiservice"
    stale.mkdir(parents=True)
    (stale / "deployment.yml").write_text("stale")

    with pytest.raises(MissingContainerDetailsError):
        await registry.project.create_manifests(
            "apiservice", PROJECT, output_path, ContainerDetailsCache()
        )
    # Nothing was written with empty image data
    assert (stale / "deployment.yml").read_text() == "stale"


async def test_manifests_replace_previous_run(
    registry: ProcessorRegistry, output_path: Path
) -> None:
    """Test a second run fully replaces the resource directory."""
    stale = output_path / "cache"
    stale.mkdir(parents=True)
    (stale / "old-deployment.yml").write_text("stale")

    processor = registry.resolve(ResourceKind.REDIS)
    assert processor is not None
    cache = ContainerDetailsCache()
    resource = RedisResource(type="redis.v0")

    assert await processor.create_manifests("cache", resource, output_path, cache)
    first = {name: (stale / name).read_text() for name in file_names(stale)}
    assert await processor.create_manifests("cache", resource, output_path, cache)
    second = {name: (stale / name).read_text() for name in file_names(stale)}

    assert list(first) == ["kustomization.yml", "redis.yml"]
    assert first == second


@pytest.mark.parametrize(
    ("name", "resource", "filename", "kinds"),
    [
        (
            "postgres",
            PostgresServerResource(type="postgres.server.v0"),
            "postgres-server.yml",
            ["Secret", "StatefulSet", "Service"],
        ),
        (
            "catalogdb",
            PostgresDatabaseResource(type="postgres.database.v0", parent="postgres"),
            "database.yml",
            ["ConfigMap"],
        ),
        (
            "cache",
            RedisResource(type="redis.v0"),
            "redis.yml",
            ["Deployment", "Service"],
        ),
        (
            "messaging",
            RabbitMqResource(type="rabbitmq.server.v0"),
            "rabbitmq.yml",
            ["Deployment", "Service"],
        ),
    ],
    ids=["postgres-server", "postgres-database", "redis", "rabbitmq"],
)
async def test_resource_manifests(
    registry: ProcessorRegistry,
    output_path: Path,
    name: str,
    resource: Resource,
    filename: str,
    kinds: list[str],
) -> None:
    """Test the fixed artifact set of each non-project processor."""
    assert resource.kind is not None
    processor = registry.resolve(resource.kind)
    assert processor is not None
    assert processor.kind == resource.kind

    cache = ContainerDetailsCache()
    assert await processor.create_manifests(name, resource, output_path, cache)

    resource_path = output_path / name
    assert file_names(resource_path) == sorted([filename, "kustomization.yml"])
    docs = read_docs(resource_path / filename)
    assert [doc["kind"] for doc in docs] == kinds
    assert all(doc["metadata"]["name"] == name for doc in docs)
    assert read_docs(resource_path / "kustomization.yml")[0]["resources"] == [filename]
    assert len(cache) == 0


async def test_database_references_server(
    registry: ProcessorRegistry, output_path: Path
) -> None:
    """Test the database config names its parent server."""
    processor = registry.resolve(ResourceKind.POSTGRES_DATABASE)
    assert processor is not None
    resource = PostgresDatabaseResource(type="postgres.database.v0", parent="Postgres")
    assert await processor.create_manifests(
        "catalogdb", resource, output_path, ContainerDetailsCache()
    )
    [config] = read_docs(output_path / "catalogdb" / "database.yml")
    assert config["data"] == {
        "database": "catalogdb",
        "server": "postgres",
        "port": "5432",
    }


async def test_wrong_resource_variant(
    registry: ProcessorRegistry, output_path: Path
) -> None:
    """Test a processor given a different resource variant reports failure."""
    processor = registry.resolve(ResourceKind.RABBITMQ)
    assert processor is not None
    assert not await processor.create_manifests(
        "cache", RedisResource(type="redis.v0"), output_path, ContainerDetailsCache()
    )
    assert not (output_path / "cache").exists()


async def test_write_failure(registry: ProcessorRegistry, tmp_path: Path) -> None:
    """Test a resource that cannot be written reports failure."""
    output_path = tmp_path / "output"
    output_path.write_text("not a directory")
    processor = registry.resolve(ResourceKind.REDIS)
    assert processor is not None
    assert not await processor.create_manifests(
        "cache", RedisResource(type="redis.v0"), output_path, ContainerDetailsCache()
    )


async def test_final_manifest(registry: ProcessorRegistry, output_path: Path) -> None:
    """Test the aggregate lists resources in insertion order."""
    resources: dict[str, Resource] = {
        "postgres": PostgresServerResource(type="postgres.server.v0"),
        "apiservice": PROJECT,
        "cache": RedisResource(type="redis.v0"),
    }
    path = await registry.final.create_final_manifest(resources, output_path)
    assert path == output_path / "kustomization.yml"
    content = path.read_text()
    assert read_docs(path) == [
        {
            "apiVersion": "kustomize.config.k8s.io/v1beta1",
            "kind": "Kustomization",
            "resources": ["postgres", "apiservice", "cache"],
        }
    ]

    # Identical input produces identical output
    await registry.final.create_final_manifest(dict(resources), output_path)
    assert path.read_text() == content


async def test_final_manifest_empty(
    registry: ProcessorRegistry, output_path: Path
) -> None:
    """Test the aggregate for no resources."""
    path = await registry.final.create_final_manifest({}, output_path)
    assert read_docs(path)[0]["resources"] == []


async def test_populate_container_details(events: list[str]) -> None:
    """Test populating the cache through the project processor."""
    registry = default_registry(FakeDetailsService(events), FakeBuilder(events))
    cache = ContainerDetailsCache()

    await registry.project.populate_container_details("apiservice", PROJECT, cache)
    details = cache.get("apiservice")
    assert details.full_image == "registry.example.com/shop/apiservice:1.0"

    with pytest.raises(ContainerDetailsCacheError):
        await registry.project.populate_container_details(
            "apiservice", PROJECT, cache
        )
    assert cache.get("apiservice") is details
    assert events == ["details:apiservice"]


async def test_build_and_push_requires_details(events: list[str]) -> None:
    """Test building a project before its details are populated."""
    registry = default_registry(FakeDetailsService(events), FakeBuilder(events))
    with pytest.raises(MissingContainerDetailsError):
        await registry.project.build_and_push(
            "apiservice", PROJECT, ContainerDetailsCache()
        )
    assert events == []


def test_registry_kinds(registry: ProcessorRegistry) -> None:
    """Test every processed kind resolves to a processor."""
    assert registry.kinds == [
        ResourceKind.PROJECT,
        ResourceKind.POSTGRES_SERVER,
        ResourceKind.POSTGRES_DATABASE,
        ResourceKind.REDIS,
        ResourceKind.RABBITMQ,
    ]
    assert registry.resolve(None) is None
    assert registry.resolve(ResourceKind.FINAL) is None


def test_registry_duplicate_kind(registry: ProcessorRegistry) -> None:
    """Test a kind may only be registered once."""
    writer = ManifestWriter()
    with pytest.raises(ValueError, match="Duplicate processor"):
        ProcessorRegistry(
            project=registry.project,
            final=registry.final,
            processors=[RedisProcessor(writer), RedisProcessor(writer)],
        )


@pytest.mark.parametrize(
    "name",
    ["", ".", "..", "../outside", "nested/cache", "nested\\cache"],
    ids=["empty", "current", "parent", "parent-child", "slash", "backslash"],
)
async def test_invalid_resource_name(
    registry: ProcessorRegistry, tmp_path: Path, name: str
) -> None:
    """Test a name that is not a single directory never touches other files."""
    output_path = tmp_path / "output"
    existing = output_path / "cache" / "redis.yml"
    existing.parent.mkdir(parents=True)
    existing.write_text("existing")
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "keep.yml").write_text("keep")

    processor = registry.resolve(ResourceKind.REDIS)
    assert processor is not None
    assert not await processor.create_manifests(
        name, RedisResource(type="redis.v0"), output_path, ContainerDetailsCache()
    )
    assert existing.read_text() == "existing"
    assert (outside / "keep.yml").read_text() == "keep"
