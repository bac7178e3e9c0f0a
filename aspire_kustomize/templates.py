"""Kubernetes objects rendered for each resource kind.

Every function returns plain dictionaries ready to be serialized as yaml
documents by the ManifestWriter.
"""

from dataclasses import dataclass, field
import logging
from typing import Any

from slugify import slugify

from .manifest import Binding

_LOGGER = logging.getLogger(__name__)

# No public API
__all__: list[str] = []


DEPLOYMENT_FILE = "deployment.yml"
SERVICE_FILE = "service.yml"
KUSTOMIZATION_FILE = "kustomization.yml"
POSTGRES_SERVER_FILE = "postgres-server.yml"
DATABASE_FILE = "database.yml"
REDIS_FILE = "redis.yml"
RABBITMQ_FILE = "rabbitmq.yml"

KUSTOMIZE_API_VERSION = "kustomize.config.k8s.io/v1beta1"

DEFAULT_PORTS = {"http": 8080, "https": 8443}

POSTGRES_IMAGE = "postgres:16"
POSTGRES_PORT = 5432
REDIS_IMAGE = "redis:7"
REDIS_PORT = 6379
RABBITMQ_IMAGE = "rabbitmq:3-management"
RABBITMQ_PORT = 5672

# Replaced by an overlay or secret manager before applying to a cluster
PASSWORD_PLACEHOLDER = "..PLACEHOLDER_password.."


def kube_name(name: str) -> str:
    """Return a DNS-1123 compliant object name for a resource name."""
    return slugify(name, lowercase=True, separator="-", max_length=63)


@dataclass(frozen=True)
class PortData:
    """A named container port."""

    name: str
    port: int


@dataclass(frozen=True)
class ProjectTemplateData:
    """Values used to render the manifests of a project resource."""

    name: str
    container_image: str
    env: dict[str, str] = field(default_factory=dict)
    ports: list[PortData] = field(default_factory=list)
    manifests: list[str] = field(default_factory=list)


def binding_ports(bindings: dict[str, Binding]) -> list[PortData]:
    """Container ports for the project bindings, defaulting to plain http."""
    ports = []
    for binding_name, binding in bindings.items():
        port = binding.container_port or DEFAULT_PORTS.get(binding.scheme)
        if port is None:
            _LOGGER.warning(
                "Binding %s with scheme %s has no container port, skipping",
                binding_name,
                binding.scheme,
            )
            continue
        ports.append(PortData(name=kube_name(binding_name), port=port))
    if not ports:
        ports.append(PortData(name="http", port=DEFAULT_PORTS["http"]))
    return ports


def _metadata(name: str) -> dict[str, Any]:
    return {"name": kube_name(name), "labels": {"app": kube_name(name)}}


def _deployment(
    name: str,
    image: str,
    ports: list[PortData],
    env: dict[str, str] | None = None,
) -> dict[str, Any]:
    container: dict[str, Any] = {
        "name": kube_name(name),
        "image": image,
        "imagePullPolicy": "IfNotPresent",
        "ports": [{"name": p.name, "containerPort": p.port} for p in ports],
    }
    if env:
        container["env"] = [{"name": k, "value": v} for k, v in env.items()]
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": _metadata(name),
        "spec": {
            "replicas": 1,
            "selector": {"matchLabels": {"app": kube_name(name)}},
            "template": {
                "metadata": {"labels": {"app": kube_name(name)}},
                "spec": {"containers": [container]},
            },
        },
    }


def _service(name: str, ports: list[PortData]) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": _metadata(name),
        "spec": {
            "type": "ClusterIP",
            "selector": {"app": kube_name(name)},
            "ports": [
                {"name": p.name, "port": p.port, "targetPort": p.port} for p in ports
            ],
        },
    }


def project_deployment(data: ProjectTemplateData) -> dict[str, Any]:
    """Deployment running the project container."""
    return _deployment(data.name, data.container_image, data.ports, data.env)


def project_service(data: ProjectTemplateData) -> dict[str, Any]:
    """Service exposing the project container ports."""
    return _service(data.name, data.ports)


def kustomization(resources: list[str]) -> dict[str, Any]:
    """Kustomization listing the resources in the order given."""
    return {
        "apiVersion": KUSTOMIZE_API_VERSION,
        "kind": "Kustomization",
        "resources": list(resources),
    }


def postgres_server(name: str) -> list[dict[str, Any]]:
    """Secret, StatefulSet and headless Service for a Postgres server."""
    ports = [PortData(name="postgres", port=POSTGRES_PORT)]
    container = {
        "name": kube_name(name),
        "image": POSTGRES_IMAGE,
        "ports": [{"name": "postgres", "containerPort": POSTGRES_PORT}],
        "env": [
            {"name": "POSTGRES_USER", "value": "postgres"},
            {
                "name": "POSTGRES_PASSWORD",
                "valueFrom": {
                    "secretKeyRef": {"name": kube_name(name), "key": "password"}
                },
            },
        ],
        "volumeMounts": [{"name": "data", "mountPath": "/var/lib/postgresql/data"}],
    }
    statefulset = {
        "apiVersion": "apps/v1",
        "kind": "StatefulSet",
        "metadata": _metadata(name),
        "spec": {
            "serviceName": kube_name(name),
            "replicas": 1,
            "selector": {"matchLabels": {"app": kube_name(name)}},
            "template": {
                "metadata": {"labels": {"app": kube_name(name)}},
                "spec": {"containers": [container]},
            },
            "volumeClaimTemplates": [
                {
                    "metadata": {"name": "data"},
                    "spec": {
                        "accessModes": ["ReadWriteOnce"],
                        "resources": {"requests": {"storage": "1Gi"}},
                    },
                }
            ],
        },
    }
    secret = {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": _metadata(name),
        "type": "Opaque",
        "stringData": {"password": PASSWORD_PLACEHOLDER},
    }
    service = _service(name, ports)
    service["spec"]["clusterIP"] = "None"
    return [secret, statefulset, service]


def database_config(name: str, parent: str) -> dict[str, Any]:
    """ConfigMap describing a database and the server that hosts it."""
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": _metadata(name),
        "data": {
            "database": name,
            "server": kube_name(parent),
            "port": str(POSTGRES_PORT),
        },
    }


def redis(name: str) -> list[dict[str, Any]]:
    """Deployment and Service for a Redis cache."""
    ports = [PortData(name="redis", port=REDIS_PORT)]
    return [_deployment(name, REDIS_IMAGE, ports), _service(name, ports)]


def rabbitmq(name: str) -> list[dict[str, Any]]:
    """Deployment and Service for a RabbitMQ server."""
    ports = [PortData(name="amqp", port=RABBITMQ_PORT)]
    return [_deployment(name, RABBITMQ_IMAGE, ports), _service(name, ports)]
