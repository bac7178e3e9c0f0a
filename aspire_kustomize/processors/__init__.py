"""Processors that turn manifest resources into Kubernetes manifests."""

from .base import Processor
from .final import FinalProcessor
from .postgres import PostgresDatabaseProcessor, PostgresServerProcessor
from .project import ProjectProcessor
from .rabbitmq import RabbitMqProcessor
from .redis import RedisProcessor
from .registry import ProcessorRegistry, default_registry

__all__ = [
    "Processor",
    "FinalProcessor",
    "PostgresDatabaseProcessor",
    "PostgresServerProcessor",
    "ProjectProcessor",
    "RabbitMqProcessor",
    "RedisProcessor",
    "ProcessorRegistry",
    "default_registry",
]
