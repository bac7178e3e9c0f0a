"""Exceptions related to aspire-kustomize."""

__all__ = [
    "AspireException",
    "InputException",
    "CommandException",
    "ManifestAcquisitionException",
    "ContainerBuildException",
    "ContainerDetailsException",
    "ContainerDetailsCacheError",
    "MissingContainerDetailsError",
]


class AspireException(Exception):
    """Generic base exception used for this library."""


class InputException(AspireException):
    """Raised when the input files or values are not formatted as expected."""


class CommandException(AspireException):
    """Raised when there is a failure running a subcommand."""


class ManifestAcquisitionException(CommandException):
    """Raised when the app host could not produce a manifest."""


class ContainerBuildException(CommandException):
    """Raised when building or pushing a project container fails."""


class ContainerDetailsException(CommandException):
    """Raised when the container properties of a project cannot be read."""


class ContainerDetailsCacheError(AspireException):
    """Raised when container details for a project are populated twice."""

    def __init__(self, resource_name: str) -> None:
        super().__init__(
            f"Failed to add container details for project {resource_name} to cache"
        )
        self.resource_name = resource_name


class MissingContainerDetailsError(AspireException):
    """Raised when container details are read before they were populated.

    This indicates the pipeline ran phases out of order and is not recoverable.
    """

    def __init__(self, resource_name: str) -> None:
        super().__init__(f"Container details for project {resource_name} not found")
        self.resource_name = resource_name

