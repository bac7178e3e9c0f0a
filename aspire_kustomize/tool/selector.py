"""Library for common command line flags and building the pipeline from them."""

from argparse import ArgumentParser, BooleanOptionalAction
import logging
import pathlib

from aspire_kustomize import apphost, builder, containers, selector
from aspire_kustomize.config import (
    DEFAULT_BUILD_TIMEOUT,
    DEFAULT_OUTPUT_PATH,
    CommandConfig,
    ContainerOptions,
    PipelineConfig,
)
from aspire_kustomize.exceptions import InputException
from aspire_kustomize.pipeline import Pipeline
from aspire_kustomize.processors import default_registry
from aspire_kustomize.report import ConsoleReporter

_LOGGER = logging.getLogger(__name__)

DETAILS_PROJECT = "project"
DETAILS_STATIC = "static"


def add_common_flags(args: ArgumentParser) -> None:
    """Add flags that are common to every pipeline command."""
    args.add_argument(
        "--project-path",
        "-p",
        type=pathlib.Path,
        default=pathlib.Path("."),
        help="Path to the Aspire app host project or its directory",
    )
    args.add_argument(
        "--manifest-path",
        "-m",
        type=pathlib.Path,
        default=None,
        help="Use an existing Aspire manifest instead of running the app host",
    )
    args.add_argument(
        "--all",
        dest="select_all",
        default=False,
        action=BooleanOptionalAction,
        help="Process every resource in the manifest without prompting",
    )
    args.add_argument(
        "--components",
        "-c",
        type=lambda x: [name for name in x.split(",") if name],
        default=None,
        help="A comma separated list of resources to process without prompting",
    )
    add_container_flags(args)


def add_container_flags(args: ArgumentParser) -> None:
    """Add flags that control how project containers are named and published."""
    args.add_argument(
        "--container-registry",
        type=str,
        default=None,
        help="Registry to push project containers to, e.g. `ghcr.io/example`",
    )
    args.add_argument(
        "--container-repository-prefix",
        type=str,
        default=None,
        help="Prefix for the repository name of every project container",
    )
    args.add_argument(
        "--container-image-tag",
        type=str,
        default=None,
        help="Tag for every project container instead of the project's own",
    )
    args.add_argument(
        "--container-details",
        choices=[DETAILS_PROJECT, DETAILS_STATIC],
        default=DETAILS_PROJECT,
        help="Read container properties from the project files with msbuild, "
        "or derive them from the flags and resource names alone",
    )
    args.add_argument(
        "--runtime-identifier",
        type=str,
        default="linux-x64",
        help="The .NET runtime identifier to publish containers for",
    )
    args.add_argument(
        "--build-timeout",
        type=float,
        default=DEFAULT_BUILD_TIMEOUT,
        help="Seconds to allow for running the app host and each container build",
    )


def add_output_flags(args: ArgumentParser) -> None:
    """Add flags for commands that write manifests."""
    args.add_argument(
        "--output-path",
        "-o",
        type=pathlib.Path,
        default=DEFAULT_OUTPUT_PATH,
        help="Directory to write the generated Kustomize manifests to",
    )


def build_selector(
    select_all: bool, components: list[str] | None
) -> selector.ResourceSelector:
    """Return the resource selector for the flags."""
    if select_all and components:
        raise InputException("Specify either --all or --components but not both")
    if select_all:
        return selector.SelectAll()
    if components:
        return selector.SelectNames(components)
    return selector.PromptSelector()


def build_pipeline(  # type: ignore[no-untyped-def]
    project_path: pathlib.Path,
    manifest_path: pathlib.Path | None,
    select_all: bool,
    components: list[str] | None,
    container_registry: str | None,
    container_repository_prefix: str | None,
    container_image_tag: str | None,
    container_details: str,
    runtime_identifier: str,
    build_timeout: float,
    output_path: pathlib.Path = DEFAULT_OUTPUT_PATH,
    build_containers: bool = True,
    generate_manifests: bool = True,
    **kwargs,  # pylint: disable=unused-argument
) -> Pipeline:
    """Create a pipeline from the common command line flags."""
    command_config = CommandConfig(build_timeout=build_timeout)
    options = ContainerOptions(
        registry=container_registry,
        repository_prefix=container_repository_prefix,
        image_tag=container_image_tag,
        runtime_identifier=runtime_identifier,
    )
    source: apphost.ManifestSource
    if manifest_path is not None:
        source = apphost.ExistingManifestSource(manifest_path)
    else:
        source = apphost.AppHostManifestSource(project_path, command_config)

    details_service: containers.ContainerDetailsService
    if container_details == DETAILS_STATIC:
        details_service = containers.StaticContainerDetailsService(options)
    else:
        details_service = containers.ProjectPropertyContainerDetailsService(
            options, source.base_path, command_config
        )
    registry = default_registry(
        details_service,
        builder.DotnetContainerBuilder(source.base_path, options, command_config),
    )
    return Pipeline(
        source,
        build_selector(select_all, components),
        registry,
        PipelineConfig(
            output_path=output_path,
            build_containers=build_containers,
            generate_manifests=generate_manifests,
        ),
        ConsoleReporter(),
    )
