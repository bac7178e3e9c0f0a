"""Aspire-kustomize endtoend action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
from typing import cast

from aspire_kustomize.exceptions import AspireException
from aspire_kustomize.pipeline import PipelineResult

from . import selector

_LOGGER = logging.getLogger(__name__)


def check_result(result: PipelineResult) -> None:
    """Raise when any resource failed so the command exits with an error."""
    failures = list(result.build_failures) + result.failed
    if failures:
        raise AspireException(f"Failed to process resources: {', '.join(failures)}")


class EndToEndAction:
    """Aspire-kustomize endtoend action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "endtoend",
                help="Build and push containers and generate Kustomize manifests",
                description="""Generates the Aspire manifest, builds and pushes
                    the project containers, then writes Kustomize manifests for
                    every selected resource.""",
            ),
        )
        selector.add_common_flags(args)
        selector.add_output_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        pipeline = selector.build_pipeline(**kwargs)
        result = await pipeline.run()
        check_result(result)
