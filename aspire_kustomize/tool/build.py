"""Aspire-kustomize build action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
from typing import cast

from . import selector
from .endtoend import check_result

_LOGGER = logging.getLogger(__name__)


class BuildAction:
    """Aspire-kustomize build action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "build",
                help="Build and push project containers",
                description="""Generates the Aspire manifest, then builds and
                    pushes the containers of every selected project without
                    writing any manifests.""",
            ),
        )
        selector.add_common_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        pipeline = selector.build_pipeline(generate_manifests=False, **kwargs)
        result = await pipeline.run()
        check_result(result)
