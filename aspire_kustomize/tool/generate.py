"""Aspire-kustomize generate action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
from typing import cast

from . import selector
from .endtoend import check_result

_LOGGER = logging.getLogger(__name__)


class GenerateAction:
    """Aspire-kustomize generate action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "generate",
                help="Generate Kustomize manifests for existing containers",
                description="""Writes Kustomize manifests for every selected
                    resource, referencing project containers that were already
                    published.""",
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
        pipeline = selector.build_pipeline(build_containers=False, **kwargs)
        result = await pipeline.run()
        check_result(result)
