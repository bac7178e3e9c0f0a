"""Tests for the aspire-kustomize `endtoend` and `build` commands."""

import pytest

from aspire_kustomize.exceptions import (
    AspireException,
    CommandException,
    InputException,
)
from aspire_kustomize.pipeline import PipelineResult
from aspire_kustomize.selector import PromptSelector, SelectAll, SelectNames
from aspire_kustomize.tool.endtoend import check_result
from aspire_kustomize.tool.selector import build_selector

from . import run_command


def test_check_result() -> None:
    """Test a run without failures succeeds."""
    check_result(PipelineResult(skipped=["frontend"]))


def test_check_result_failures() -> None:
    """Test failed resources are reported as an error."""
    result = PipelineResult(
        build_failures={"catalogservice": "return code 1"}, failed=["basketcache"]
    )
    with pytest.raises(
        AspireException,
        match="Failed to process resources: catalogservice, basketcache",
    ):
        check_result(result)


def test_build_selector() -> None:
    """Test choosing a selector from the flags."""
    assert isinstance(build_selector(True, None), SelectAll)
    assert isinstance(build_selector(False, ["cache"]), SelectNames)
    assert isinstance(build_selector(False, None), PromptSelector)
    with pytest.raises(InputException, match="either --all or --components"):
        build_selector(True, ["cache"])


async def test_build_failure() -> None:
    """Test a build fails when the projects cannot be published."""
    with pytest.raises(CommandException, match="return code 1"):
        await run_command(
            [
                "build",
                "--all",
                "--manifest-path",
                "tests/testdata/aspire-manifest.json",
                "--container-details",
                "static",
            ]
        )


async def test_help() -> None:
    """Test the commands are registered."""
    result = await run_command(["--help"])
    for command in ("endtoend", "build", "generate"):
        assert command in result
