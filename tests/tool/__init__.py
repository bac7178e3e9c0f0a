"""Test helpers for aspire-kustomize tools."""

from aspire_kustomize.command import Command, run

ASPIRE_KUSTOMIZE_BIN = "aspire-kustomize"


async def run_command(args: list[str], env: dict[str, str] | None = None) -> str:
    return await run(Command([ASPIRE_KUSTOMIZE_BIN] + args, env=env))
