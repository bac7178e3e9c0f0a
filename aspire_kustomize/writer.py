"""Write rendered Kubernetes objects to disk as yaml documents."""

import logging
from pathlib import Path
from shutil import rmtree
from typing import Any

import aiofiles
import yaml

from .context import current_resource

_LOGGER = logging.getLogger(__name__)

# No public API
__all__: list[str] = []


class ManifestWriter:
    """Serializes manifests into an output directory."""

    def reset_directory(self, path: Path) -> None:
        """Recreate the directory so no files from a previous run remain."""
        if path.exists():
            _LOGGER.debug("Removing existing output directory %s", path)
            rmtree(path)
        path.mkdir(parents=True)

    async def write(self, path: Path, docs: list[dict[str, Any]]) -> None:
        """Write the documents to a single multi-document yaml file."""
        content = yaml.dump_all(docs, sort_keys=False, explicit_start=True)
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(str(path), mode="w") as manifest_file:
            await manifest_file.write(content)
        _LOGGER.debug("Wrote %s for resource %s", path, current_resource())
