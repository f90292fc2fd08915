"""On-disk patch set: a manifest of path statuses plus a content directory.

Layout of a patch directory::

    patch.json          {"relative/path": "new" | "changed" | "deleted", ...}
    relative/path       full content of every new or changed file

Deleted paths appear in the manifest only.
"""

import json
from pathlib import Path
from typing import Dict, Optional

import aiofiles
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from treepatch.config import MANIFEST_NAME
from treepatch.exceptions import ManifestParseError, PatchWriteError
from treepatch.file_utils import ensure_directory, remove_tree
from treepatch.models import Manifest, Status
from treepatch.utils import localized_path, posix_path, safe_posix_path

_manifest_adapter = TypeAdapter(Dict[str, Status])


def dump_manifest(manifest: Manifest) -> str:
    """Serialize a manifest with tab indentation, keys in insertion order."""
    return json.dumps(
        {posix_path(path): Status(status).value for path, status in manifest.items()},
        indent="\t",
        ensure_ascii=False,
    )


def parse_manifest(content: str) -> Manifest:
    """
    Parse manifest text.

    Args:
        content: JSON text of the manifest

    Returns:
        Mapping of canonical POSIX path to Status, in file order

    Raises:
        ManifestParseError: If the text is not a JSON object of path to
            status token, or a path is absolute or leaves the tree
    """
    try:
        entries = _manifest_adapter.validate_json(content)
    except ValidationError as e:
        raise ManifestParseError(f"Invalid manifest: {e}") from e

    manifest: Manifest = {}
    for key, status in entries.items():
        try:
            manifest[safe_posix_path(key)] = status
        except ValueError as e:
            raise ManifestParseError(f"Invalid path in manifest: {e}") from e
    return manifest


class PatchStore:
    """A patch directory and the manifest at its root."""

    def __init__(self, root: Path, manifest_name: Optional[str] = None):
        self.root = Path(root)
        self.manifest_name = manifest_name or MANIFEST_NAME

    @property
    def manifest_path(self) -> Path:
        return self.root / self.manifest_name

    def manifest_key(self, path: str) -> str:
        """
        Canonical manifest key for an entry path.

        Raises:
            PatchWriteError: If the path would leave the patch directory
        """
        try:
            return safe_posix_path(path)
        except ValueError as e:
            logger.error(f"Refusing to store outside {self.root}: {e}")
            raise PatchWriteError(f"Refusing to store outside {self.root}: {e}") from e

    def content_path(self, path: str) -> Path:
        """Location of a stored file for a manifest path."""
        return self.root / localized_path(self.manifest_key(path))

    async def reset(self) -> None:
        """Destroy any existing patch directory and create it empty."""
        logger.debug(f"Resetting patch directory: {self.root}")
        await remove_tree(self.root)
        await ensure_directory(self.root)

    async def save_manifest(self, manifest: Manifest) -> None:
        """
        Write the manifest file.

        Raises:
            PatchWriteError: If the file cannot be written
        """
        try:
            async with aiofiles.open(self.manifest_path, "w", encoding="utf-8") as f:
                await f.write(dump_manifest(manifest))
        except OSError as e:
            logger.error(f"Failed to write manifest {self.manifest_path}: {e}")
            raise PatchWriteError(f"Failed to write manifest {self.manifest_path}: {e}") from e

    async def load_manifest(self) -> Manifest:
        """
        Read and parse the manifest file.

        Raises:
            ManifestParseError: If the file is missing, unreadable or malformed
        """
        try:
            async with aiofiles.open(self.manifest_path, "r", encoding="utf-8") as f:
                content = await f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read manifest {self.manifest_path}: {e}")
            raise ManifestParseError(f"Failed to read manifest {self.manifest_path}: {e}") from e

        try:
            return parse_manifest(content)
        except ManifestParseError as e:
            logger.error(f"{self.manifest_path}: {e}")
            raise
