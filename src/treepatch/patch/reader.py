"""Reconstruct tagged entries from a patch directory."""

from pathlib import Path
from typing import AsyncIterator, List, Optional

import aiofiles.os
from loguru import logger

from treepatch.config import PatchConfig, config as default_config
from treepatch.exceptions import ManifestParseError
from treepatch.manifest import PatchStore
from treepatch.models import FileRecord, PatchEntry, PatchReport, Status
from treepatch.utils import localized_path, relative_posix


class PatchReader:
    """
    Reads a patch directory back into a stream of entries.

    NEW and CHANGED entries are sourced from the content stored in the patch
    directory. DELETED entries point at the file to remove in the
    destination tree.
    """

    def __init__(
        self,
        patch_dir: Path,
        destination: Optional[Path] = None,
        base: Optional[Path] = None,
        config: Optional[PatchConfig] = None,
    ):
        """
        Args:
            patch_dir: Patch directory to read
            destination: Tree the patch will be applied to, defaults to "."
            base: Directory that paths of stored content are made relative
                to, defaults to the patch directory
            config: Settings, defaults to the global config

        Raises:
            ValueError: If base is not the patch directory or one of its parents
        """
        self.config = config or default_config
        self.store = PatchStore(Path(patch_dir), self.config.manifest_name)
        self.destination = Path(destination) if destination is not None else Path(".")
        self.base = Path(base) if base is not None else self.store.root
        self.store.root.relative_to(self.base)

    async def entries(self) -> List[PatchEntry]:
        """
        Load the whole patch.

        The manifest is parsed and every stored file is checked before any
        entry is returned, so a corrupt patch yields nothing.

        Raises:
            ManifestParseError: If the manifest is missing or malformed, or a
                stored file listed in it is missing
        """
        manifest = await self.store.load_manifest()
        report = PatchReport.from_statuses(manifest.values())
        logger.info(f"Patched files: {report}")

        entries = []
        for path, status in manifest.items():
            if status is Status.DELETED:
                target = self.destination / localized_path(path)
                record = FileRecord(path=path, source=target)
                entries.append(PatchEntry(path=path, status=status, file=record))
                continue

            source = self.store.content_path(path)
            try:
                source_stat = await aiofiles.os.stat(source)
            except OSError as e:
                logger.error(f"Missing content for {path} in {self.store.root}: {e}")
                raise ManifestParseError(
                    f"Missing content for {path} in {self.store.root}: {e}"
                ) from e

            rel_path = relative_posix(source, self.base)
            record = FileRecord(path=rel_path, size=source_stat.st_size, source=source)
            entries.append(PatchEntry(path=rel_path, status=status, file=record))

        return entries

    async def stream(self) -> AsyncIterator[PatchEntry]:
        """Yield the patch entries in manifest order."""
        for entry in await self.entries():
            yield entry
