"""Persist a diff as a patch directory."""

from pathlib import Path
from typing import AsyncIterable, AsyncIterator, Optional

from loguru import logger

from treepatch.config import PatchConfig, config as default_config
from treepatch.exceptions import PatchWriteError
from treepatch.file_utils import write_record
from treepatch.manifest import PatchStore
from treepatch.models import Manifest, PatchEntry, PatchReport, Status
from treepatch.patch.stream import drain


class PatchWriter:
    """
    Writes tagged entries into a patch directory.

    The directory is destroyed and recreated on every write, then receives
    the content of each NEW and CHANGED entry and finally the manifest.
    """

    def __init__(self, patch_dir: Path, config: Optional[PatchConfig] = None):
        self.config = config or default_config
        self.store = PatchStore(Path(patch_dir), self.config.manifest_name)
        self.report = PatchReport()

    async def stream(
        self, entries: AsyncIterable[PatchEntry], passthrough: bool = False
    ) -> AsyncIterator[PatchEntry]:
        """
        Write entries to the patch directory.

        Args:
            entries: Tagged entries, usually from a diff
            passthrough: Yield each entry once it has been persisted

        Yields:
            The input entries when passthrough is set

        Raises:
            PatchWriteError: If an entry path leaves the patch directory, or the
                directory, a content file or the manifest cannot be written
        """
        await self.store.reset()
        manifest: Manifest = {}
        self.report = PatchReport()

        async for entry in entries:
            path = self.store.manifest_key(entry.path)
            if entry.status in (Status.NEW, Status.CHANGED):
                if entry.file is None or not entry.file.has_content:
                    raise PatchWriteError(f"No content for {entry.status} file: {path}")
                await write_record(
                    entry.file, self.store.content_path(path), self.config.chunk_size
                )

            manifest[path] = entry.status
            self.report.add(entry.status)

            if passthrough:
                yield entry

        await self.store.save_manifest(manifest)
        logger.info(f"Patch successfully created: {self.store.root} ({self.report})")

    async def write(self, entries: AsyncIterable[PatchEntry]) -> PatchReport:
        """Write entries and wait for the patch to be complete."""
        await drain(self.stream(entries))
        return self.report
