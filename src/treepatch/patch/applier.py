"""Apply tagged entries to a destination tree."""

import stat
from pathlib import Path, PurePosixPath
from typing import AsyncIterable, AsyncIterator, List, Optional

import aiofiles.os
from loguru import logger

from treepatch.config import PatchConfig, config as default_config
from treepatch.exceptions import PatchWriteError
from treepatch.file_utils import delete_file, prune_directory, stat_or_none, write_record
from treepatch.models import PatchEntry, PatchReport, Status
from treepatch.patch.stream import drain
from treepatch.utils import localized_path


class PatchApplier:
    """
    Mutates a destination tree according to tagged entries.

    Entries are applied one by one; there is no rollback, so files applied
    before a failure stay applied.

    A path may change kind between the two trees. A NEW file below a path
    that is still a file replaces that file, which the patch deletes anyway.
    A NEW file at a path that is still a directory is applied once the rest
    of the stream, and with it the directory's deletions, has been applied.
    """

    def __init__(self, destination: Optional[Path] = None, config: Optional[PatchConfig] = None):
        self.destination = Path(destination) if destination is not None else Path(".")
        self.config = config or default_config
        self.report = PatchReport()

    def target_path(self, entry: PatchEntry) -> Path:
        """Path in the destination tree affected by an entry."""
        if entry.status is Status.DELETED and entry.file is not None and entry.file.source:
            return entry.file.source
        return self.destination / localized_path(entry.path)

    async def clear_parents(self, path: str) -> None:
        """Remove a regular file standing where a parent directory of path belongs."""
        for parent in reversed(PurePosixPath(path).parents[:-1]):
            parent_path = self.destination / localized_path(str(parent))
            parent_stat = await stat_or_none(parent_path)
            if parent_stat is None:
                return
            if stat.S_ISREG(parent_stat.st_mode):
                logger.debug(f"replacing file with directory: {parent_path}")
                await delete_file(parent_path)
                return

    async def apply_entry(self, entry: PatchEntry) -> None:
        """
        Apply a single entry.

        DELETED removes the target if present. NEW and CHANGED write the
        entry's content over the target.

        Raises:
            PatchWriteError: If the target cannot be written or removed
        """
        target = self.target_path(entry)

        if entry.status is Status.DELETED:
            if await aiofiles.os.path.isdir(target):
                # the file was already replaced by a directory
                logger.debug(f"already absent: {target}")
            elif await delete_file(target):
                logger.debug(f"deleted: {target}")
            else:
                logger.debug(f"already absent: {target}")
            return

        if entry.file is None or not entry.file.has_content:
            raise PatchWriteError(f"No content for {entry.status} file: {entry.path}")

        # a CHANGED file replaces an existing one, so only NEW creates directories
        make_parents = entry.status is Status.NEW
        if make_parents:
            await self.clear_parents(entry.path)
            if await aiofiles.os.path.isdir(target):
                await prune_directory(target)

        await write_record(entry.file, target, self.config.chunk_size, make_parents=make_parents)
        logger.debug(f"{entry.status}: {target}")

    async def stream(
        self, entries: AsyncIterable[PatchEntry], passthrough: bool = False
    ) -> AsyncIterator[PatchEntry]:
        """
        Apply entries in order.

        NEW entries whose target is still a directory are held back until
        all other entries are applied.

        Args:
            entries: Tagged entries, usually from a PatchReader
            passthrough: Yield each entry once it has been applied

        Yields:
            The input entries when passthrough is set
        """
        self.report = PatchReport()
        deferred: List[PatchEntry] = []

        async for entry in entries:
            if entry.status is Status.NEW and await aiofiles.os.path.isdir(
                self.target_path(entry)
            ):
                logger.debug(f"waiting for deletions below: {entry.path}")
                deferred.append(entry)
                continue
            await self.apply_entry(entry)
            self.report.add(entry.status)
            if passthrough:
                yield entry

        for entry in deferred:
            await self.apply_entry(entry)
            self.report.add(entry.status)
            if passthrough:
                yield entry

        logger.info(f"Patch successfully applied: {self.destination} ({self.report})")

    async def apply(self, entries: AsyncIterable[PatchEntry]) -> PatchReport:
        """Apply entries and wait for completion."""
        await drain(self.stream(entries))
        return self.report
