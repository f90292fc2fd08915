"""Classify incoming files against a baseline directory."""

import stat
from pathlib import Path
from typing import AsyncIterable, AsyncIterator, Optional

from loguru import logger

from treepatch.config import PatchConfig, config as default_config
from treepatch.file_utils import stat_or_none
from treepatch.hashing import contents_equal
from treepatch.models import DiffState, FileRecord, PatchEntry, Status
from treepatch.patch.stream import buffered
from treepatch.source import walk_files
from treepatch.utils import localized_path, posix_path, relative_posix


class TreeDiffer:
    """
    Compares a stream of incoming files with a baseline tree on disk.

    Incoming files are tagged NEW when absent from the baseline, CHANGED when
    their size or content differs, and dropped when identical. Once the
    incoming stream is exhausted, baseline files no incoming file matched
    are tagged DELETED.
    """

    def __init__(self, baseline: Path, config: Optional[PatchConfig] = None):
        self.baseline = Path(baseline)
        self.config = config or default_config

    async def diff(
        self,
        files: AsyncIterable[FileRecord],
        state: Optional[DiffState] = None,
        high_water_mark: Optional[int] = None,
    ) -> AsyncIterator[PatchEntry]:
        """
        Diff incoming files against the baseline.

        Args:
            files: Incoming file records, directory entries are skipped
            state: Per-run state to record into; a fresh one is used if None
            high_water_mark: Buffer size for the incoming stream

        Yields:
            NEW and CHANGED entries in incoming order, then DELETED entries
            in baseline walk order

        Raises:
            StatError: If baseline metadata cannot be read
            HashError: If content of either side cannot be hashed
        """
        state = state if state is not None else DiffState()
        high_water_mark = high_water_mark or self.config.high_water_mark

        logger.debug(f"Diffing against baseline: {self.baseline}")
        async for record in buffered(files, high_water_mark):
            entry = await self.classify(record, state)
            if entry is not None:
                yield entry

        async for entry in self.find_deleted(state):
            yield entry

        logger.info(f"Patched files: {state.report}")

    async def classify(self, record: FileRecord, state: DiffState) -> Optional[PatchEntry]:
        """
        Decide the status of one incoming file.

        Returns:
            The tagged entry, or None for directories and unchanged files
        """
        if record.is_dir:
            return None

        rel_path = posix_path(record.path)
        baseline_path = self.baseline / localized_path(rel_path)
        baseline_stat = await stat_or_none(baseline_path)

        if baseline_stat is None or not stat.S_ISREG(baseline_stat.st_mode):
            logger.debug(f"new: {rel_path}")
            return state.tag(rel_path, Status.NEW, record)

        state.accounted.add(rel_path)

        if baseline_stat.st_size != record.size:
            logger.debug(
                f"changed: {rel_path} (size {baseline_stat.st_size} -> {record.size})"
            )
            return state.tag(rel_path, Status.CHANGED, record)

        if await contents_equal(baseline_path, record, self.config.chunk_size):
            return None

        logger.debug(f"changed: {rel_path} (content)")
        return state.tag(rel_path, Status.CHANGED, record)

    async def find_deleted(self, state: DiffState) -> AsyncIterator[PatchEntry]:
        """Yield a DELETED entry for every baseline file not accounted for."""
        async for path in walk_files(self.baseline):
            rel_path = relative_posix(path, self.baseline)
            if rel_path not in state.accounted:
                logger.debug(f"deleted: {rel_path}")
                yield state.tag(rel_path, Status.DELETED)
