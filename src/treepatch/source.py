"""File sources: enumerate a directory tree as file records."""

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, List

from loguru import logger

from treepatch.models import FileRecord
from treepatch.utils import relative_posix


@dataclass(frozen=True)
class DirEntry:
    """A directory listing entry. Symlinked directories are not entered."""

    path: Path
    is_dir: bool
    is_file: bool
    size: int


def _list_directory(directory: Path) -> List[DirEntry]:
    entries = []
    with os.scandir(directory) as it:
        for entry in it:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = not is_dir and entry.is_file()
            size = entry.stat().st_size if is_file else 0
            entries.append(DirEntry(Path(entry.path), is_dir, is_file, size))
    return sorted(entries, key=lambda e: e.path.name)


async def iter_entries(directory: Path) -> AsyncIterator[DirEntry]:
    """
    Walk a directory tree depth-first.

    Each directory is listed in a worker thread so the event loop is never
    blocked by the traversal. Entries are sorted by name within a directory
    and a directory's contents follow the directory entry itself.

    Args:
        directory: Root of the walk, not itself yielded

    Yields:
        Every entry below directory
    """
    for entry in await asyncio.to_thread(_list_directory, directory):
        yield entry
        if entry.is_dir:
            async for child in iter_entries(entry.path):
                yield child


async def walk_files(root: Path) -> AsyncIterator[Path]:
    """
    Yield every regular file below root. A missing root yields nothing.

    Args:
        root: Directory to walk

    Yields:
        Absolute file paths in depth-first order
    """
    if not root.is_dir():
        logger.debug(f"Directory does not exist: {root}")
        return

    async for entry in iter_entries(root):
        if entry.is_file:
            yield entry.path


async def scan_tree(root: Path, include_dirs: bool = True) -> AsyncIterator[FileRecord]:
    """
    Enumerate a directory as file records, the input of a diff.

    Args:
        root: Incoming tree to scan
        include_dirs: Also yield directory entries, which carry no content

    Yields:
        FileRecord per entry with its POSIX relative path and size
    """
    if not root.is_dir():
        logger.debug(f"Directory does not exist: {root}")
        return

    logger.debug(f"Scanning directory: {root}")
    async for entry in iter_entries(root):
        rel_path = relative_posix(entry.path, root)
        if entry.is_dir:
            if include_dirs:
                yield FileRecord(path=rel_path, is_dir=True)
        elif entry.is_file:
            yield FileRecord(path=rel_path, size=entry.size, source=entry.path)
        else:
            logger.debug(f"Skipping special file: {rel_path}")
