"""Async file primitives used by the patch stages."""

import asyncio
import contextlib
import os
import shutil
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
from loguru import logger

from treepatch.config import DEFAULT_CHUNK_SIZE
from treepatch.exceptions import PatchWriteError, StatError
from treepatch.models import FileRecord


async def stat_or_none(path: Path) -> Optional[os.stat_result]:
    """
    Stat a path, returning None if it does not exist.

    Args:
        path: Path to stat

    Returns:
        The stat result, or None if nothing exists at path

    Raises:
        StatError: If the metadata cannot be read for any other reason
    """
    try:
        return await aiofiles.os.stat(path)
    except (FileNotFoundError, NotADirectoryError):
        return None
    except OSError as e:
        logger.error(f"Failed to stat {path}: {e}")
        raise StatError(f"Failed to stat {path}: {e}") from e


async def ensure_directory(path: Path) -> None:
    """
    Ensure directory exists, creating if necessary.

    Raises:
        PatchWriteError: If directory creation fails
    """
    try:
        await aiofiles.os.makedirs(path, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create directory: {path}: {e}")
        raise PatchWriteError(f"Failed to create directory {path}: {e}") from e


async def remove_tree(path: Path) -> None:
    """
    Remove a directory tree, or a single file, if present.

    Raises:
        PatchWriteError: If removal fails
    """
    try:
        if await aiofiles.os.path.isdir(path) and not await aiofiles.os.path.islink(path):
            await asyncio.to_thread(shutil.rmtree, path)
        else:
            await aiofiles.os.remove(path)
    except FileNotFoundError:
        return
    except OSError as e:
        logger.error(f"Failed to remove {path}: {e}")
        raise PatchWriteError(f"Failed to remove {path}: {e}") from e


async def write_record(
    record: FileRecord,
    target: Path,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    make_parents: bool = True,
) -> int:
    """
    Copy a record's content to target, atomically via a temporary file.

    Args:
        record: Record supplying the content
        target: Destination file path
        chunk_size: Copy buffer size
        make_parents: Create missing parent directories first

    Returns:
        Number of bytes written

    Raises:
        PatchWriteError: If the content cannot be read or written
    """
    if make_parents:
        await ensure_directory(target.parent)

    # unique and created exclusively, never an existing file of the tree
    temp_path = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")
    created = False
    written = 0
    try:
        async with aiofiles.open(temp_path, "xb") as f:
            created = True
            async for chunk in record.chunks(chunk_size):
                await f.write(chunk)
                written += len(chunk)
        await aiofiles.os.replace(temp_path, target)
    except (OSError, ValueError) as e:
        if created:
            with contextlib.suppress(FileNotFoundError):
                await aiofiles.os.remove(temp_path)
        logger.error(f"Failed to write file: {target}: {e}")
        raise PatchWriteError(f"Failed to write file {target}: {e}") from e

    return written


async def delete_file(path: Path) -> bool:
    """
    Delete file if it exists.

    Returns:
        True if a file was removed, False if nothing was there

    Raises:
        PatchWriteError: If deletion fails
    """
    try:
        await aiofiles.os.remove(path)
    except (FileNotFoundError, NotADirectoryError):
        return False
    except OSError as e:
        logger.error(f"Failed to delete file {path}: {e}")
        raise PatchWriteError(f"Failed to delete file {path}: {e}") from e
    return True


def _prune_empty(path: Path) -> None:
    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            _prune_empty(child)
    path.rmdir()


async def prune_directory(path: Path) -> None:
    """
    Remove a directory tree that no longer holds any file.

    Raises:
        PatchWriteError: If a file remains below path or removal fails
    """
    try:
        await asyncio.to_thread(_prune_empty, path)
    except OSError as e:
        logger.error(f"Failed to remove directory {path}: {e}")
        raise PatchWriteError(f"Failed to remove directory {path}: {e}") from e
