"""Content digests used to decide whether two same-size files are equal."""

import asyncio
import hashlib
import inspect
from collections.abc import AsyncIterable
from pathlib import Path
from typing import Any, BinaryIO, Union

import aiofiles
from loguru import logger

from treepatch.config import DEFAULT_CHUNK_SIZE
from treepatch.exceptions import HashError, InvalidInputKindError
from treepatch.models import FileRecord

ContentSource = Union[bytes, bytearray, memoryview, AsyncIterable, BinaryIO]


async def _read(stream: Any, size: int) -> bytes:
    chunk = stream.read(size)
    if inspect.isawaitable(chunk):
        chunk = await chunk
    return chunk


async def compute_checksum(source: ContentSource, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """
    Compute SHA-256 checksum of a byte buffer or byte stream.

    Args:
        source: Bytes-like buffer, object with a read(size) method (plain or
            awaitable, e.g. an aiofiles handle),
            or async iterable of bytes chunks
        chunk_size: Read size used for objects with a read method

    Returns:
        SHA-256 hex digest

    Raises:
        InvalidInputKindError: If source is not a supported content kind
        HashError: If reading the stream fails
    """
    digest = hashlib.sha256()

    if isinstance(source, (bytes, bytearray, memoryview)):
        digest.update(source)
        return digest.hexdigest()

    try:
        if callable(getattr(source, "read", None)):
            while chunk := await _read(source, chunk_size):
                digest.update(chunk)
        elif isinstance(source, AsyncIterable):
            async for chunk in source:
                digest.update(chunk)
        else:
            raise InvalidInputKindError(
                f"Cannot hash content of type {type(source).__name__}: "
                "expected bytes or an async byte stream"
            )
    except HashError:
        raise
    except Exception as e:
        logger.error(f"Failed to compute checksum: {e}")
        raise HashError(f"Failed to compute checksum: {e}") from e

    return digest.hexdigest()


async def checksum_file(path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """
    Compute SHA-256 checksum of a file on disk.

    Raises:
        HashError: If the file cannot be opened or read
    """
    try:
        async with aiofiles.open(path, "rb") as f:
            return await compute_checksum(f, chunk_size)
    except HashError:
        raise
    except OSError as e:
        logger.error(f"Failed to read {path}: {e}")
        raise HashError(f"Failed to read {path}: {e}") from e


async def checksum_record(record: FileRecord, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Compute SHA-256 checksum of a file record's content."""
    if record.data is not None:
        return await compute_checksum(record.data)
    if record.source is not None:
        return await checksum_file(record.source, chunk_size)
    raise InvalidInputKindError(f"File record has no content: {record.path}")


async def contents_equal(
    baseline: Path, record: FileRecord, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> bool:
    """Hash a baseline file and an incoming record concurrently and compare."""
    baseline_checksum, incoming_checksum = await asyncio.gather(
        checksum_file(baseline, chunk_size),
        checksum_record(record, chunk_size),
    )
    logger.debug(
        f"{record.path}: baseline {baseline_checksum[:8]}, incoming {incoming_checksum[:8]}"
    )
    return baseline_checksum == incoming_checksum
