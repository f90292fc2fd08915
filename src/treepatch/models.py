"""Data model for file records, patch entries and run reports."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import AsyncIterator, Dict, Iterable, Optional, Set

import aiofiles

from treepatch.config import DEFAULT_CHUNK_SIZE


class Status(str, Enum):
    """Diff status of a path. Values are the manifest tokens."""

    NEW = "new"
    CHANGED = "changed"
    DELETED = "deleted"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FileRecord:
    """A file offered by a file source.

    Attributes:
        path: Relative path in canonical POSIX form
        size: Content length in bytes
        is_dir: True for directory entries, which carry no content
        source: On-disk file holding the content
        data: In-memory content, used instead of source when set
    """

    path: str
    size: int = 0
    is_dir: bool = False
    source: Optional[Path] = None
    data: Optional[bytes] = None

    @classmethod
    def from_bytes(cls, path: str, data: bytes) -> "FileRecord":
        return cls(path=path, size=len(data), data=data)

    @property
    def has_content(self) -> bool:
        return not self.is_dir and (self.data is not None or self.source is not None)

    async def chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Stream the record's content.

        Raises:
            ValueError: If the record has no content handle
        """
        if self.data is not None:
            for offset in range(0, len(self.data), chunk_size):
                yield self.data[offset : offset + chunk_size]
            return

        if self.source is None:
            raise ValueError(f"File record has no content: {self.path}")

        async with aiofiles.open(self.source, "rb") as f:
            while chunk := await f.read(chunk_size):
                yield chunk


@dataclass(frozen=True)
class PatchEntry:
    """A file path tagged with its diff status.

    NEW and CHANGED entries carry the record supplying their content.
    DELETED entries produced by a diff carry no record; when read back
    from a patch, the record's source names the file to remove.
    """

    path: str
    status: Status
    file: Optional[FileRecord] = None


@dataclass
class PatchReport:
    """Count of files per status.

    Attributes:
        new: Files present only in the incoming tree
        changed: Files present in both trees with different content
        deleted: Files present only in the baseline tree
    """

    new: int = 0
    changed: int = 0
    deleted: int = 0

    @classmethod
    def from_statuses(cls, statuses: Iterable[Status]) -> "PatchReport":
        report = cls()
        for status in statuses:
            report.add(status)
        return report

    def add(self, status: Status) -> None:
        if status is Status.NEW:
            self.new += 1
        elif status is Status.CHANGED:
            self.changed += 1
        elif status is Status.DELETED:
            self.deleted += 1
        else:
            raise ValueError(f"Unknown status: {status!r}")

    @property
    def total_changes(self) -> int:
        """Total number of files in the patch."""
        return self.new + self.changed + self.deleted

    def __str__(self) -> str:
        return f"{self.changed} changed, {self.deleted} deleted, {self.new} new"


@dataclass
class DiffState:
    """State of one diff run.

    Attributes:
        accounted: Baseline paths matched by an incoming file, in POSIX form
        report: Counts of the entries emitted so far
    """

    accounted: Set[str] = field(default_factory=set)
    report: PatchReport = field(default_factory=PatchReport)

    def tag(self, path: str, status: Status, file: Optional[FileRecord] = None) -> PatchEntry:
        """Create an entry and count it."""
        self.report.add(status)
        return PatchEntry(path=path, status=status, file=file)


Manifest = Dict[str, Status]
