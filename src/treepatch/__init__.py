"""treepatch - incremental file-tree patches."""

from treepatch.api import apply, apply_patch, create_patch, diff, drain, read, write
from treepatch.exceptions import (
    HashError,
    InvalidInputKindError,
    ManifestParseError,
    PatchError,
    PatchWriteError,
    StatError,
)
from treepatch.models import DiffState, FileRecord, PatchEntry, PatchReport, Status

__version__ = "0.1.0"

__all__ = [
    "DiffState",
    "FileRecord",
    "HashError",
    "InvalidInputKindError",
    "ManifestParseError",
    "PatchEntry",
    "PatchError",
    "PatchReport",
    "PatchWriteError",
    "StatError",
    "Status",
    "apply",
    "apply_patch",
    "create_patch",
    "diff",
    "drain",
    "read",
    "write",
]
