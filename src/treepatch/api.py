"""The diff / write / read / apply operations as composable async streams.

A patch is created and applied by chaining the stages::

    await drain(write(diff(scan_tree(incoming), baseline), patch_dir))
    await drain(apply(read(patch_dir, destination), destination))

Every stage is an async generator, so nothing happens until the last stage
is consumed.
"""

from pathlib import Path
from typing import AsyncIterable, AsyncIterator, Optional

from treepatch.config import PatchConfig
from treepatch.models import DiffState, FileRecord, PatchEntry, PatchReport
from treepatch.patch import PatchApplier, PatchReader, PatchWriter, TreeDiffer, drain
from treepatch.source import scan_tree


def diff(
    files: AsyncIterable[FileRecord],
    baseline: Path,
    *,
    high_water_mark: Optional[int] = None,
    state: Optional[DiffState] = None,
    config: Optional[PatchConfig] = None,
) -> AsyncIterator[PatchEntry]:
    """Tag incoming files against a baseline tree. See TreeDiffer.diff."""
    differ = TreeDiffer(baseline, config)
    return differ.diff(files, state=state, high_water_mark=high_water_mark)


def write(
    entries: AsyncIterable[PatchEntry],
    patch_dir: Path,
    *,
    passthrough: bool = False,
    config: Optional[PatchConfig] = None,
) -> AsyncIterator[PatchEntry]:
    """Persist entries as a patch directory. See PatchWriter.stream."""
    return PatchWriter(patch_dir, config).stream(entries, passthrough=passthrough)


def read(
    patch_dir: Path,
    destination: Optional[Path] = None,
    *,
    base: Optional[Path] = None,
    config: Optional[PatchConfig] = None,
) -> AsyncIterator[PatchEntry]:
    """Stream the entries of a patch directory. See PatchReader.stream."""
    return PatchReader(patch_dir, destination, base=base, config=config).stream()


def apply(
    entries: AsyncIterable[PatchEntry],
    destination: Optional[Path] = None,
    *,
    passthrough: bool = False,
    config: Optional[PatchConfig] = None,
) -> AsyncIterator[PatchEntry]:
    """Apply entries to a destination tree. See PatchApplier.stream."""
    return PatchApplier(destination, config).stream(entries, passthrough=passthrough)


async def create_patch(
    incoming: Path, baseline: Path, patch_dir: Path, config: Optional[PatchConfig] = None
) -> PatchReport:
    """
    Diff an incoming directory against a baseline and write the patch.

    Args:
        incoming: Directory holding the new state of the tree
        baseline: Directory holding the previous state
        patch_dir: Patch directory to (re)create

    Returns:
        Counts of the files in the patch
    """
    writer = PatchWriter(patch_dir, config)
    entries = TreeDiffer(baseline, config).diff(scan_tree(Path(incoming)))
    return await writer.write(entries)


async def apply_patch(
    patch_dir: Path, destination: Optional[Path] = None, config: Optional[PatchConfig] = None
) -> PatchReport:
    """
    Apply a patch directory to a destination tree.

    Returns:
        Counts of the files applied
    """
    reader = PatchReader(patch_dir, destination, config=config)
    return await PatchApplier(destination, config).apply(reader.stream())


__all__ = ["apply", "apply_patch", "create_patch", "diff", "drain", "read", "write"]
