"""Tests for writing patch directories."""

from pathlib import Path

import pytest

from conftest import collect, entries_of, read_tree
from treepatch.config import PatchConfig
from treepatch.exceptions import PatchWriteError
from treepatch.models import FileRecord, PatchEntry, Status
from treepatch.patch.writer import PatchWriter


def new(path: str, content: bytes) -> PatchEntry:
    return PatchEntry(path, Status.NEW, FileRecord.from_bytes(path, content))


@pytest.mark.asyncio
async def test_write_new_file(patch_dir: Path):
    report = await PatchWriter(patch_dir).write(entries_of([new("a.txt", b"x")]))

    assert (patch_dir / "a.txt").read_bytes() == b"x"
    assert (patch_dir / "patch.json").read_text() == '{\n\t"a.txt": "new"\n}'
    assert str(report) == "0 changed, 0 deleted, 1 new"


@pytest.mark.asyncio
async def test_deleted_entries_have_no_payload(patch_dir: Path):
    entries = [
        PatchEntry("old/unused.txt", Status.DELETED),
        PatchEntry("src/app.js", Status.CHANGED, FileRecord.from_bytes("src/app.js", b"js")),
    ]

    await PatchWriter(patch_dir).write(entries_of(entries))

    assert read_tree(patch_dir) == {
        "patch.json": b'{\n\t"old/unused.txt": "deleted",\n\t"src/app.js": "changed"\n}',
        "src/app.js": b"js",
    }
    assert not (patch_dir / "old").exists()


@pytest.mark.asyncio
async def test_write_copies_from_disk(patch_dir: Path, tmp_path: Path, test_config):
    source = tmp_path / "big.bin"
    source.write_bytes(b"0123456789" * 100)
    record = FileRecord("deep/dir/big.bin", size=1000, source=source)

    await PatchWriter(patch_dir, test_config).write(
        entries_of([PatchEntry(record.path, Status.NEW, record)])
    )

    assert (patch_dir / "deep" / "dir" / "big.bin").read_bytes() == source.read_bytes()


@pytest.mark.asyncio
async def test_write_replaces_previous_patch(patch_dir: Path):
    await PatchWriter(patch_dir).write(entries_of([new("first.txt", b"1")]))
    await PatchWriter(patch_dir).write(entries_of([new("second.txt", b"2")]))

    assert read_tree(patch_dir) == {
        "patch.json": b'{\n\t"second.txt": "new"\n}',
        "second.txt": b"2",
    }


@pytest.mark.asyncio
async def test_empty_patch(patch_dir: Path):
    report = await PatchWriter(patch_dir).write(entries_of([]))

    assert report.total_changes == 0
    assert read_tree(patch_dir) == {"patch.json": b"{}"}


@pytest.mark.asyncio
async def test_passthrough(patch_dir: Path):
    entries = [new("a.txt", b"a"), PatchEntry("b.txt", Status.DELETED)]

    assert await collect(PatchWriter(patch_dir).stream(entries_of(entries))) == []
    assert await collect(
        PatchWriter(patch_dir).stream(entries_of(entries), passthrough=True)
    ) == entries


@pytest.mark.asyncio
async def test_custom_manifest_name(patch_dir: Path):
    config = PatchConfig(manifest_name="changes.json", _env_file=None)
    await PatchWriter(patch_dir, config).write(entries_of([new("a.txt", b"a")]))

    assert (patch_dir / "changes.json").exists()
    assert not (patch_dir / "patch.json").exists()


@pytest.mark.asyncio
async def test_missing_content_fails(patch_dir: Path):
    with pytest.raises(PatchWriteError):
        await PatchWriter(patch_dir).write(entries_of([PatchEntry("a.txt", Status.NEW)]))

    assert not (patch_dir / "patch.json").exists()


@pytest.mark.asyncio
async def test_unreadable_source_fails(patch_dir: Path, tmp_path: Path):
    record = FileRecord("a.txt", size=1, source=tmp_path / "missing.txt")

    with pytest.raises(PatchWriteError):
        await PatchWriter(patch_dir).write(entries_of([PatchEntry("a.txt", Status.NEW, record)]))

    assert not (patch_dir / "a.txt").exists()
    assert not (patch_dir / "patch.json").exists()


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["../escaped.txt", "sub/../../escaped.txt", "/tmp/abs.txt", ""])
async def test_paths_outside_patch_dir_are_refused(patch_dir: Path, tmp_path: Path, path):
    entries = [PatchEntry(path, Status.NEW, FileRecord.from_bytes("escaped.txt", b"x"))]

    with pytest.raises(PatchWriteError):
        await PatchWriter(patch_dir).write(entries_of(entries))

    assert not (tmp_path / "escaped.txt").exists()
    assert not (patch_dir / "patch.json").exists()


@pytest.mark.asyncio
async def test_deleted_path_outside_patch_dir_is_refused(patch_dir: Path):
    with pytest.raises(PatchWriteError):
        await PatchWriter(patch_dir).write(
            entries_of([PatchEntry("../gone.txt", Status.DELETED)])
        )
