"""Tests for reading patch directories."""

from pathlib import Path

import pytest

from conftest import collect
from treepatch.exceptions import ManifestParseError
from treepatch.models import Status
from treepatch.patch.reader import PatchReader


@pytest.fixture
def sample_patch(make_tree, patch_dir: Path) -> Path:
    return make_tree(
        patch_dir,
        {
            "patch.json": (
                '{\n\t"src/app.js": "changed",\n\t"assets/logo.png": "new",'
                '\n\t"old/unused.txt": "deleted"\n}'
            ),
            "src/app.js": "console.log(1)",
            "assets/logo.png": b"\x89PNG",
        },
    )


@pytest.mark.asyncio
async def test_read_resolves_sources(sample_patch: Path, tmp_path: Path):
    destination = tmp_path / "site"

    entries = await collect(PatchReader(sample_patch, destination).stream())

    assert [(e.path, e.status) for e in entries] == [
        ("src/app.js", Status.CHANGED),
        ("assets/logo.png", Status.NEW),
        ("old/unused.txt", Status.DELETED),
    ]

    changed, new, deleted = entries
    assert changed.file.source == sample_patch / "src" / "app.js"
    assert changed.file.size == len("console.log(1)")
    assert new.file.source == sample_patch / "assets" / "logo.png"
    assert new.file.size == 4
    assert deleted.file.source == destination / "old" / "unused.txt"
    assert deleted.file.data is None


@pytest.mark.asyncio
async def test_read_default_destination(sample_patch: Path):
    entries = await PatchReader(sample_patch).entries()
    deleted = [e for e in entries if e.status is Status.DELETED]
    assert deleted[0].file.source == Path(".") / "old" / "unused.txt"


@pytest.mark.asyncio
async def test_read_relative_to_base(sample_patch: Path, tmp_path: Path):
    entries = await PatchReader(sample_patch, base=tmp_path).entries()

    assert [e.path for e in entries] == [
        "patch/src/app.js",
        "patch/assets/logo.png",
        "old/unused.txt",
    ]


def test_base_must_contain_patch(sample_patch: Path, tmp_path: Path):
    with pytest.raises(ValueError):
        PatchReader(sample_patch, base=tmp_path / "elsewhere")


@pytest.mark.asyncio
async def test_read_empty_patch(make_tree, patch_dir: Path):
    make_tree(patch_dir, {"patch.json": "{}"})
    assert await collect(PatchReader(patch_dir).stream()) == []


@pytest.mark.asyncio
async def test_read_missing_manifest(make_tree, patch_dir: Path):
    make_tree(patch_dir, {"a.txt": "a"})
    with pytest.raises(ManifestParseError):
        await collect(PatchReader(patch_dir).stream())


@pytest.mark.asyncio
async def test_read_malformed_manifest(make_tree, patch_dir: Path):
    make_tree(patch_dir, {"patch.json": '{"a.txt": "renamed"}', "a.txt": "a"})
    with pytest.raises(ManifestParseError):
        await collect(PatchReader(patch_dir).stream())


@pytest.mark.asyncio
async def test_read_missing_payload_yields_nothing(make_tree, patch_dir: Path):
    """Payloads are checked before the first entry is emitted."""
    make_tree(
        patch_dir,
        {"patch.json": '{"a.txt": "new", "b.txt": "changed"}', "a.txt": "a"},
    )

    received = []
    with pytest.raises(ManifestParseError, match="b.txt"):
        async for entry in PatchReader(patch_dir).stream():
            received.append(entry)

    assert received == []
