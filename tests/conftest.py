"""Common test fixtures."""

from pathlib import Path
from typing import AsyncIterator, Callable, Dict, Iterable, List, Union

import pytest

from treepatch.config import PatchConfig
from treepatch.models import FileRecord, PatchEntry

TreeSpec = Dict[str, Union[str, bytes]]


def create_tree(root: Path, files: TreeSpec) -> Path:
    """Create files below root from a mapping of POSIX path to content."""
    root.mkdir(parents=True, exist_ok=True)
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode()
        path.write_bytes(content)
    return root


def read_tree(root: Path) -> Dict[str, bytes]:
    """Map POSIX relative path to content for every file below root."""
    if not root.exists():
        return {}
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


async def records(*items: FileRecord) -> AsyncIterator[FileRecord]:
    """Async stream over the given records."""
    for item in items:
        yield item


async def entries_of(items: Iterable[PatchEntry]) -> AsyncIterator[PatchEntry]:
    """Async stream over the given entries."""
    for item in items:
        yield item


async def collect(stream) -> List:
    return [item async for item in stream]


@pytest.fixture
def make_tree() -> Callable[[Path, TreeSpec], Path]:
    return create_tree


@pytest.fixture
def incoming_dir(tmp_path) -> Path:
    path = tmp_path / "incoming"
    path.mkdir()
    return path


@pytest.fixture
def baseline_dir(tmp_path) -> Path:
    path = tmp_path / "baseline"
    path.mkdir()
    return path


@pytest.fixture
def patch_dir(tmp_path) -> Path:
    """Patch directory location, not created up front."""
    return tmp_path / "patch"


@pytest.fixture
def test_config() -> PatchConfig:
    """Config with a tiny buffer and chunk size to exercise streaming paths."""
    return PatchConfig(high_water_mark=2, chunk_size=3)
