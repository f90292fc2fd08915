"""Tests for the data model."""

from pathlib import Path

import pytest

from treepatch.models import DiffState, FileRecord, PatchEntry, PatchReport, Status


def test_status_tokens():
    assert [s.value for s in Status] == ["new", "changed", "deleted"]
    assert Status("changed") is Status.CHANGED
    assert str(Status.DELETED) == "deleted"


def test_report_counts_and_text():
    report = PatchReport.from_statuses(
        [Status.NEW, Status.NEW, Status.CHANGED, Status.DELETED, Status.NEW]
    )
    assert (report.new, report.changed, report.deleted) == (3, 1, 1)
    assert report.total_changes == 5
    assert str(report) == "1 changed, 1 deleted, 3 new"


def test_empty_report():
    report = PatchReport()
    assert report.total_changes == 0
    assert str(report) == "0 changed, 0 deleted, 0 new"


def test_report_rejects_unknown_status():
    with pytest.raises(ValueError):
        PatchReport().add("moved")  # pyright: ignore [reportArgumentType]


def test_diff_state_tag():
    state = DiffState()
    record = FileRecord.from_bytes("a.txt", b"x")

    entry = state.tag("a.txt", Status.NEW, record)

    assert entry == PatchEntry(path="a.txt", status=Status.NEW, file=record)
    assert state.report.new == 1
    assert state.accounted == set()


def test_diff_states_are_independent():
    first, second = DiffState(), DiffState()
    first.accounted.add("a.txt")
    first.tag("a.txt", Status.CHANGED)

    assert second.accounted == set()
    assert second.report.total_changes == 0


def test_entries_are_immutable():
    entry = PatchEntry(path="a.txt", status=Status.NEW)
    with pytest.raises(AttributeError):
        entry.status = Status.CHANGED  # pyright: ignore [reportAttributeAccessIssue]


def test_has_content(tmp_path: Path):
    assert FileRecord.from_bytes("a", b"").has_content
    assert FileRecord("a", source=tmp_path / "a").has_content
    assert not FileRecord("a").has_content
    assert not FileRecord("dir", is_dir=True, source=tmp_path).has_content


@pytest.mark.asyncio
async def test_chunks_from_bytes():
    record = FileRecord.from_bytes("a.txt", b"abcdefg")
    chunks = [chunk async for chunk in record.chunks(3)]
    assert chunks == [b"abc", b"def", b"g"]
    assert record.size == 7


@pytest.mark.asyncio
async def test_chunks_from_file(tmp_path: Path):
    path = tmp_path / "a.txt"
    path.write_bytes(b"abcdefg")
    record = FileRecord("a.txt", size=7, source=path)

    assert b"".join([chunk async for chunk in record.chunks(2)]) == b"abcdefg"


@pytest.mark.asyncio
async def test_chunks_without_content():
    with pytest.raises(ValueError):
        [chunk async for chunk in FileRecord("a.txt").chunks()]
