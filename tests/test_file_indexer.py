import hashlib
import os
from datetime import datetime, timezone

import pytest

from conftest import write_file
from video_manager.model.file_record import FileRecord
from video_manager.model.scan_configuration import ScanConfiguration, SortOrder
from video_manager.video.file_indexer import FileIndexer


def _config(root, **kwargs):
    return ScanConfiguration(root_directory=str(root), **kwargs)


def _record(name, created, folder="/videos"):
    ts = datetime.fromtimestamp(created, tz=timezone.utc)
    path = os.path.join(folder, name)
    return FileRecord(
        id=FileIndexer.compute_file_id(path),
        absolute_path=path,
        display_name=name,
        parent_directory=folder,
        size_bytes=1,
        modified_at=ts,
        created_at=ts,
        extension=os.path.splitext(name)[1].lower(),
    )


def test_file_id_is_stable_and_derived_from_absolute_path(tmp_path, monkeypatch):
    path = str(tmp_path / "movie.mp4")
    assert FileIndexer.compute_file_id(path) == FileIndexer.compute_file_id(path)
    assert FileIndexer.compute_file_id(path) == hashlib.md5(path.encode("utf-8")).hexdigest()

    monkeypatch.chdir(tmp_path)
    assert FileIndexer.compute_file_id("movie.mp4") == FileIndexer.compute_file_id(path)


def test_file_ids_do_not_collide_for_distinct_paths():
    paths = [f"/videos/folder{i % 37}/clip_{i}.mp4" for i in range(5000)]
    ids = {FileIndexer.compute_file_id(p) for p in paths}
    assert len(ids) == len(paths)


def test_scan_filters_extensions_and_recurses(video_root):
    write_file(video_root / "a.mp4", 10)
    write_file(video_root / "b.MKV", 20)
    write_file(video_root / "nested" / "deeper" / "c.webm", 30)
    write_file(video_root / "d.ts", 40)
    write_file(video_root / "notes.txt", 5)
    write_file(video_root / "cover.jpg", 5)

    records = FileIndexer.scan(_config(video_root, sort_order=SortOrder.NAME))

    names = sorted(r.display_name for r in records)
    assert names == ["a.mp4", "b.MKV", "c.webm", "d.ts"]
    mkv = next(r for r in records if r.display_name == "b.MKV")
    assert mkv.extension == ".mkv"


def test_scan_populates_record_fields(video_root):
    write_file(video_root / "sub" / "clip.mov", 1234)

    [record] = FileIndexer.scan(_config(video_root))

    expected_path = str(video_root / "sub" / "clip.mov")
    assert record.absolute_path == expected_path
    assert os.path.isabs(record.absolute_path)
    assert record.display_name == "clip.mov"
    assert record.parent_directory == str(video_root / "sub")
    assert record.size_bytes == 1234
    assert record.id == FileIndexer.compute_file_id(expected_path)
    assert record.modified_at.tzinfo is not None
    assert record.created_at.tzinfo is not None


def test_rescan_returns_same_ids(video_root):
    write_file(video_root / "a.mp4", 10)
    write_file(video_root / "x" / "b.avi", 10)
    first = {r.absolute_path: r.id for r in FileIndexer.scan(_config(video_root))}
    second = {r.absolute_path: r.id for r in FileIndexer.scan(_config(video_root))}
    assert first == second


def test_restricted_subtree_excludes_marker_files(video_root):
    write_file(video_root / "qqq" / "clip.mp4", 10)
    write_file(video_root / "qqq" / "clip ggg.mp4", 10)
    write_file(video_root / "qqq" / "inner" / "Other GGG.mkv", 10)
    write_file(video_root / "outside.mp4", 10)

    records = FileIndexer.scan(_config(video_root, restrict_to_subfolder=True))

    assert [r.display_name for r in records] == ["clip.mp4"]


def test_restricted_subtree_missing_returns_empty(video_root):
    write_file(video_root / "outside.mp4", 10)
    assert FileIndexer.scan(_config(video_root, restrict_to_subfolder=True)) == []


def test_marker_is_ignored_outside_restricted_mode(video_root):
    write_file(video_root / "clip ggg.mp4", 10)
    records = FileIndexer.scan(_config(video_root))
    assert [r.display_name for r in records] == ["clip ggg.mp4"]


def test_missing_root_returns_empty_and_logs(tmp_path, caplog):
    missing = tmp_path / "does-not-exist"
    assert FileIndexer.scan(_config(missing)) == []
    assert any("扫描视频目录失败" in rec.getMessage() for rec in caplog.records)


def test_io_error_mid_scan_discards_partial_results(video_root, monkeypatch):
    write_file(video_root / "a.mp4", 10)
    write_file(video_root / "b.mp4", 10)
    original = FileIndexer._build_record.__func__

    def flaky(cls, file_path):
        if file_path.endswith("b.mp4"):
            raise PermissionError(13, "Permission denied", file_path)
        return original(cls, file_path)

    monkeypatch.setattr(FileIndexer, "_build_record", classmethod(flaky))
    assert FileIndexer.scan(_config(video_root)) == []


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
def test_symlink_cycle_is_visited_once(video_root):
    write_file(video_root / "sub" / "a.mp4", 10)
    try:
        os.symlink(str(video_root), str(video_root / "sub" / "loop"), target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("cannot create directory symlink")

    records = FileIndexer.scan(_config(video_root))

    assert [r.display_name for r in records] == ["a.mp4"]


def test_sort_by_name_is_non_decreasing_under_collation():
    records = [_record(n, 100) for n in ["b.mp4", "a.mp4", "c.mkv", "B2.mp4", "あ.mp4", "ア.mp4"]]
    ordered = FileIndexer.sort_records(records, SortOrder.NAME)
    keys = [FileIndexer.name_sort_key(r.display_name) for r in ordered]
    assert keys == sorted(keys)
    assert len(ordered) == len(records)


def test_sort_by_creation_time_desc_breaks_ties_by_path():
    records = [
        _record("old.mp4", 100),
        _record("z_same.mp4", 200),
        _record("a_same.mp4", 200),
        _record("new.mp4", 300),
    ]
    ordered = FileIndexer.sort_records(records, SortOrder.CREATED_DESC)
    assert [r.display_name for r in ordered] == ["new.mp4", "a_same.mp4", "z_same.mp4", "old.mp4"]


def test_scan_by_name_end_to_end(video_root):
    write_file(video_root / "b.mkv", 200000)
    write_file(video_root / "a.mp4", 500000)
    write_file(video_root / "c.txt", 10)

    records = FileIndexer.scan(_config(video_root, sort_order=SortOrder.NAME))

    assert [(r.display_name, r.size_bytes) for r in records] == [("a.mp4", 500000), ("b.mkv", 200000)]


def test_sort_order_parsing():
    assert SortOrder.from_value("name") is SortOrder.NAME
    assert SortOrder.from_value("by-creation-time-desc") is SortOrder.CREATED_DESC
    assert SortOrder.from_value("bogus", default=SortOrder.NAME) is SortOrder.NAME
    with pytest.raises(ValueError):
        SortOrder.from_value("bogus")
