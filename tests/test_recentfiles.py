import json

import pytest

from omodscan.recentfiles import RecentFileList


def test_new_list_is_empty():
    files = RecentFileList()
    assert files.is_empty()
    assert files.labels() == []


def test_labels_are_numbered_base_names():
    files = RecentFileList(["/data/a.mbs", "/other/b.mbs"])
    assert files.labels() == ["1 a.mbs", "2 b.mbs"]


def test_readding_moves_to_end():
    files = RecentFileList(["/x/a", "/x/b", "/x/c"])
    files.add_recent_file("/x/a")
    assert files.files == ["/x/b", "/x/c", "/x/a"]


def test_empty_name_ignored():
    files = RecentFileList(["/x/a"])
    files.add_recent_file("")
    assert files.files == ["/x/a"]


def test_list_keeps_ten_newest():
    names = [f"/f/{i}.mbs" for i in range(12)]
    files = RecentFileList(names)
    assert len(files) == 10
    assert files.files == names[2:]


def test_remove_renumbers():
    files = RecentFileList(["/x/a", "/x/b", "/x/c"])
    files.remove_recent_file("/x/b")
    files.remove_recent_file("/x/missing")
    assert files.files == ["/x/a", "/x/c"]
    assert [label.split(" ")[0] for label in files.labels()] == ["1", "2"]


def test_save_load_round_trip(tmp_path):
    path = tmp_path / "recent.json"
    original = RecentFileList(["/x/a", "/y/b"])
    original.save(path)
    assert RecentFileList.load(path).files == original.files
    assert [e["Name"] for e in json.loads(path.read_text())["RecentFiles"]] == original.files


def test_load_missing_file(tmp_path):
    assert RecentFileList.load(tmp_path / "none.json").is_empty()


def test_load_corrupt_file(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    with pytest.raises(json.JSONDecodeError):
        RecentFileList.load(path)