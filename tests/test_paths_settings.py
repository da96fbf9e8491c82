import json
import os
from pathlib import Path

from szq.models.job import JobStatus
from szq.utils.paths import archive_path_for, delete_tree, existing_folders, make_job, make_jobs
from szq.utils.settings import DEFAULT_SETTINGS, clamp_threads, load_settings, save_settings


def test_archive_is_sibling_of_folder():
    assert archive_path_for(Path("/data/photos")) == Path("/data/photos.7z")
    assert archive_path_for(Path("/data/photos"), ".zip") == Path("/data/photos.zip")


def test_make_jobs_keeps_order_and_duplicates(tmp_path):
    jobs = make_jobs([tmp_path / "b", tmp_path / "a", tmp_path / "b"])
    assert [j.name for j in jobs] == ["b", "a", "b"]
    assert all(j.status == JobStatus.PENDING for j in jobs)
    assert make_job(str(tmp_path / "x")).output_path == tmp_path / "x.7z"


def test_existing_folders_drops_files_and_missing(tmp_path, make_folder):
    d = make_folder("keep")
    f = tmp_path / "plain.txt"; f.write_text("x")
    assert existing_folders([d, f, tmp_path / "gone"]) == [d]


def test_delete_tree_removes_everything(make_folder):
    d = make_folder("tree", files=4)
    (d / "sub" / "deeper").mkdir()
    (d / "sub" / "deeper" / "z").write_text("z")

    assert delete_tree(d) == []
    assert not d.exists()


def test_delete_tree_missing_folder_is_reported(tmp_path):
    errors = delete_tree(tmp_path / "never")
    assert len(errors) == 1 and "not a directory" in errors[0]


def test_delete_tree_continues_past_locked_file(make_folder, monkeypatch):
    d = make_folder("locked", files=3)
    real_remove = os.remove

    def fake_remove(p):
        if p.endswith("file1.txt"):
            raise PermissionError(13, "Permission denied", p)
        real_remove(p)

    monkeypatch.setattr(os, "remove", fake_remove)
    errors = delete_tree(d)

    assert any("file1.txt" in e and "Permission denied" in e for e in errors)
    # the rest was still removed; the folder itself stays because it is not empty
    assert sorted(p.name for p in d.iterdir()) == ["file1.txt"]


def test_load_settings_writes_defaults_on_first_run(tmp_path):
    p = tmp_path / "szq_settings.json"
    s = load_settings(p)
    assert s == DEFAULT_SETTINGS
    assert json.loads(p.read_text()) == DEFAULT_SETTINGS


def test_settings_round_trip_merges_over_defaults(tmp_path):
    p = tmp_path / "szq_settings.json"
    save_settings({"sevenzip_path": "/usr/bin/7zz", "max_threads": 4}, p)
    s = load_settings(p)
    assert s["sevenzip_path"] == "/usr/bin/7zz"
    assert s["max_threads"] == 4
    assert s["compression_level"] == 9


def test_broken_settings_file_falls_back(tmp_path):
    p = tmp_path / "szq_settings.json"
    p.write_text("{not json")
    assert load_settings(p) == DEFAULT_SETTINGS


def test_clamp_threads():
    s = {"max_threads": 10}
    assert clamp_threads(0, s) == 1
    assert clamp_threads(3, s) == 3
    assert clamp_threads(64, s) == 10
