"""Tests for depskills.utils."""

from __future__ import annotations

from pathlib import Path

from depskills.utils import (
    find_first,
    is_dir_entry,
    list_entries,
    load_manifest,
    read_json,
    read_text,
)


def test_read_json_returns_none_for_missing_and_malformed(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    assert read_json(tmp_path / "missing.json") is None
    assert read_json(broken) is None


def test_load_manifest_requires_a_mapping(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text("[1, 2]", encoding="utf-8")
    assert load_manifest(tmp_path) is None

    (tmp_path / "package.json").write_text('{"name": "x"}', encoding="utf-8")
    assert load_manifest(tmp_path) == {"name": "x"}


def test_read_text_truncates_to_max_lines(tmp_path: Path) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("\n".join(f"line {i}" for i in range(10)), encoding="utf-8")

    assert read_text(path, 3) == "line 0\nline 1\nline 2"
    assert read_text(path).count("\n") == 9
    assert read_text(tmp_path / "absent.txt") is None


def test_find_first_respects_candidate_order(tmp_path: Path) -> None:
    (tmp_path / "HISTORY.md").write_text("h", encoding="utf-8")
    (tmp_path / "CHANGES.md").write_text("c", encoding="utf-8")

    found = find_first(tmp_path, ["CHANGELOG.md", "HISTORY.md", "CHANGES.md"])

    assert found == tmp_path / "HISTORY.md"
    assert find_first(tmp_path, ["nothing.md"]) is None


def test_list_entries_sorted_and_tolerates_missing_directory(tmp_path: Path) -> None:
    for name in ("b", "a", "c"):
        (tmp_path / name).mkdir()

    assert [entry.name for entry in list_entries(tmp_path)] == ["a", "b", "c"]
    assert list_entries(tmp_path / "missing") == []


def test_is_dir_entry_follows_directory_symlinks_only(tmp_path: Path) -> None:
    real = tmp_path / "real"
    real.mkdir()
    (tmp_path / "file.txt").write_text("x", encoding="utf-8")
    (tmp_path / "dir-link").symlink_to(real, target_is_directory=True)
    (tmp_path / "file-link").symlink_to(tmp_path / "file.txt")
    (tmp_path / "dangling").symlink_to(tmp_path / "nowhere")

    flags = {entry.name: is_dir_entry(entry) for entry in list_entries(tmp_path)}

    assert flags == {
        "dangling": False,
        "dir-link": True,
        "file-link": False,
        "file.txt": False,
        "real": True,
    }
