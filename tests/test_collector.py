"""Tests for merging and ordering traversal results."""

from __future__ import annotations

from pathlib import Path

import pytest

from change_detection.collector import ResultSet, collect


def test_collect_sorts_and_dedupes():
    result = collect(
        [Path("static/b.txt"), Path("static/a.txt")],
        ["static/a.txt", "./static/c.txt"],
    )
    assert result.paths == ("static/a.txt", "static/b.txt", "static/c.txt")
    assert len(result) == 3


def test_collect_order_is_independent_of_input_order():
    paths = ["b/x", "a/y", "a/x", "c", "B", "a"]
    assert collect(paths) == collect(reversed(paths)) == collect(sorted(paths))
    # Code point order: uppercase before lowercase
    assert list(collect(paths)) == ["B", "a", "a/x", "a/y", "b/x", "c"]


def test_collect_nothing():
    assert collect() == ResultSet()
    assert collect([], []).paths == ()


def test_result_set_contains_normalizes():
    result = collect(["src/hello.c"])
    assert "src/hello.c" in result
    assert "./src/hello.c" in result
    assert "src/other.c" not in result
    assert Path("src/hello.c") not in result


def test_collect_dedupes_relative_and_absolute_spellings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.chdir(tmp_path)
    absolute = (tmp_path / "static" / "a.txt").as_posix()
    expected = ("static/a.txt", "static/b.txt")
    assert collect([absolute], ["static/a.txt", "static/b.txt"]).paths == expected
    assert collect(["static/b.txt", "static/a.txt"], [absolute]).paths == expected
