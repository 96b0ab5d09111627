"""Unit tests for task list loading and line pairing."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from deepzoom_pack.errors import ConfigurationError
from deepzoom_pack.tasks import pair_task_lines, read_task_lists

_line = st.one_of(st.just(""), st.just("   "), st.from_regex(r"[a-z0-9_/]{1,12}", fullmatch=True))


def test_pairs_lines_in_order() -> None:
    """Each retained pair gets the next sequence index."""
    tasks = pair_task_lines(["a.tif", "b.tif"], ["out/a", "out/b"])

    assert [(t.source_path, t.dest_folder, t.sequence_index) for t in tasks] == [
        ("a.tif", "out/a", 0),
        ("b.tif", "out/b", 1),
    ]


def test_blank_on_either_side_drops_pair() -> None:
    """A blank source or destination drops the pair without consuming an index."""
    tasks = pair_task_lines(["a", "", "c", "d"], ["A", "B", "", "D"])

    assert [(t.source_path, t.sequence_index) for t in tasks] == [("a", 0), ("d", 1)]


def test_whitespace_is_trimmed() -> None:
    """Surrounding whitespace and carriage returns are stripped."""
    tasks = pair_task_lines(["  a.png\r"], ["\tout/a  "])

    assert tasks[0].source_path == "a.png"
    assert tasks[0].dest_folder == "out/a"


def test_length_mismatch_stops_at_shorter_list(caplog: pytest.LogCaptureFixture) -> None:
    """Extra lines on the longer side are ignored with a warning."""
    with caplog.at_level(logging.WARNING, logger="deepzoom_pack"):
        tasks = pair_task_lines(["a", "b", "c"], ["A"])

    assert [t.source_path for t in tasks] == ["a"]
    assert "differ in length" in caplog.text


def test_strict_rejects_length_mismatch() -> None:
    """Strict pairing refuses lists of different lengths."""
    with pytest.raises(ConfigurationError, match="differ in length"):
        pair_task_lines(["a", "b"], ["A"], strict=True)


def test_strict_rejects_one_sided_blank() -> None:
    """Strict pairing refuses a blank line present on only one side."""
    with pytest.raises(ConfigurationError, match="Line 2"):
        pair_task_lines(["a", "", "c"], ["A", "B", "C"], strict=True)


def test_strict_accepts_blank_on_both_sides() -> None:
    """Aligned blank lines are allowed in strict mode."""
    tasks = pair_task_lines(["a", "", "c"], ["A", "", "C"], strict=True)

    assert [t.sequence_index for t in tasks] == [0, 1]


@given(st.lists(_line, max_size=20), st.lists(_line, max_size=20))
def test_pairing_properties(sources: list[str], destinations: list[str]) -> None:
    """Indices are dense, and every task comes from two non-blank aligned lines."""
    tasks = pair_task_lines(sources, destinations)

    assert [t.sequence_index for t in tasks] == list(range(len(tasks)))
    expected = [
        (s.strip(), d.strip())
        for s, d in zip(sources, destinations)
        if s.strip() and d.strip()
    ]
    assert [(t.source_path, t.dest_folder) for t in tasks] == expected


def test_read_task_lists_from_files(
    write_task_lists: Callable[[list[str], list[str]], tuple[Path, Path]],
) -> None:
    """Files are read line by line and paired."""
    inputs, outputs = write_task_lists(["one.jpg", "", "two.jpg"], ["o1", "o2", "o3"])

    tasks = read_task_lists(inputs, outputs)

    assert [(t.source_path, t.dest_folder) for t in tasks] == [("one.jpg", "o1"), ("two.jpg", "o3")]


def test_read_task_lists_missing_file(tmp_path: Path) -> None:
    """An unopenable list is a configuration error naming the file."""
    outputs = tmp_path / "outputs.txt"
    outputs.write_text("o1\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Cannot open input file"):
        read_task_lists(tmp_path / "missing.txt", outputs)


def test_read_task_lists_rejects_binary_file(tmp_path: Path) -> None:
    """Non-UTF-8 content is reported as a configuration error."""
    inputs = tmp_path / "inputs.txt"
    inputs.write_bytes(b"\xff\xfe\x00bad")
    outputs = tmp_path / "outputs.txt"
    outputs.write_text("o1\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="not UTF-8"):
        read_task_lists(inputs, outputs)
