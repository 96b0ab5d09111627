"""Unit tests for tile discovery, container packing, and tile cleanup."""

from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from deepzoom_pack.application.options import (
    DEFAULT_TILE_EXTENSIONS,
    ArchiveOptions,
    container_name,
)
from deepzoom_pack.errors import ArchiveIOError, TileLayoutError
from deepzoom_pack.infrastructure.archiver import (
    archive_tiles,
    discard_tiles,
    discover_tiles,
    parse_tile_coordinate,
)
from deepzoom_pack.infrastructure.compression import decompress_tile


def _write_tile(root: Path, level: str, row: str, name: str, data: bytes) -> Path:
    path = root / level / row / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


def _tree(root: Path) -> dict[str, bytes]:
    contents = {
        "0_0_0": b"level zero",
        "1_0_0": b"a" * 300,
        "1_0_1": b"b" * 10,
        "1_1_0": b"",
        "1_1_1": bytes(range(256)) * 4,
    }
    for key, data in contents.items():
        level, row, column = key.split("_")
        _write_tile(root, level, row, f"{column}.jpg", data)
    return contents


def test_parse_tile_coordinate(tmp_path: Path) -> None:
    """``root/level/row/column.ext`` maps to ``level_row_column``."""
    path = tmp_path / "3" / "12" / "7.JPG"

    tile = parse_tile_coordinate(tmp_path, path, DEFAULT_TILE_EXTENSIONS)

    assert tile is not None
    assert tile.coordinate_key == "3_12_7"


@pytest.mark.parametrize(
    "relative",
    [
        "blank.png",
        "0/0.jpg",
        "0/0/0/0.jpg",
        "x/0/0.jpg",
        "0/y/0.jpg",
        "0/0/z.jpg",
        "0/0/0.txt",
        "0/0/-1.jpg",
    ],
)
def test_parse_rejects_other_layouts(tmp_path: Path, relative: str) -> None:
    """Anything outside the numeric three-level layout is not a tile."""
    assert parse_tile_coordinate(tmp_path, tmp_path / relative, DEFAULT_TILE_EXTENSIONS) is None


def test_discover_ignores_non_tile_entries(tmp_path: Path) -> None:
    """Root files, non-numeric directories, and foreign extensions are skipped."""
    _tree(tmp_path)
    (tmp_path / "blank.png").write_bytes(b"blank")
    (tmp_path / "vips-properties.xml").write_text("<x/>", encoding="utf-8")
    _write_tile(tmp_path, "thumbs", "0", "0.jpg", b"not a tile")
    _write_tile(tmp_path, "1", "0", "notes.txt", b"not a tile")

    tiles = discover_tiles(tmp_path, DEFAULT_TILE_EXTENSIONS)

    assert [t.coordinate_key for t in tiles] == ["0_0_0", "1_0_0", "1_0_1", "1_1_0", "1_1_1"]


def test_discover_sorts_by_path(tmp_path: Path) -> None:
    """Discovery order is the lexicographic path order."""
    for column in ("10", "2", "1"):
        _write_tile(tmp_path, "0", "0", f"{column}.png", b"x")

    tiles = discover_tiles(tmp_path, DEFAULT_TILE_EXTENSIONS)

    assert [t.path for t in tiles] == sorted(t.path for t in tiles)


def test_discover_rejects_duplicate_coordinates(tmp_path: Path) -> None:
    """Two files for one coordinate cannot both be indexed."""
    _write_tile(tmp_path, "0", "0", "0.jpg", b"jpeg")
    _write_tile(tmp_path, "0", "0", "0.png", b"png")

    with pytest.raises(TileLayoutError, match="0_0_0"):
        discover_tiles(tmp_path, DEFAULT_TILE_EXTENSIONS)


def test_discover_missing_root_raises(tmp_path: Path) -> None:
    """A missing pyramid folder is an archive IO error."""
    with pytest.raises(ArchiveIOError):
        discover_tiles(tmp_path / "missing", DEFAULT_TILE_EXTENSIONS)


def test_archive_ranges_are_contiguous_and_slices_round_trip(tmp_path: Path) -> None:
    """Offsets start at 0, follow each other, and cover the whole container."""
    contents = _tree(tmp_path)

    result = archive_tiles(tmp_path, ArchiveOptions(keep_tiles=True))

    data = result.container_path.read_bytes()
    assert result.container_path.name == "tiles_000.binz"
    assert len(data) == result.total_bytes
    expected_offset = 0
    for record in result.index:
        assert record.start_offset == expected_offset
        assert record.container_name == "tiles_000.binz"
        payload = data[record.start_offset : record.end_offset]
        assert decompress_tile(payload) == contents[record.coordinate_key]
        expected_offset = record.end_offset
    assert expected_offset == len(data)


@settings(max_examples=25, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(st.lists(st.binary(max_size=512), min_size=1, max_size=12))
def test_archive_property_sum_equals_length(tmp_path: Path, payloads: list[bytes]) -> None:
    """Sum of sizes equals container length for any tile payloads."""
    root = tmp_path / f"case_{len(list(tmp_path.iterdir()))}"
    for column, payload in enumerate(payloads):
        _write_tile(root, "0", "0", f"{column}.png", payload)

    result = archive_tiles(root)

    assert sum(r.byte_size for r in result.index) == result.container_path.stat().st_size
    assert len(result.index) == len(payloads)


def test_archive_empty_tree_writes_empty_container(tmp_path: Path) -> None:
    """No tiles means an empty container and an empty index."""
    result = archive_tiles(tmp_path)

    assert result.index == ()
    assert result.container_path.read_bytes() == b""


def test_archive_discards_tiles_by_default(tmp_path: Path) -> None:
    """Numeric directories and the blank placeholder are removed after packing."""
    _tree(tmp_path)
    (tmp_path / "blank.png").write_bytes(b"blank")
    (tmp_path / "vips-properties.xml").write_text("<x/>", encoding="utf-8")

    result = archive_tiles(tmp_path)

    remaining = sorted(p.name for p in tmp_path.iterdir())
    assert remaining == ["tiles_000.binz", "vips-properties.xml"]
    assert result.discard_errors == ()


def test_archive_keeps_tiles_when_requested(tmp_path: Path) -> None:
    """keep_tiles leaves the tree untouched."""
    _tree(tmp_path)
    (tmp_path / "blank.png").write_bytes(b"blank")

    archive_tiles(tmp_path, ArchiveOptions(keep_tiles=True))

    assert (tmp_path / "1" / "1" / "1.jpg").is_file()
    assert (tmp_path / "blank.png").is_file()


def test_archive_unwritable_container_raises(tmp_path: Path) -> None:
    """A container path that cannot be opened raises ArchiveIOError."""
    _tree(tmp_path)
    (tmp_path / "tiles_000.binz").mkdir()

    with pytest.raises(ArchiveIOError, match="Cannot create container"):
        archive_tiles(tmp_path)
    assert (tmp_path / "0" / "0" / "0.jpg").is_file()


def test_discard_reports_failures(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Deletion failures are returned, not raised."""
    _tree(tmp_path)

    def _fail(path: Path) -> None:
        raise PermissionError(f"denied: {path}")

    monkeypatch.setattr("deepzoom_pack.infrastructure.archiver.shutil.rmtree", _fail)

    errors = discard_tiles(tmp_path, DEFAULT_TILE_EXTENSIONS)

    assert len(errors) == 2
    assert all("Cannot remove" in message for message in errors)


def test_container_names_are_zero_padded() -> None:
    """Container names carry a three-digit split index."""
    assert container_name() == "tiles_000.binz"
    assert container_name(12) == "tiles_012.binz"
