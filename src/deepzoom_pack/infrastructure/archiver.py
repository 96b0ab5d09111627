"""Pack a ``level/row/column.ext`` tile tree into one offset-indexed container."""

from __future__ import annotations

import contextlib
import logging
import shutil
from collections.abc import Collection
from dataclasses import dataclass
from pathlib import Path

from deepzoom_pack.application.options import ArchiveOptions
from deepzoom_pack.application.results import ArchiveResult, TileRecord
from deepzoom_pack.errors import ArchiveIOError, DeepZoomPackError, TileLayoutError
from deepzoom_pack.infrastructure.compression import compress_tile

logger = logging.getLogger(__name__)

BLANK_TILE_STEM = "blank"


@dataclass(frozen=True)
class TileFile:
    """A tile file found in the pyramid tree with its parsed coordinate."""

    path: Path
    level: str
    row: str
    column: str

    @property
    def coordinate_key(self) -> str:
        """``"{level}_{row}_{column}"`` key used in the sidecar index."""
        return f"{self.level}_{self.row}_{self.column}"


def _is_numeric(name: str) -> bool:
    return bool(name) and name.isascii() and name.isdigit()


def _normalize_extensions(extensions: Collection[str]) -> frozenset[str]:
    return frozenset(
        ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions
    )


def parse_tile_coordinate(
    root: Path,
    path: Path,
    extensions: Collection[str],
) -> TileFile | None:
    """Parse ``root/level/row/column.ext`` into a :class:`TileFile`.

    Returns ``None`` for anything that does not follow that layout: wrong
    depth, non-numeric level/row/column names, or an unlisted extension.
    """
    try:
        relative = path.relative_to(root)
    except ValueError:
        return None
    if len(relative.parts) != 3:
        return None
    level, row, filename = relative.parts
    candidate = Path(filename)
    if candidate.suffix.lower() not in _normalize_extensions(extensions):
        return None
    if not (_is_numeric(level) and _is_numeric(row) and _is_numeric(candidate.stem)):
        return None
    return TileFile(path=path, level=level, row=row, column=candidate.stem)


def _numeric_subdirs(folder: Path) -> list[Path]:
    found: list[Path] = []
    for entry in folder.iterdir():
        if not entry.is_dir():
            continue
        if not _is_numeric(entry.name):
            logger.debug("Ignoring non-tile directory %s", entry)
            continue
        found.append(entry)
    return found


def discover_tiles(root: Path, extensions: Collection[str]) -> list[TileFile]:
    """Find every tile file two directory levels below ``root``.

    Parameters
    ----------
    root : Path
        Pyramid root written by the tiler.
    extensions : Collection[str]
        Accepted tile extensions, matched case-insensitively.

    Returns
    -------
    list[TileFile]
        Tiles sorted by full path. This is the container append order.

    Raises
    ------
    ArchiveIOError
        If the tree cannot be listed.
    TileLayoutError
        If two files map to the same coordinate key.
    """
    tiles: list[TileFile] = []
    try:
        for level_dir in _numeric_subdirs(root):
            for row_dir in _numeric_subdirs(level_dir):
                for entry in row_dir.iterdir():
                    if not entry.is_file():
                        continue
                    tile = parse_tile_coordinate(root, entry, extensions)
                    if tile is None:
                        logger.debug("Ignoring non-tile file %s", entry)
                        continue
                    tiles.append(tile)
    except OSError as exc:
        raise ArchiveIOError(f"Cannot scan tile folder {root}: {exc}") from exc

    tiles.sort(key=lambda tile: tile.path)

    seen: dict[str, Path] = {}
    for tile in tiles:
        previous = seen.setdefault(tile.coordinate_key, tile.path)
        if previous != tile.path:
            raise TileLayoutError(
                f"Tiles {previous} and {tile.path} share coordinate {tile.coordinate_key}."
            )
    return tiles


def _read_tile(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise ArchiveIOError(f"Cannot read tile {path}: {exc}") from exc


def _remove_partial(container_path: Path) -> None:
    with contextlib.suppress(OSError):
        container_path.unlink(missing_ok=True)


def discard_tiles(root: Path, extensions: Collection[str]) -> tuple[str, ...]:
    """Delete numeric tile directories and the blank placeholder under ``root``.

    Failures are logged and returned rather than raised.

    Returns
    -------
    tuple[str, ...]
        One message per path that could not be removed.
    """
    allowed = _normalize_extensions(extensions)
    errors: list[str] = []
    try:
        entries = sorted(root.iterdir())
    except OSError as exc:
        message = f"Cannot list {root} for cleanup: {exc}"
        logger.warning(message)
        return (message,)

    for entry in entries:
        try:
            if entry.is_dir() and _is_numeric(entry.name):
                shutil.rmtree(entry)
            elif (
                entry.is_file()
                and entry.stem == BLANK_TILE_STEM
                and entry.suffix.lower() in allowed
            ):
                entry.unlink()
        except OSError as exc:
            message = f"Cannot remove {entry}: {exc}"
            logger.warning(message)
            errors.append(message)
    return tuple(errors)


def archive_tiles(root: Path, options: ArchiveOptions | None = None) -> ArchiveResult:
    """Compress every tile under ``root`` into one container file.

    Tiles are compressed one by one and appended in path order; each record
    holds the offset before its append and its compressed size, so ranges are
    contiguous and cover the whole container.

    Parameters
    ----------
    root : Path
        Pyramid root; the container is written directly inside it.
    options : ArchiveOptions | None, default=None
        Container name, tile extensions, and keep/discard policy.

    Returns
    -------
    ArchiveResult
        Container path, tile index, and any cleanup failures.

    Raises
    ------
    ArchiveIOError
        If the container cannot be written or a tile cannot be read.
    CompressionError
        If a tile cannot be compressed.
    """
    options = options or ArchiveOptions()
    root = Path(root)
    tiles = discover_tiles(root, options.extensions)
    container_path = root / options.container_name

    try:
        handle = container_path.open("wb")
    except OSError as exc:
        raise ArchiveIOError(f"Cannot create container file {container_path}: {exc}") from exc

    records: list[TileRecord] = []
    offset = 0
    try:
        with handle:
            for tile in tiles:
                compressed = compress_tile(_read_tile(tile.path))
                handle.write(compressed)
                records.append(
                    TileRecord(
                        coordinate_key=tile.coordinate_key,
                        container_name=options.container_name,
                        start_offset=offset,
                        byte_size=len(compressed),
                    )
                )
                offset += len(compressed)
    except DeepZoomPackError:
        _remove_partial(container_path)
        raise
    except OSError as exc:
        _remove_partial(container_path)
        raise ArchiveIOError(f"Cannot write container file {container_path}: {exc}") from exc

    logger.debug("Archived %d tiles (%d bytes) into %s", len(records), offset, container_path)

    discard_errors: tuple[str, ...] = ()
    if not options.keep_tiles:
        discard_errors = discard_tiles(root, options.extensions)

    return ArchiveResult(
        container_path=container_path,
        index=tuple(records),
        discard_errors=discard_errors,
    )
