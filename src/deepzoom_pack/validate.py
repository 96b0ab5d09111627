"""Consistency checks for packed tile archives."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path

from deepzoom_pack.errors import ArchiveIntegrityError, ArchiveIOError, CompressionError
from deepzoom_pack.infrastructure.compression import decompress_tile
from deepzoom_pack.infrastructure.metadata import read_metadata
from deepzoom_pack.schemas import SidecarTileEntry


@dataclass(frozen=True)
class ArchiveReport:
    """Summary of a verified archive folder."""

    folder: Path
    width: int
    height: int
    tile_count: int
    container_bytes: dict[str, int]


def verify_archive(folder: Path) -> ArchiveReport:
    """Check a packed folder against its ``metadata.json``.

    Every container's ranges must start at 0, follow each other without gaps,
    end exactly at the container's length, and decompress on their own.

    Parameters
    ----------
    folder : Path
        Folder holding ``metadata.json`` and its container files.

    Returns
    -------
    ArchiveReport
        Tile count and per-container byte totals.

    Raises
    ------
    ArchiveIOError
        If the sidecar or a container cannot be read.
    ArchiveIntegrityError
        If any range or payload does not match.
    """
    folder = Path(folder)
    document = read_metadata(folder)

    grouped: dict[str, list[tuple[str, SidecarTileEntry]]] = defaultdict(list)
    for key, entry in document.tiles.items():
        grouped[entry.binary_name].append((key, entry))

    container_bytes: dict[str, int] = {}
    for name, entries in sorted(grouped.items()):
        container_path = folder / name
        try:
            data = container_path.read_bytes()
        except OSError as exc:
            raise ArchiveIOError(f"Cannot read container {container_path}: {exc}") from exc

        expected = 0
        for key, entry in sorted(entries, key=lambda item: item[1].start_offset):
            if entry.start_offset != expected:
                raise ArchiveIntegrityError(
                    f"Tile {key} starts at {entry.start_offset} in {name}, expected {expected}."
                )
            end = entry.start_offset + entry.size
            if end > len(data):
                raise ArchiveIntegrityError(f"Tile {key} extends past the end of {name}.")
            try:
                decompress_tile(data[entry.start_offset : end])
            except CompressionError as exc:
                raise ArchiveIntegrityError(f"Tile {key} in {name}: {exc}") from exc
            expected = end

        if expected != len(data):
            raise ArchiveIntegrityError(
                f"Container {name} is {len(data)} bytes but the index covers {expected}."
            )
        container_bytes[name] = len(data)

    return ArchiveReport(
        folder=folder,
        width=document.width,
        height=document.height,
        tile_count=len(document.tiles),
        container_bytes=container_bytes,
    )
