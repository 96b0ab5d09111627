"""Sidecar ``metadata.json`` serialization for packed tile indexes."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from deepzoom_pack.application.results import TileRecord
from deepzoom_pack.errors import ArchiveIOError, TileLayoutError
from deepzoom_pack.schemas import SidecarDocument, SidecarTileEntry

METADATA_FILENAME = "metadata.json"


def build_sidecar(
    width: int,
    height: int,
    tile_size: int,
    index: Iterable[TileRecord],
) -> SidecarDocument:
    """Build the sidecar document, keeping the index order for ``tiles``.

    Raises
    ------
    TileLayoutError
        If two records share a coordinate key.
    """
    tiles: dict[str, SidecarTileEntry] = {}
    for record in index:
        if record.coordinate_key in tiles:
            raise TileLayoutError(f"Duplicate tile key in index: {record.coordinate_key}")
        tiles[record.coordinate_key] = SidecarTileEntry(
            binary_name=record.container_name,
            start_offset=record.start_offset,
            size=record.byte_size,
        )
    return SidecarDocument(width=width, height=height, tile_size=tile_size, tiles=tiles)


def render_metadata(document: SidecarDocument) -> str:
    """Serialize a sidecar document to its canonical JSON text."""
    payload = document.model_dump(mode="json", by_alias=True)
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def write_metadata(
    output_folder: Path,
    width: int,
    height: int,
    tile_size: int,
    index: Iterable[TileRecord],
    *,
    filename: str = METADATA_FILENAME,
) -> Path:
    """Write ``metadata.json`` for one packed image.

    Parameters
    ----------
    output_folder : Path
        Folder that holds the container file.
    width, height : int
        Output image dimensions.
    tile_size : int
        Tile edge length used by the tiler.
    index : Iterable[TileRecord]
        Tile index in container order.
    filename : str, default="metadata.json"
        Sidecar file name.

    Returns
    -------
    Path
        Path of the written sidecar.

    Raises
    ------
    ArchiveIOError
        If the sidecar cannot be created.
    """
    text = render_metadata(build_sidecar(width, height, tile_size, index))
    meta_path = Path(output_folder) / filename
    try:
        meta_path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise ArchiveIOError(f"Cannot create metadata file {meta_path}: {exc}") from exc
    return meta_path


def read_metadata(output_folder: Path, *, filename: str = METADATA_FILENAME) -> SidecarDocument:
    """Load and validate a sidecar document.

    Raises
    ------
    ArchiveIOError
        If the file cannot be read or is not a valid sidecar document.
    """
    meta_path = Path(output_folder) / filename
    try:
        text = meta_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ArchiveIOError(f"Cannot read metadata file {meta_path}: {exc}") from exc
    try:
        return SidecarDocument.model_validate_json(text)
    except ValidationError as exc:
        raise ArchiveIOError(f"Invalid metadata file {meta_path}: {exc}") from exc
