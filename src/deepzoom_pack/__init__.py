"""Top-level API for packing Deep Zoom tile pyramids into indexed containers."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from deepzoom_pack.types import LineSink

if TYPE_CHECKING:
    from deepzoom_pack.application.results import RunSummary, TaskOutcome
    from deepzoom_pack.validate import ArchiveReport

__version__ = "0.1.0"


def pack_image(
    source_path: Path,
    dest_folder: Path,
    tile_size: int = 512,
    suffix: str = ".jpg",
    jpeg_quality: int = 85,
    keep_tiles: bool = False,
    tiler: str = "pyvips",
) -> TaskOutcome:
    """Tile one image and pack its tiles into ``dest_folder``.

    Parameters
    ----------
    source_path : Path
        Image to tile.
    dest_folder : Path
        Folder receiving ``tiles_000.binz`` and ``metadata.json``.
    tile_size : int, default=512
        Tile edge length in pixels.
    suffix : str, default=".jpg"
        Tile format: ``.png``, ``.jpg`` or ``.jpeg``.
    jpeg_quality : int, default=85
        JPEG quality (1-100); ignored for PNG.
    keep_tiles : bool, default=False
        Keep the loose tile tree after packing.
    tiler : str, default="pyvips"
        Registered pyramid generator name.

    Returns
    -------
    TaskOutcome
        Success with output size and tile count, or failure with a message.
    """
    from .api import pack_image as _impl

    return _impl(
        source_path=source_path,
        dest_folder=dest_folder,
        tile_size=tile_size,
        suffix=suffix,
        jpeg_quality=jpeg_quality,
        keep_tiles=keep_tiles,
        tiler=tiler,
    )


def pack_images(
    inputs_path: Path,
    outputs_path: Path,
    tile_size: int = 512,
    suffix: str = ".jpg",
    jpeg_quality: int = 85,
    threads: int | None = None,
    keep_tiles: bool = False,
    tiler: str = "pyvips",
    tiler_modules: Iterable[str] | None = None,
    strict_pairing: bool = False,
    sink: LineSink | None = None,
) -> RunSummary:
    """Pack every image listed in ``inputs_path``.

    Line ``i`` of ``inputs_path`` names a source image and line ``i`` of
    ``outputs_path`` its destination folder.

    Parameters
    ----------
    inputs_path, outputs_path : Path
        Line-aligned task lists.
    threads : int | None, default=None
        Maximum concurrent images; defaults to the CPU count.
    tiler_modules : Iterable[str] | None, default=None
        Extra tiler plugin modules (import paths or file paths).
    strict_pairing : bool, default=False
        Reject task lists that are not line-for-line symmetric.
    sink : LineSink | None, default=None
        Receives every progress line as ``(line, err)``.

    Returns
    -------
    RunSummary
        Totals and per-task outcomes.
    """
    from .api import pack_images as _impl

    return _impl(
        inputs_path=inputs_path,
        outputs_path=outputs_path,
        tile_size=tile_size,
        suffix=suffix,
        jpeg_quality=jpeg_quality,
        threads=threads,
        keep_tiles=keep_tiles,
        tiler=tiler,
        tiler_modules=tiler_modules,
        strict_pairing=strict_pairing,
        sink=sink,
    )


def verify_archive(folder: Path) -> ArchiveReport:
    """Check a packed folder's container against its ``metadata.json``."""
    from .validate import verify_archive as _impl

    return _impl(folder)


__all__ = [
    "__version__",
    "pack_image",
    "pack_images",
    "verify_archive",
]
