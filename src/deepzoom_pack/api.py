"""Public file-based packing API (delegates to application use-cases)."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from deepzoom_pack.application.ports import PyramidGenerator
from deepzoom_pack.application.results import RunSummary, Task, TaskOutcome
from deepzoom_pack.application.use_cases import build_run_options
from deepzoom_pack.application.use_cases import pack_batch_from_lists
from deepzoom_pack.application.use_cases import process_image_task
from deepzoom_pack.application.use_cases import resolve_generator
from deepzoom_pack.types import LineSink


def pack_image(
    source_path: Path,
    dest_folder: Path,
    tile_size: int = 512,
    suffix: str = ".jpg",
    jpeg_quality: int = 85,
    keep_tiles: bool = False,
    tiler: str = "pyvips",
    generator: PyramidGenerator | None = None,
) -> TaskOutcome:
    """Tile and pack a single image; failures are returned, not raised."""
    options = build_run_options(
        tile_size=tile_size,
        suffix=suffix,
        jpeg_quality=jpeg_quality,
        threads=1,
        keep_tiles=keep_tiles,
        tiler=tiler,
    )
    return process_image_task(
        Task(source_path=str(source_path), dest_folder=str(dest_folder), sequence_index=0),
        options=options,
        generator=generator or resolve_generator(options.tiler),
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
    generator: PyramidGenerator | None = None,
    sink: LineSink | None = None,
) -> RunSummary:
    """Pack every image listed in ``inputs_path`` into the matching output folder."""
    options = build_run_options(
        tile_size=tile_size,
        suffix=suffix,
        jpeg_quality=jpeg_quality,
        threads=threads,
        keep_tiles=keep_tiles,
        tiler=tiler,
        strict_pairing=strict_pairing,
    )
    return pack_batch_from_lists(
        inputs_path=inputs_path,
        outputs_path=outputs_path,
        options=options,
        generator=generator,
        tiler_modules=tiler_modules,
        sink=sink,
    )
