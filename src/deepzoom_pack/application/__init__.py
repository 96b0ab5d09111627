"""Application-layer use-cases and option objects."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from deepzoom_pack.application.options import ArchiveOptions, RunOptions, TilingOptions
from deepzoom_pack.application.ports import ProgressSink, PyramidGenerator
from deepzoom_pack.application.results import RunSummary, Task, TaskOutcome
from deepzoom_pack.types import LineSink


def build_run_options(
    *,
    tile_size: int = 512,
    suffix: str = ".jpg",
    jpeg_quality: int = 85,
    threads: int | None = None,
    keep_tiles: bool = False,
    tiler: str = "pyvips",
    strict_pairing: bool = False,
) -> RunOptions:
    """Build typed run options via lazy use-case import."""
    from deepzoom_pack.application.use_cases import build_run_options as _impl

    return _impl(
        tile_size=tile_size,
        suffix=suffix,
        jpeg_quality=jpeg_quality,
        threads=threads,
        keep_tiles=keep_tiles,
        tiler=tiler,
        strict_pairing=strict_pairing,
    )


def process_image_task(
    task: Task,
    *,
    options: RunOptions,
    generator: PyramidGenerator,
    progress: ProgressSink | None = None,
) -> TaskOutcome:
    """Tile and pack one image via lazy use-case import."""
    from deepzoom_pack.application.use_cases import process_image_task as _impl

    return _impl(task, options=options, generator=generator, progress=progress)


def run_batch(
    tasks: Sequence[Task],
    *,
    options: RunOptions,
    generator: PyramidGenerator,
    sink: LineSink | None = None,
) -> RunSummary:
    """Run a batch of tasks via lazy use-case import."""
    from deepzoom_pack.application.use_cases import run_batch as _impl

    return _impl(tasks, options=options, generator=generator, sink=sink)


def pack_batch_from_lists(
    *,
    inputs_path: Path,
    outputs_path: Path,
    options: RunOptions,
    generator: PyramidGenerator | None = None,
    tiler_modules: Iterable[str] | None = None,
    sink: LineSink | None = None,
) -> RunSummary:
    """Load task lists and run the batch via lazy use-case import."""
    from deepzoom_pack.application.use_cases import pack_batch_from_lists as _impl

    return _impl(
        inputs_path=inputs_path,
        outputs_path=outputs_path,
        options=options,
        generator=generator,
        tiler_modules=tiler_modules,
        sink=sink,
    )


__all__ = [
    "ArchiveOptions",
    "RunOptions",
    "TilingOptions",
    "RunSummary",
    "Task",
    "TaskOutcome",
    "build_run_options",
    "process_image_task",
    "run_batch",
    "pack_batch_from_lists",
]
