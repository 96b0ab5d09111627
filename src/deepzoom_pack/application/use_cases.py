"""Application use-cases orchestrating tiling, archiving, and batch runs."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from functools import partial
from pathlib import Path

from pydantic import ValidationError

from deepzoom_pack.application.options import ArchiveOptions, RunOptions, TilingOptions
from deepzoom_pack.application.ports import ProgressSink, PyramidGenerator
from deepzoom_pack.application.progress import ResultAggregator, write_line
from deepzoom_pack.application.results import RunSummary, Task, TaskOutcome
from deepzoom_pack.application.scheduler import TaskScheduler, default_worker_count
from deepzoom_pack.errors import ConfigurationError, DeepZoomPackError, ExternalToolError
from deepzoom_pack.infrastructure.archiver import archive_tiles
from deepzoom_pack.infrastructure.metadata import write_metadata
from deepzoom_pack.plugins.registry import create_default_registry
from deepzoom_pack.schemas import RunConfig
from deepzoom_pack.tasks import read_task_lists
from deepzoom_pack.types import JPEG_SUFFIXES, Dimensions, LineSink

logger = logging.getLogger(__name__)


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
    """Build typed run options from command/API params.

    Raises
    ------
    ConfigurationError
        If any parameter is out of range.
    """
    try:
        config = RunConfig(
            tile_size=tile_size,
            suffix=suffix,
            jpeg_quality=jpeg_quality,
            threads=threads,
            keep_tiles=keep_tiles,
            tiler=tiler,
            strict_pairing=strict_pairing,
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid run parameters: {exc}") from exc

    quality = config.jpeg_quality if config.suffix in JPEG_SUFFIXES else None
    return RunOptions(
        tiling=TilingOptions(tile_size=config.tile_size, suffix=config.suffix, quality=quality),
        archive=ArchiveOptions(keep_tiles=config.keep_tiles),
        workers=config.threads or default_worker_count(),
        tiler=config.tiler,
        strict_pairing=config.strict_pairing,
    )


def resolve_generator(
    name: str,
    extra_modules: Iterable[str] | None = None,
) -> PyramidGenerator:
    """Look up a tiler by name in the default registry."""
    return create_default_registry(extra_modules=extra_modules).get(name)


def _describe_failure(exc: BaseException) -> str:
    text = str(exc).strip()
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


def _generate(
    generator: PyramidGenerator,
    task: Task,
    tiling: TilingOptions,
) -> Dimensions:
    try:
        return generator.generate_pyramid(
            Path(task.source_path),
            Path(task.dest_folder),
            tiling.tile_size,
            tiling.suffix,
            tiling.quality,
        )
    except DeepZoomPackError:
        raise
    except Exception as exc:
        raise ExternalToolError(
            f"Tiler '{getattr(generator, 'name', '?')}' failed for {task.source_path}: {exc}"
        ) from exc
    except SystemExit as exc:
        # a plugin calling sys.exit fails its own task, not the whole run
        raise ExternalToolError(
            f"Tiler '{getattr(generator, 'name', '?')}' exited while processing "
            f"{task.source_path} (code {exc.code})"
        ) from exc


def process_image_task(
    task: Task,
    *,
    options: RunOptions,
    generator: PyramidGenerator,
    progress: ProgressSink | None = None,
) -> TaskOutcome:
    """Use-case: tile one image, pack its tiles, and write the sidecar.

    Every failure is caught here and returned as a failed outcome; nothing
    propagates to other tasks.

    Parameters
    ----------
    task : Task
        Image to process.
    options : RunOptions
        Tiling and archiving configuration.
    generator : PyramidGenerator
        External tiler.
    progress : ProgressSink | None, default=None
        Receives the outcome once the task finishes.

    Returns
    -------
    TaskOutcome
        Success with output size and tile count, or failure with a message.
    """
    dest = Path(task.dest_folder)
    try:
        width, height = _generate(generator, task, options.tiling)
        logger.info("Merging tiles to binary for %s", dest)
        archive = archive_tiles(dest, options.archive)
        write_metadata(dest, width, height, options.tiling.tile_size, archive.index)
    except Exception as exc:
        # the [ERROR] progress line is the user-facing report
        logger.debug(
            "Task %d (%s) failed: %s",
            task.sequence_index,
            task.source_path,
            exc,
            exc_info=True,
        )
        outcome = TaskOutcome(
            sequence_index=task.sequence_index,
            success=False,
            error_message=_describe_failure(exc),
        )
    else:
        outcome = TaskOutcome(
            sequence_index=task.sequence_index,
            success=True,
            output_width=width,
            output_height=height,
            tile_count=len(archive.index),
            warnings=archive.discard_errors,
        )

    if progress is not None:
        progress.record(task, outcome)
    return outcome


def run_batch(
    tasks: Sequence[Task],
    *,
    options: RunOptions,
    generator: PyramidGenerator,
    sink: LineSink | None = None,
) -> RunSummary:
    """Use-case: run the image pipeline over ``tasks`` with bounded concurrency."""
    scheduler = TaskScheduler(options.workers)
    with ResultAggregator(total=len(tasks), sink=sink) as aggregator:
        job = partial(process_image_task, options=options, generator=generator)
        scheduler.run(tasks, job, on_complete=aggregator.record)
    return aggregator.summary()


def _banner(options: RunOptions, total: int) -> list[str]:
    quality = options.tiling.quality if options.tiling.quality is not None else "n/a"
    return [
        "Configuration:",
        f"  Tile size: {options.tiling.tile_size}",
        f"  Format: {options.tiling.suffix}",
        f"  JPEG quality: {quality}",
        f"  Threads: {options.workers}",
        f"  Keep tiles: {'yes' if options.archive.keep_tiles else 'no'}",
        f"  Tiler: {options.tiler}",
        "",
        f"Processing {total} images...",
        "",
    ]


def pack_batch_from_lists(
    *,
    inputs_path: Path,
    outputs_path: Path,
    options: RunOptions,
    generator: PyramidGenerator | None = None,
    tiler_modules: Iterable[str] | None = None,
    sink: LineSink | None = None,
) -> RunSummary:
    """Use-case: load both task lists and pack every listed image.

    Raises
    ------
    ConfigurationError
        If the lists cannot be read or the tiler cannot be resolved. Raised
        before any task runs.
    """
    tasks = read_task_lists(inputs_path, outputs_path, strict=options.strict_pairing)
    generator = generator or resolve_generator(options.tiler, tiler_modules)

    # no workers are running before or after run_batch, so write directly
    write = sink or write_line
    if not tasks:
        write("No tasks to process.", False)
        return RunSummary(total=0, succeeded=0)
    for line in _banner(options, len(tasks)):
        write(line, False)

    summary = run_batch(tasks, options=options, generator=generator, sink=sink)

    write("", False)
    write(f"Completed: {summary.succeeded}/{summary.total} images", False)
    if summary.ok:
        write("All images processed successfully!", False)
    else:
        write(f"Warning: {summary.failed} images failed to process", True)
    return summary
