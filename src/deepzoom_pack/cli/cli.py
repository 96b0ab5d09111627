#!/usr/bin/env python3
"""
deepzoom_pack.cli.cli

Typer-based CLI for tiling images and packing each pyramid into one container.

The core install ships the pure-Pillow tiler; the libvips tiler needs the
``vips`` extra and a system libvips.

Examples
--------
Install core + libvips support:

    uv pip install -e ".[vips]"

Pack every image listed in ``inputs.txt`` into the folder on the same line of
``outputs.txt``:

    deepzoom-pack run --inputs inputs.txt --outputs outputs.txt --threads 8

Check a packed folder:

    deepzoom-pack verify out/image_0001
"""

from __future__ import annotations

import logging
import sys
import traceback
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import typer

from deepzoom_pack.errors import DeepZoomPackError
from deepzoom_pack.logging_config import configure_logging

app = typer.Typer(
    name="deepzoom-pack",
    help="Tile images into Deep Zoom pyramids and pack the tiles into indexed containers.",
    no_args_is_help=True,
)

ENV_PREFIX = "DEEPZOOM_PACK_"


# -----------------------------
# Dependency checks / utilities
# -----------------------------
@dataclass(frozen=True)
class MissingDep:
    """Represent a missing optional dependency."""

    import_name: str
    extra_name: str
    purpose: str


TILER_DEPS: dict[str, tuple[MissingDep, ...]] = {
    "pyvips": (MissingDep("pyvips", "vips", "libvips pyramid generation"),),
}


def _is_importable(module: str) -> bool:
    """Check whether a module can be resolved.

    Parameters
    ----------
    module : str
        Module name to resolve.

    Returns
    -------
    bool
        ``True`` if the module can be imported, otherwise ``False``.
    """
    import importlib.util

    try:
        return importlib.util.find_spec(module) is not None
    except (ImportError, ValueError):
        return False


def _require_deps(missing: Sequence[MissingDep]) -> None:
    """Raise a Typer error if any required deps are missing.

    Parameters
    ----------
    missing : Sequence[MissingDep]
        Dependency requirements for a command.
    """
    not_found = [d for d in missing if not _is_importable(d.import_name)]
    if not not_found:
        return

    extras = ",".join(sorted({d.extra_name for d in not_found}))
    details = "\n".join(
        f"- Missing '{d.import_name}' ({d.purpose}). Install extra: .[{d.extra_name}]"
        for d in not_found
    )
    msg = (
        "Missing optional dependencies for this command.\n\n"
        f"{details}\n\n"
        "Install with uv (recommended):\n"
        f'  uv pip install -e ".[{extras}]"\n\n'
        "Or with pip:\n"
        f'  pip install "deepzoom-pack[{extras}]"\n\n'
        "Or pick the pure-Pillow tiler: --tiler pillow\n"
    )
    raise typer.BadParameter(msg)


def _print_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly error and return the process exit code.

    Parameters
    ----------
    exc : Exception
        Exception that ended the command.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"✗ {type(exc).__name__}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _echo_line(line: str, err: bool = False) -> None:
    typer.echo(line, err=err)


def _has_tasks(inputs: Path, outputs: Path, strict_pairing: bool) -> bool:
    """Return whether the task lists hold at least one pair.

    Unreadable lists count as empty here; the run itself reports them.
    """
    from deepzoom_pack.tasks import read_task_lists

    try:
        return bool(read_task_lists(inputs, outputs, strict=strict_pairing))
    except DeepZoomPackError:
        return False


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks and debug logs."),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        envvar=f"{ENV_PREFIX}LOG_LEVEL",
        help="Logging level for diagnostic output (DEBUG, INFO, WARNING, ERROR).",
    ),
) -> None:
    """Initialize shared CLI state and logging.

    Parameters
    ----------
    ctx : typer.Context
        Typer context object used to store shared state.
    debug : bool, default=False
        Whether to enable debug error output.
    log_level : str, default="WARNING"
        Level applied to the package logger.
    """
    try:
        configure_logging(logging.DEBUG if debug else log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("run")
def run_cmd(
    ctx: typer.Context,
    inputs: Path = typer.Option(
        ..., "--inputs", "-i", help="Text file with one source image path per line."
    ),
    outputs: Path = typer.Option(
        ..., "--outputs", "-o", help="Text file with one destination folder per line."
    ),
    tile_size: int = typer.Option(
        512, "--tile-size", envvar=f"{ENV_PREFIX}TILE_SIZE", help="Tile edge length in pixels."
    ),
    suffix: str = typer.Option(
        ".jpg", "--suffix", envvar=f"{ENV_PREFIX}SUFFIX", help="Tile format: .png, .jpg or .jpeg."
    ),
    jpeg_quality: int = typer.Option(
        85,
        "--jpeg-quality",
        envvar=f"{ENV_PREFIX}JPEG_QUALITY",
        help="JPEG quality (1-100); ignored for PNG tiles.",
    ),
    threads: int | None = typer.Option(
        None,
        "--threads",
        "-t",
        envvar=f"{ENV_PREFIX}THREADS",
        help="Maximum images processed at once (default: CPU count).",
    ),
    keep_tiles: bool = typer.Option(
        False,
        "--keep-tiles",
        envvar=f"{ENV_PREFIX}KEEP_TILES",
        help="Keep the loose tile tree after packing.",
    ),
    tiler: str = typer.Option(
        "pyvips", "--tiler", envvar=f"{ENV_PREFIX}TILER", help="Pyramid generator name."
    ),
    tiler_module: list[str] | None = typer.Option(
        None,
        "--tiler-module",
        help="Tiler plugin module import path or file path (repeatable).",
    ),
    strict_pairing: bool = typer.Option(
        False,
        "--strict-pairing",
        help="Fail when the two task lists are not line-for-line symmetric.",
    ),
) -> None:
    """Tile and pack every image listed in the task files.

    Parameters
    ----------
    ctx : typer.Context
        Typer context containing global options.
    inputs : Path
        Source image list.
    outputs : Path
        Destination folder list, aligned line by line with ``inputs``.

    Notes
    -----
    - The ``pyvips`` tiler requires the `vips` extra once the lists hold tasks.
    - Exit status is 0 only when every task succeeds (or there are none).
    """
    debug: bool = bool(ctx.obj.get("debug", False))

    deps = TILER_DEPS.get(tiler.strip())
    if deps and _has_tasks(inputs, outputs, strict_pairing):
        _require_deps(deps)

    try:
        from deepzoom_pack.api import pack_images

        summary = pack_images(
            inputs_path=inputs,
            outputs_path=outputs,
            tile_size=tile_size,
            suffix=suffix,
            jpeg_quality=jpeg_quality,
            threads=threads,
            keep_tiles=keep_tiles,
            tiler=tiler,
            tiler_modules=tiler_module,
            strict_pairing=strict_pairing,
            sink=_echo_line,
        )
    except Exception as exc:
        # unexpected crashes still get a clean message; --debug adds the traceback
        raise typer.Exit(code=_print_error(exc, debug))
    raise typer.Exit(code=summary.exit_code)


@app.command("verify")
def verify_cmd(
    ctx: typer.Context,
    folder: Path = typer.Argument(..., help="Packed folder holding metadata.json."),
) -> None:
    """Check that a packed folder's container matches its sidecar index."""
    debug: bool = bool(ctx.obj.get("debug", False))

    try:
        from deepzoom_pack.validate import verify_archive

        report = verify_archive(folder)
    except DeepZoomPackError as exc:
        raise typer.Exit(code=_print_error(exc, debug))

    typer.echo(
        f"✓ {report.folder}: {report.tile_count} tiles, "
        f"{report.width}x{report.height}"
    )
    for name, size in sorted(report.container_bytes.items()):
        typer.echo(f"  {name}: {size} bytes")


@app.command("doctor")
def doctor_cmd() -> None:
    """Print installed imaging library versions and registered tilers."""
    import importlib.metadata as metadata

    typer.echo(f"Python: {sys.version.split()[0]}")
    for distribution in ("pillow", "pyvips", "pydantic", "typer"):
        try:
            typer.echo(f"{distribution}: {metadata.version(distribution)}")
        except metadata.PackageNotFoundError:
            typer.echo(f"{distribution}: <not installed>")

    if _is_importable("pyvips"):
        try:
            import pyvips

            typer.echo(f"libvips: {pyvips.version(0)}.{pyvips.version(1)}.{pyvips.version(2)}")
        except (ImportError, OSError) as exc:
            typer.echo(f"libvips: <unavailable> ({exc})")

    from deepzoom_pack.plugins.registry import create_default_registry

    typer.echo(f"tilers: {', '.join(create_default_registry().names())}")


if __name__ == "__main__":
    app()
