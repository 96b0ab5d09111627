"""Load line-aligned source/destination lists into ordered tasks."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from deepzoom_pack.application.results import Task
from deepzoom_pack.errors import ConfigurationError
from deepzoom_pack.schemas import TaskListConfig

logger = logging.getLogger(__name__)


def _read_lines(path: Path, role: str) -> list[str]:
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise ConfigurationError(f"Cannot open {role} file: {path} ({exc})") from exc
    except UnicodeDecodeError as exc:
        raise ConfigurationError(f"{role.capitalize()} file is not UTF-8 text: {path}") from exc


def pair_task_lines(
    sources: Iterable[str],
    destinations: Iterable[str],
    *,
    strict: bool = False,
) -> list[Task]:
    """Pair line ``i`` of ``sources`` with line ``i`` of ``destinations``.

    A pair is dropped when either side is blank; every retained pair gets the
    next sequence index. Pairing stops at the shorter list.

    Parameters
    ----------
    sources : Iterable[str]
        Source image paths, one per line.
    destinations : Iterable[str]
        Destination folders, one per line.
    strict : bool, default=False
        Reject lists whose lengths differ or whose blank lines do not line up.

    Returns
    -------
    list[Task]
        Tasks in list order. Empty when no valid pair remains.

    Raises
    ------
    ConfigurationError
        In strict mode, when the two lists are not symmetric.
    """
    source_lines = [line.strip() for line in sources]
    dest_lines = [line.strip() for line in destinations]

    if len(source_lines) != len(dest_lines):
        message = (
            f"Task lists differ in length ({len(source_lines)} inputs, "
            f"{len(dest_lines)} outputs)"
        )
        if strict:
            raise ConfigurationError(message + ".")
        logger.warning("%s; extra lines are ignored.", message)

    tasks: list[Task] = []
    for line_number, (source, dest) in enumerate(zip(source_lines, dest_lines), start=1):
        if not source or not dest:
            if strict and (source or dest):
                raise ConfigurationError(
                    f"Line {line_number} is blank in only one of the task lists."
                )
            logger.debug("Skipping line %d: blank entry.", line_number)
            continue
        tasks.append(Task(source_path=source, dest_folder=dest, sequence_index=len(tasks)))
    return tasks


def read_task_lists(
    inputs_path: Path,
    outputs_path: Path,
    *,
    strict: bool = False,
) -> list[Task]:
    """Read both list files and return the paired tasks.

    Raises
    ------
    ConfigurationError
        If either file cannot be opened, or (in strict mode) the lists are
        asymmetric.
    """
    try:
        config = TaskListConfig(
            inputs_path=inputs_path,
            outputs_path=outputs_path,
            strict_pairing=strict,
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid task list parameters: {exc}") from exc

    sources = _read_lines(config.inputs_path, "input")
    destinations = _read_lines(config.outputs_path, "output")
    tasks = pair_task_lines(sources, destinations, strict=config.strict_pairing)
    logger.info(
        "Loaded %d task(s) from %s and %s.",
        len(tasks),
        config.inputs_path,
        config.outputs_path,
    )
    return tasks
