"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from deepzoom_pack.application.results import Task, TaskOutcome
from deepzoom_pack.types import Dimensions


class PyramidGenerator(Protocol):
    """Write a ``level/row/column.ext`` tile pyramid for one image."""

    name: str

    def generate_pyramid(
        self,
        source_path: Path,
        dest_folder: Path,
        tile_size: int,
        suffix: str,
        quality: int | None = None,
    ) -> Dimensions:
        """Tile ``source_path`` under ``dest_folder`` and return output size."""


class ProgressSink(Protocol):
    """Receive per-task completion notices from concurrent workers."""

    def record(self, task: Task, outcome: TaskOutcome) -> None:
        """Register the outcome of ``task``."""

    def emit(self, line: str, err: bool = False) -> None:
        """Queue one free-form output line."""
