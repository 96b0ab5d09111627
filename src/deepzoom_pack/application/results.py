"""Application-layer value objects shared by the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeAlias


@dataclass(frozen=True)
class Task:
    """One image to tile and pack.

    ``sequence_index`` is the 0-based position among the retained pairs and is
    only used for ordering and progress output.
    """

    source_path: str
    dest_folder: str
    sequence_index: int


@dataclass(frozen=True)
class TaskOutcome:
    """Result of running the image pipeline for one task."""

    sequence_index: int
    success: bool
    error_message: str | None = None
    output_width: int = 0
    output_height: int = 0
    tile_count: int = 0
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class TileRecord:
    """Location of one compressed tile inside a container file."""

    coordinate_key: str
    container_name: str
    start_offset: int
    byte_size: int

    @property
    def end_offset(self) -> int:
        """Offset one past the last byte of this tile."""
        return self.start_offset + self.byte_size


TileIndex: TypeAlias = tuple[TileRecord, ...]


@dataclass(frozen=True)
class ArchiveResult:
    """Structured archiving outcome for one image folder."""

    container_path: Path
    index: TileIndex
    discard_errors: tuple[str, ...] = ()

    @property
    def total_bytes(self) -> int:
        """Sum of all compressed tile sizes (equals the container length)."""
        return sum(record.byte_size for record in self.index)


@dataclass(frozen=True)
class ProgressSnapshot:
    """Point-in-time view of a running batch."""

    succeeded: int
    completed: int
    total: int

    @property
    def failed(self) -> int:
        """Tasks that finished without success so far."""
        return self.completed - self.succeeded


@dataclass(frozen=True)
class RunSummary:
    """Final tally of a batch run."""

    total: int
    succeeded: int
    outcomes: tuple[TaskOutcome, ...] = field(default_factory=tuple)

    @property
    def failed(self) -> int:
        """Number of tasks that did not succeed."""
        return self.total - self.succeeded

    @property
    def ok(self) -> bool:
        """``True`` when every task succeeded (vacuously true for no tasks)."""
        return self.succeeded == self.total

    @property
    def exit_code(self) -> int:
        """Process exit status for this run."""
        return 0 if self.ok else 1
