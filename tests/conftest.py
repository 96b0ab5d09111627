"""Shared pytest configuration, marker assignment, and pipeline doubles."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

import pytest

from deepzoom_pack.errors import ExternalToolError


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


class FakePyramidGenerator:
    """Tiler double that writes a synthetic ``level/row/column`` tree.

    Level ``n`` holds ``2**n x 2**n`` tiles whose bytes encode their
    coordinate. A ``blank.png`` placeholder and a non-tile file are written
    alongside, the way real tilers leave extra files at the root.
    """

    name = "fake"

    def __init__(
        self,
        levels: int = 2,
        size: tuple[int, int] = (512, 512),
        fail_on: Iterable[str] = (),
        delay: float = 0.0,
    ) -> None:
        self.levels = levels
        self.size = size
        self.fail_on = set(fail_on)
        self.delay = delay
        self.calls: list[tuple[Path, Path, int, str, int | None]] = []
        self._lock = threading.Lock()

    @property
    def tiles_per_image(self) -> int:
        return sum(4**level for level in range(self.levels))

    def generate_pyramid(
        self,
        source_path: Path,
        dest_folder: Path,
        tile_size: int,
        suffix: str,
        quality: int | None = None,
    ) -> tuple[int, int]:
        with self._lock:
            self.calls.append((source_path, dest_folder, tile_size, suffix, quality))
        if self.delay:
            time.sleep(self.delay)
        if Path(source_path).name in self.fail_on:
            raise ExternalToolError(f"cannot decode {source_path}")

        root = Path(dest_folder)
        for level in range(self.levels):
            count = 2**level
            for row in range(count):
                for column in range(count):
                    tile = root / str(level) / str(row) / f"{column}{suffix}"
                    tile.parent.mkdir(parents=True, exist_ok=True)
                    tile.write_bytes(f"tile {level}/{row}/{column};".encode() * 16)
        (root / "blank.png").write_bytes(b"blank placeholder")
        (root / "vips-properties.xml").write_text("<properties/>", encoding="utf-8")
        return self.size


@pytest.fixture
def fake_tiler() -> FakePyramidGenerator:
    """Two-level fake tiler (five tiles per image)."""
    return FakePyramidGenerator()


@pytest.fixture
def make_tiler() -> Callable[..., FakePyramidGenerator]:
    """Factory for fake tilers with custom behaviour."""
    return FakePyramidGenerator


@pytest.fixture
def write_task_lists(tmp_path: Path) -> Callable[[list[str], list[str]], tuple[Path, Path]]:
    """Write ``inputs.txt``/``outputs.txt`` under ``tmp_path`` from line lists."""

    def _write(sources: list[str], destinations: list[str]) -> tuple[Path, Path]:
        inputs = tmp_path / "inputs.txt"
        outputs = tmp_path / "outputs.txt"
        inputs.write_text("\n".join(sources) + "\n", encoding="utf-8")
        outputs.write_text("\n".join(destinations) + "\n", encoding="utf-8")
        return inputs, outputs

    return _write


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """Undo CLI logging setup so ``caplog`` sees package records in every test."""
    yield
    logger = logging.getLogger("deepzoom_pack")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
