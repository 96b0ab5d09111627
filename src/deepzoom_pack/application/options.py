"""Typed option objects shared across pipeline use-cases."""

from __future__ import annotations

from dataclasses import dataclass, field


def container_name(index: int = 0) -> str:
    """Return the container file name for split index ``index``."""
    return f"tiles_{index:03d}.binz"


DEFAULT_CONTAINER_NAME = container_name(0)
DEFAULT_TILE_EXTENSIONS: frozenset[str] = frozenset({".png", ".jpg", ".jpeg"})


@dataclass(frozen=True)
class TilingOptions:
    """Parameters forwarded to the pyramid generator."""

    tile_size: int = 512
    suffix: str = ".jpg"
    quality: int | None = 85


@dataclass(frozen=True)
class ArchiveOptions:
    """Tile archiving configuration."""

    container_name: str = DEFAULT_CONTAINER_NAME
    extensions: frozenset[str] = DEFAULT_TILE_EXTENSIONS
    keep_tiles: bool = False


@dataclass(frozen=True)
class RunOptions:
    """Options for one batch run passed through use-cases."""

    tiling: TilingOptions = field(default_factory=TilingOptions)
    archive: ArchiveOptions = field(default_factory=ArchiveOptions)
    workers: int = 4
    tiler: str = "pyvips"
    strict_pairing: bool = False
