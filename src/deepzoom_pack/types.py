"""Shared type aliases for tiling and archiving modules."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

Dimensions: TypeAlias = tuple[int, int]
LineSink: TypeAlias = Callable[[str, bool], None]

SUPPORTED_SUFFIXES: tuple[str, ...] = (".png", ".jpg", ".jpeg")
JPEG_SUFFIXES: frozenset[str] = frozenset({".jpg", ".jpeg"})
