"""Pyramid generators producing google-layout ``level/row/column`` tile trees."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from deepzoom_pack.errors import DependencyError, ExternalToolError
from deepzoom_pack.geometry import pyramid_level_sizes, square_canvas_size, tiles_per_axis
from deepzoom_pack.types import JPEG_SUFFIXES, Dimensions

logger = logging.getLogger(__name__)

# libvips' own default threshold for google-layout blank skipping
DEFAULT_BLANK_THRESHOLD = 5
DEFAULT_JPEG_QUALITY = 85
BLANK_TILE_NAME = "blank.png"


def _vips_suffix(suffix: str, quality: int | None) -> str:
    if quality is not None and suffix.lower() in JPEG_SUFFIXES:
        return f"{suffix}[Q={quality}]"
    return suffix


class PyvipsPyramidGenerator:
    """Tile images with libvips ``dzsave``.

    The image is stretched onto a square power-of-two canvas and written with
    the google layout, one-tile depth, and blank-tile skipping.
    """

    name = "pyvips"

    def __init__(self, skip_blanks: int = DEFAULT_BLANK_THRESHOLD) -> None:
        self.skip_blanks = skip_blanks

    def generate_pyramid(
        self,
        source_path: Path,
        dest_folder: Path,
        tile_size: int,
        suffix: str,
        quality: int | None = None,
    ) -> Dimensions:
        """Write the pyramid for ``source_path`` into ``dest_folder``.

        Parameters
        ----------
        source_path : Path
            Image readable by libvips.
        dest_folder : Path
            Pyramid root; created by ``dzsave``.
        tile_size : int
            Tile edge length in pixels.
        suffix : str
            Tile file extension (``.png``, ``.jpg`` or ``.jpeg``).
        quality : int | None, default=None
            JPEG quality; ignored for PNG.

        Returns
        -------
        tuple[int, int]
            Output width and height (always the same power of two).

        Raises
        ------
        DependencyError
            If ``pyvips`` (or libvips) is unavailable.
        ExternalToolError
            If libvips cannot load, resize, or save the image.
        """
        try:
            import pyvips
        except (ImportError, OSError) as exc:
            raise DependencyError(
                "pyvips is required for the 'pyvips' tiler. Install extra: .[vips]"
            ) from exc

        try:
            image: Any = pyvips.Image.new_from_file(str(source_path))
            width, height = image.width, image.height
            target = square_canvas_size(width, height)
            logger.info("%s: %dx%d -> %dx%d", source_path, width, height, target, target)

            image = image.resize(target / width, vscale=target / height)
            Path(dest_folder).parent.mkdir(parents=True, exist_ok=True)
            image.dzsave(
                str(dest_folder),
                layout="google",
                depth="onetile",
                tile_size=tile_size,
                skip_blanks=self.skip_blanks,
                suffix=_vips_suffix(suffix, quality),
            )
        except pyvips.Error as exc:
            raise ExternalToolError(f"libvips failed for {source_path}: {exc}") from exc
        return target, target


class PillowPyramidGenerator:
    """Pure-Pillow implementation of the same google-layout pyramid.

    Level 0 is the coarsest level (the canvas shrunk into one tile); each
    following level doubles in size. Tiles are padded with the background
    colour at the edges, and tiles within ``skip_blanks`` of the background
    are not written. A ``blank.png`` placeholder is written at the root
    whenever skipping is enabled.
    """

    name = "pillow"

    def __init__(
        self,
        skip_blanks: int = DEFAULT_BLANK_THRESHOLD,
        background: int = 255,
    ) -> None:
        self.skip_blanks = skip_blanks
        self.background = background

    def generate_pyramid(
        self,
        source_path: Path,
        dest_folder: Path,
        tile_size: int,
        suffix: str,
        quality: int | None = None,
    ) -> Dimensions:
        """Write the pyramid for ``source_path`` into ``dest_folder``."""
        try:
            from PIL import Image
        except ImportError as exc:
            raise DependencyError("Pillow is required for the 'pillow' tiler.") from exc

        suffix = suffix.lower()
        try:
            with Image.open(source_path) as opened:
                opened.load()
                image = self._prepare_mode(opened, suffix)
        except OSError as exc:
            raise ExternalToolError(f"Cannot read image {source_path}: {exc}") from exc

        width, height = image.size
        canvas = square_canvas_size(width, height)
        logger.info("%s: %dx%d -> %dx%d", source_path, width, height, canvas, canvas)

        resample = Image.Resampling.LANCZOS
        full = image.resize((canvas, canvas), resample)
        root = Path(dest_folder)
        root.mkdir(parents=True, exist_ok=True)

        written = 0
        for level, size in enumerate(pyramid_level_sizes(canvas, tile_size)):
            level_image = full if size == canvas else full.resize((size, size), resample)
            count = tiles_per_axis(size, tile_size)
            for row in range(count):
                for column in range(count):
                    tile = self._cut_tile(level_image, row, column, tile_size)
                    if self._is_blank(tile):
                        continue
                    tile_path = root / str(level) / str(row) / f"{column}{suffix}"
                    tile_path.parent.mkdir(parents=True, exist_ok=True)
                    self._save(tile, tile_path, suffix, quality)
                    written += 1

        if self.skip_blanks >= 0:
            blank = Image.new("RGB", (tile_size, tile_size), self._fill("RGB"))
            blank.save(root / BLANK_TILE_NAME, format="PNG")
        logger.debug("Wrote %d tiles under %s", written, root)
        return canvas, canvas

    @staticmethod
    def _prepare_mode(image: Any, suffix: str) -> Any:
        if suffix in JPEG_SUFFIXES:
            return image.convert("RGB")
        has_alpha = "A" in image.getbands() or "transparency" in image.info
        return image.convert("RGBA" if has_alpha else "RGB")

    def _fill(self, mode: str) -> tuple[int, ...]:
        bands = 4 if mode == "RGBA" else 3
        return (self.background,) * bands

    def _cut_tile(self, level_image: Any, row: int, column: int, tile_size: int) -> Any:
        from PIL import Image

        left = column * tile_size
        top = row * tile_size
        right = min(left + tile_size, level_image.width)
        bottom = min(top + tile_size, level_image.height)
        region = level_image.crop((left, top, right, bottom))
        if region.size == (tile_size, tile_size):
            return region
        tile = Image.new(level_image.mode, (tile_size, tile_size), self._fill(level_image.mode))
        tile.paste(region, (0, 0))
        return tile

    def _is_blank(self, tile: Any) -> bool:
        if self.skip_blanks < 0:
            return False
        floor = self.background - self.skip_blanks
        ceiling = self.background + self.skip_blanks
        extrema = tile.convert("RGB").getextrema()
        return all(low >= floor and high <= ceiling for low, high in extrema)

    @staticmethod
    def _save(tile: Any, path: Path, suffix: str, quality: int | None) -> None:
        if suffix in JPEG_SUFFIXES:
            tile.save(path, format="JPEG", quality=quality or DEFAULT_JPEG_QUALITY)
        else:
            tile.save(path, format="PNG")
