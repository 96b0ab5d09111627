"""Canvas sizing helpers shared by pyramid generators."""

from __future__ import annotations


def next_power_of_two(value: int) -> int:
    """Return the smallest power of two greater than or equal to ``value``.

    Non-positive inputs map to ``1``.
    """
    if value <= 0:
        return 1
    power = 1
    while power < value:
        power *= 2
    return power


def square_canvas_size(width: int, height: int) -> int:
    """Return the square power-of-two canvas an image is stretched onto."""
    return next_power_of_two(max(width, height))


def pyramid_level_sizes(canvas: int, tile_size: int) -> list[int]:
    """Return the edge length of every pyramid level, level 0 first.

    Level 0 is the first level whose edge fits inside one tile; each following
    level doubles until the full canvas is reached.

    Parameters
    ----------
    canvas : int
        Edge length of the full-resolution square canvas.
    tile_size : int
        Edge length of one tile.

    Returns
    -------
    list[int]
        Level edge lengths ordered from the coarsest level to the finest.
    """
    if tile_size <= 0:
        raise ValueError("tile_size must be positive.")
    sizes = [canvas]
    while sizes[-1] > tile_size:
        sizes.append(max(1, (sizes[-1] + 1) // 2))
    sizes.reverse()
    return sizes


def tiles_per_axis(level_size: int, tile_size: int) -> int:
    """Return how many tiles cover one axis of a level."""
    return max(1, -(-level_size // tile_size))
