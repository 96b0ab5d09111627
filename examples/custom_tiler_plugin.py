"""Example tiler plugin for ``deepzoom-pack run --tiler-module``.

Usage
-----
    deepzoom-pack run --inputs inputs.txt --outputs outputs.txt \\
        --tiler-module examples/custom_tiler_plugin.py --tiler pillow-dark

Scans of slides or night imagery usually sit on a black background, so this
tiler pads edge tiles with black and skips tiles that are (nearly) black.
"""

from __future__ import annotations

from deepzoom_pack.adapters.tilers import PillowPyramidGenerator


class DarkBackgroundTiler(PillowPyramidGenerator):
    """Pillow tiler with a black background."""

    name = "pillow-dark"

    def __init__(self) -> None:
        super().__init__(skip_blanks=5, background=0)


TILER = DarkBackgroundTiler()
