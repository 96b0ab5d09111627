"""Pack a handful of generated images with the Python API.

Run from the repository root:

    python examples/batch_pack_example.py /tmp/deepzoom-demo
"""

from __future__ import annotations

import sys
from pathlib import Path

from PIL import Image, ImageDraw

from deepzoom_pack import pack_images, verify_archive


def _make_images(workdir: Path, count: int = 3) -> list[Path]:
    paths = []
    for index in range(count):
        image = Image.new("RGB", (300 + 100 * index, 200), (30 * index, 90, 160))
        ImageDraw.Draw(image).ellipse((20, 20, 180, 180), fill=(240, 200, 40))
        path = workdir / f"image_{index}.png"
        image.save(path)
        paths.append(path)
    return paths


def main(workdir: Path) -> int:
    workdir.mkdir(parents=True, exist_ok=True)
    sources = _make_images(workdir)
    destinations = [workdir / "packed" / source.stem for source in sources]

    inputs = workdir / "inputs.txt"
    outputs = workdir / "outputs.txt"
    inputs.write_text("\n".join(str(p) for p in sources) + "\n", encoding="utf-8")
    outputs.write_text("\n".join(str(p) for p in destinations) + "\n", encoding="utf-8")

    summary = pack_images(inputs, outputs, tile_size=256, suffix=".png", tiler="pillow")
    for destination in destinations:
        if destination.joinpath("metadata.json").exists():
            report = verify_archive(destination)
            print(f"{destination}: {report.tile_count} tiles verified")
    return summary.exit_code


if __name__ == "__main__":
    sys.exit(main(Path(sys.argv[1] if len(sys.argv) > 1 else "deepzoom-demo")))
