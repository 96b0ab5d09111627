"""Per-tile gzip compression.

Each tile is compressed into its own gzip member so any tile can be recovered
from its byte range alone.
"""

from __future__ import annotations

import zlib

from deepzoom_pack.errors import CompressionError

GZIP_WBITS = zlib.MAX_WBITS | 16
DEFAULT_LEVEL = zlib.Z_DEFAULT_COMPRESSION


def compress_tile(data: bytes, level: int = DEFAULT_LEVEL) -> bytes:
    """Compress one tile payload into a standalone gzip member.

    The gzip header carries no timestamp, so equal input yields equal output.

    Parameters
    ----------
    data : bytes
        Raw tile file contents.
    level : int, default=zlib.Z_DEFAULT_COMPRESSION
        Deflate compression level.

    Returns
    -------
    bytes
        Gzip-framed deflate stream.

    Raises
    ------
    CompressionError
        If the codec rejects the input or the level.
    """
    try:
        compressor = zlib.compressobj(level, zlib.DEFLATED, GZIP_WBITS)
        return compressor.compress(data) + compressor.flush(zlib.Z_FINISH)
    except (zlib.error, ValueError, TypeError) as exc:
        raise CompressionError(f"Failed to compress tile: {exc}") from exc


def decompress_tile(payload: bytes) -> bytes:
    """Inflate one gzip member produced by :func:`compress_tile`.

    Raises
    ------
    CompressionError
        If ``payload`` is not a complete gzip member.
    """
    try:
        decompressor = zlib.decompressobj(GZIP_WBITS)
        data = decompressor.decompress(payload) + decompressor.flush()
    except zlib.error as exc:
        raise CompressionError(f"Failed to decompress tile: {exc}") from exc
    if not decompressor.eof:
        raise CompressionError("Failed to decompress tile: truncated gzip member.")
    if decompressor.unused_data:
        raise CompressionError("Failed to decompress tile: trailing bytes after member.")
    return data
