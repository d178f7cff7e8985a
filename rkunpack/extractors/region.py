"""
Region extraction.

Copies contiguous byte ranges of a firmware image into standalone
files, either from an open file handle in bounded chunks or from an
image already held in memory.
"""

from pathlib import Path
from typing import BinaryIO, Union

from ..core.config import DEFAULT_CHUNK_SIZE
from ..core.exceptions import TruncatedRegionError
from ..core.logger import ProgressLogger, get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


def extract_region(
    source: BinaryIO,
    offset: int,
    length: int,
    destination: PathLike,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """
    Copy ``length`` bytes at ``offset`` of ``source`` into a new file.

    Every read must return the full requested chunk; a short read means
    the offset/length pair points past the end of the source and raises
    TruncatedRegionError. Nothing is retried.

    Returns:
        Number of bytes written
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    logger.info(f"{offset:08x}-{length:08x} {destination}")

    source.seek(offset)
    remaining = length
    total_chunks = (length + chunk_size - 1) // chunk_size

    with open(destination, "wb") as out, ProgressLogger(
        logger, f"Copying {Path(destination).name}", total=total_chunks
    ) as progress:
        while remaining > 0:
            read_len = min(remaining, chunk_size)
            chunk = source.read(read_len)

            if len(chunk) != read_len:
                raise TruncatedRegionError(
                    "Insufficient length in source file",
                    details={
                        "destination": str(destination),
                        "position": hex(offset + length - remaining),
                        "requested": read_len,
                        "got": len(chunk),
                    },
                )

            out.write(chunk)
            remaining -= read_len
            progress.update()

    return length


def write_region(buf: bytes, offset: int, length: int, destination: PathLike) -> int:
    """
    Write ``buf[offset:offset + length]`` to a new file.

    The range must lie entirely within ``buf``.

    Returns:
        Number of bytes written
    """
    if offset < 0 or length < 0 or offset + length > len(buf):
        raise TruncatedRegionError(
            "Region lies outside the image",
            details={
                "destination": str(destination),
                "offset": hex(offset),
                "size": length,
                "image_size": len(buf),
            },
        )

    with open(destination, "wb") as out:
        out.write(memoryview(buf)[offset : offset + length])

    return length
