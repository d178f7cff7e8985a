"""
Format dispatch for rkunpack.

Recognizes an image by its leading 4-byte signature and routes it to
the RKFW or RKAF parser.
"""

import dataclasses
from pathlib import Path
from typing import Optional, Union

from ..formats.layout import RKAF_SIGNATURE, RKFW_SIGNATURE
from ..formats.rkaf import describe_rkaf, unpack_rkaf
from ..formats.rkfw import EMBEDDED_FILENAME, parse_rkfw_header, unpack_rkfw
from .config import DEFAULT_CHUNK_SIZE, Config
from .exceptions import UnrecognizedFormatError
from .logger import get_logger
from .models import ImageFormat, UnpackResult

logger = get_logger(__name__)

PathLike = Union[str, Path]

EMBEDDED_DIRNAME = "embedded"


def _read_image(file_path: PathLike) -> bytes:
    with open(file_path, "rb") as f:
        return f.read()


def detect_format(buf: bytes) -> ImageFormat:
    """Identify the container format from the first four bytes."""
    signature = bytes(buf[0:4])
    if signature == RKAF_SIGNATURE:
        return ImageFormat.RKAF
    if signature == RKFW_SIGNATURE:
        return ImageFormat.RKFW
    raise UnrecognizedFormatError(signature)


def unpack_file(
    file_path: PathLike,
    dst_path: PathLike,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    recursive: bool = False,
) -> UnpackResult:
    """
    Unpack a firmware image into ``dst_path``.

    Args:
        file_path: RKFW or RKAF image
        dst_path: Output directory, created if missing
        chunk_size: Copy buffer size for streamed partitions
        recursive: Also unpack the RKAF package embedded in an RKFW image

    Returns:
        UnpackResult holding WrapperInfo or PackageInfo

    Raises:
        UnrecognizedFormatError: signature matches neither format
    """
    buf = _read_image(file_path)
    image_format = detect_format(buf)

    if image_format is ImageFormat.RKAF:
        info = unpack_rkaf(file_path, dst_path, chunk_size=chunk_size)
    else:
        info = unpack_rkfw(buf, dst_path)
        if recursive:
            nested_src = Path(dst_path) / EMBEDDED_FILENAME
            nested_dst = Path(dst_path) / EMBEDDED_DIRNAME
            logger.info(f"Unpacking {nested_src} into {nested_dst}")
            nested = unpack_rkaf(nested_src, nested_dst, chunk_size=chunk_size)
            info = dataclasses.replace(info, embedded=nested)

    return UnpackResult(
        format=image_format,
        info=info,
        source=str(file_path),
        destination=str(dst_path),
    )


def inspect_file(file_path: PathLike) -> UnpackResult:
    """Decode an image's header metadata without writing any file."""
    buf = _read_image(file_path)
    image_format = detect_format(buf)

    if image_format is ImageFormat.RKAF:
        info = describe_rkaf(buf, len(buf))
    else:
        info = parse_rkfw_header(buf)

    return UnpackResult(format=image_format, info=info, source=str(file_path))


class Unpacker:
    """Runs unpack/inspect with settings taken from a Config."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def unpack(self, file_path: PathLike, dst_path: Optional[PathLike] = None) -> UnpackResult:
        destination = dst_path or self.config.output_dir
        logger.info(f"Unpacking {file_path} into {destination}")
        return unpack_file(
            file_path,
            destination,
            chunk_size=self.config.extractor.chunk_size,
            recursive=self.config.extractor.recursive,
        )

    def inspect(self, file_path: PathLike) -> UnpackResult:
        return inspect_file(file_path)
