"""
RKAF update package parser.

An RKAF package starts with a fixed 2048-byte header carrying the
manufacturer/model strings and a table of up to 16 partitions. Each
real partition is streamed out of the open package file into its own
file, and its geometry is recorded in partition-metadata.txt so the
package can be rebuilt later.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Tuple, Union

from ..core.config import DEFAULT_CHUNK_SIZE
from ..core.exceptions import MalformedHeaderError
from ..core.logger import get_logger
from ..core.models import PackageInfo, PartitionInfo
from ..extractors.region import extract_region
from ..utils import safe_extract_path
from .layout import RKAF_SIGNATURE, decode_cstring, read_bytes, read_u32_le

logger = get_logger(__name__)

HEADER_SIZE = 0x800
MAX_PARTS = 16
PART_ENTRY_SIZE = 112

MAGIC_OFFSET = 0x000
LENGTH_OFFSET = 0x004
MODEL_OFFSET, MODEL_SIZE = 0x008, 0x22
ID_OFFSET, ID_SIZE = 0x02A, 0x1E
MANUFACTURER_OFFSET, MANUFACTURER_SIZE = 0x048, 0x38
UNKNOWN1_OFFSET = 0x080
VERSION_OFFSET = 0x084
NUM_PARTS_OFFSET = 0x088
PARTS_OFFSET = 0x08C

# Offsets within one partition entry
PART_NAME_SIZE = 32
PART_PATH_OFFSET, PART_PATH_SIZE = 32, 60
PART_FLASH_SIZE = 92
PART_PART_OFFSET = 96
PART_FLASH_OFFSET = 100
PART_PADDED_SIZE = 104
PART_BYTE_COUNT = 108

# Table slots that describe the package itself rather than a partition
PLACEHOLDER_PATHS = ("SELF", "RESERVED")

IMAGE_DIRNAME = "Image"
MANIFEST_FILENAME = "partition-metadata.txt"


@dataclass(frozen=True)
class PartitionEntry:
    """Raw partition table record, text fields still undecoded."""

    name: bytes
    full_path: bytes
    flash_size: int
    part_offset: int
    flash_offset: int
    padded_size: int
    part_byte_count: int


@dataclass(frozen=True)
class RKAFHeader:
    """Decoded fixed-size RKAF header record."""

    magic: bytes
    length: int
    model: bytes
    package_id: bytes
    manufacturer: bytes
    unknown1: int
    version: int
    num_parts: int
    parts: Tuple[PartitionEntry, ...]


def _parse_entry(buf: bytes, base: int) -> PartitionEntry:
    return PartitionEntry(
        name=read_bytes(buf, base, PART_NAME_SIZE, "part.name"),
        full_path=read_bytes(buf, base + PART_PATH_OFFSET, PART_PATH_SIZE, "part.full_path"),
        flash_size=read_u32_le(buf, base + PART_FLASH_SIZE, "part.flash_size"),
        part_offset=read_u32_le(buf, base + PART_PART_OFFSET, "part.part_offset"),
        flash_offset=read_u32_le(buf, base + PART_FLASH_OFFSET, "part.flash_offset"),
        padded_size=read_u32_le(buf, base + PART_PADDED_SIZE, "part.padded_size"),
        part_byte_count=read_u32_le(buf, base + PART_BYTE_COUNT, "part.part_byte_count"),
    )


def parse_rkaf_header(buf: bytes) -> RKAFHeader:
    """
    Decode an RKAF header from the first HEADER_SIZE bytes of ``buf``.

    Raises:
        MalformedHeaderError: short buffer, bad magic or oversized table
    """
    if len(buf) < HEADER_SIZE:
        raise MalformedHeaderError(
            "File too short for RKAF header",
            details={"size": len(buf), "expected": HEADER_SIZE},
        )

    magic = read_bytes(buf, MAGIC_OFFSET, 4, "magic")
    if magic != RKAF_SIGNATURE:
        raise MalformedHeaderError("Invalid header magic id", details={"magic": magic.hex()})

    num_parts = read_u32_le(buf, NUM_PARTS_OFFSET, "num_parts")
    if num_parts > MAX_PARTS:
        raise MalformedHeaderError(
            "Partition count exceeds table size",
            details={"num_parts": num_parts, "max": MAX_PARTS},
        )

    return RKAFHeader(
        magic=magic,
        length=read_u32_le(buf, LENGTH_OFFSET, "length"),
        model=read_bytes(buf, MODEL_OFFSET, MODEL_SIZE, "model"),
        package_id=read_bytes(buf, ID_OFFSET, ID_SIZE, "id"),
        manufacturer=read_bytes(buf, MANUFACTURER_OFFSET, MANUFACTURER_SIZE, "manufacturer"),
        unknown1=read_u32_le(buf, UNKNOWN1_OFFSET, "unknown1"),
        version=read_u32_le(buf, VERSION_OFFSET, "version"),
        num_parts=num_parts,
        parts=tuple(
            _parse_entry(buf, PARTS_OFFSET + i * PART_ENTRY_SIZE) for i in range(num_parts)
        ),
    )


def _check_length(header: RKAFHeader, filesize: int, warnings: List[str]):
    # The length field covers everything but the trailing CRC word
    if filesize - 4 != header.length:
        message = (
            f"Header length {header.length} does not match file size {filesize}, "
            "cannot check CRC"
        )
        logger.warning(message)
        warnings.append(message)


def _partitions(header: RKAFHeader, warnings: List[str]) -> Iterator[Tuple[int, PartitionInfo]]:
    """Yield (slot, partition) for every real table entry, in table order."""
    for index, part in enumerate(header.parts):
        full_path = decode_cstring(part.full_path)
        if full_path is None:
            full_path = decode_cstring(part.full_path, errors="replace")
            message = f"Partition slot {index} path is not valid UTF-8, using {full_path!r}"
            logger.warning(message)
            warnings.append(message)

        if full_path in PLACEHOLDER_PATHS:
            continue

        yield index, PartitionInfo(
            name=decode_cstring(part.name, errors="replace"),
            path=full_path,
            flash_size=part.flash_size,
            flash_offset=part.flash_offset,
            part_offset=part.part_offset,
            padded_size=part.padded_size,
            part_byte_count=part.part_byte_count,
        )


def _package_info(
    header: RKAFHeader, filesize: int, partitions: List[PartitionInfo], warnings: List[str]
) -> PackageInfo:
    return PackageInfo(
        manufacturer=decode_cstring(header.manufacturer, "unknown"),
        model=decode_cstring(header.model, "unknown"),
        filesize=filesize,
        partitions=tuple(partitions),
        package_id=decode_cstring(header.package_id, ""),
        version_code=header.version,
        unknown1=header.unknown1,
        warnings=tuple(warnings),
    )


def describe_rkaf(buf: bytes, filesize: int) -> PackageInfo:
    """Build PackageInfo from a header buffer without extracting anything."""
    header = parse_rkaf_header(buf)
    warnings: List[str] = []
    _check_length(header, filesize, warnings)
    partitions = [info for _, info in _partitions(header, warnings)]
    return _package_info(header, filesize, partitions, warnings)


def unpack_rkaf(
    file_path: Union[str, Path],
    dst_path: Union[str, Path],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> PackageInfo:
    """
    Unpack an RKAF package file.

    Partitions land at ``dst_path/<full_path>`` and their geometry is
    appended to ``dst_path/partition-metadata.txt`` as each is found.

    Raises:
        MalformedHeaderError: bad header, or a partition path escaping ``dst_path``
        TruncatedRegionError: a partition range runs past the end of the file
    """
    dst = Path(dst_path)
    warnings: List[str] = []
    partitions: List[PartitionInfo] = []

    with open(file_path, "rb") as fp:
        header = parse_rkaf_header(fp.read(HEADER_SIZE))

        filesize = os.fstat(fp.fileno()).st_size
        logger.info(f"Filesize: {filesize}")
        _check_length(header, filesize, warnings)

        (dst / IMAGE_DIRNAME).mkdir(parents=True, exist_ok=True)

        logger.info(f"manufacturer: {decode_cstring(header.manufacturer, 'unknown')}")
        logger.info(f"model: {decode_cstring(header.model, 'unknown')}")

        manifest_path = dst / MANIFEST_FILENAME
        with open(manifest_path, "w", encoding="utf-8", newline="\n") as manifest:
            for index, info in _partitions(header, warnings):
                target = safe_extract_path(str(dst), info.path)
                if target is None:
                    raise MalformedHeaderError(
                        "Partition path escapes destination directory",
                        details={"slot": index, "path": info.path},
                    )

                manifest.write(info.manifest_line() + "\n")
                manifest.flush()
                partitions.append(info)

                Path(target).parent.mkdir(parents=True, exist_ok=True)
                extract_region(fp, info.part_offset, info.part_byte_count, target, chunk_size)

    logger.info(f"Partition metadata saved to: {manifest_path}")

    return _package_info(header, filesize, partitions, warnings)
