"""
RKFW wrapper image parser.

The wrapper is the image consumed by the device flashing tool. Its
header sits at fixed offsets and points at two regions: the
bootloader blob and an embedded RKAF update package.
"""

import calendar
from pathlib import Path
from typing import Union

from ..core.exceptions import InvalidTimestampError, MissingEmbeddedPackageError
from ..core.logger import get_logger
from ..core.models import ChipFamily, WrapperInfo
from ..extractors.region import write_region
from .layout import RKAF_SIGNATURE, read_bytes, read_u8, read_u16_le, read_u32_le

logger = get_logger(__name__)

# Header field offsets
VERSION_PATCH_OFFSET = 0x06
VERSION_MINOR_OFFSET = 0x08
VERSION_MAJOR_OFFSET = 0x09
CODE_OFFSET = 0x0A
YEAR_OFFSET = 0x0E
MONTH_OFFSET = 0x10
CHIP_CODE_OFFSET = 0x15
BOOT_OFFSET_OFFSET = 0x19
BOOT_SIZE_OFFSET = 0x1D
UPDATE_OFFSET_OFFSET = 0x21
UPDATE_SIZE_OFFSET = 0x25

BOOT_FILENAME = "BOOT"
EMBEDDED_FILENAME = "embedded-update.img"


def _parse_version(buf: bytes) -> str:
    major = read_u8(buf, VERSION_MAJOR_OFFSET, "version.major")
    minor = read_u8(buf, VERSION_MINOR_OFFSET, "version.minor")
    patch = read_u16_le(buf, VERSION_PATCH_OFFSET, "version.patch")
    return f"{major}.{minor}.{patch}"


def _days_from_civil(year: int, month: int, day: int) -> int:
    """Days since 1970-01-01 in the proleptic Gregorian calendar."""
    year -= month <= 2
    era = year // 400
    yoe = year - era * 400
    doy = (153 * (month + (-3 if month > 2 else 9)) + 2) // 5 + day - 1
    doe = yoe * 365 + yoe // 4 - yoe // 100 + doy
    return era * 146097 + doe - 719468


def _parse_timestamp(buf: bytes) -> int:
    year = read_u16_le(buf, YEAR_OFFSET, "year")
    month, day, hour, minute, second = read_bytes(buf, MONTH_OFFSET, 5, "date/time")

    # The full 16-bit year range is valid, so no datetime here
    valid = 1 <= month <= 12
    if valid:
        month_days = calendar.mdays[month] + (month == 2 and calendar.isleap(year))
        valid = 1 <= day <= month_days and hour < 24 and minute < 60 and second < 60
    if not valid:
        raise InvalidTimestampError(
            "Invalid date/time in RKFW header",
            details={
                "date": f"{year}-{month:02}-{day:02}",
                "time": f"{hour:02}:{minute:02}:{second:02}",
            },
        )

    timestamp = _days_from_civil(year, month, day) * 86400 + hour * 3600 + minute * 60 + second
    logger.info(
        f"date: {year}-{month:02}-{day:02} {hour:02}:{minute:02}:{second:02} "
        f"(Unix timestamp: {timestamp})"
    )
    return timestamp


def _log_region(offset: int, size: int, name: str):
    end = offset + size - 1 if size else offset
    logger.info(f"{offset:08x}-{end:08x} {name:26} (size: {size})")


def parse_rkfw_header(buf: bytes) -> WrapperInfo:
    """
    Decode the RKFW header without writing anything.

    Raises:
        MalformedHeaderError: buffer too short for a header field
        InvalidTimestampError: build date/time fields out of range
    """
    logger.info("RKFW signature detected")
    warnings = []

    version = _parse_version(buf)
    logger.info(f"version: {version}")

    code = read_u32_le(buf, CODE_OFFSET, "code")
    logger.info(f"code field: 0x{code:08x}")

    timestamp = _parse_timestamp(buf)

    chip_code = read_u8(buf, CHIP_CODE_OFFSET, "chip")
    family = ChipFamily.from_code(chip_code)
    if family is ChipFamily.UNKNOWN:
        message = f"Unrecognized chip code 0x{chip_code:02x}"
        logger.warning(message)
        warnings.append(message)
    logger.info(f"family: {family.value}")

    return WrapperInfo(
        version=version,
        code=code,
        timestamp=timestamp,
        chip_family=family.value,
        chip_code=chip_code,
        boot_offset=read_u32_le(buf, BOOT_OFFSET_OFFSET, "boot_offset"),
        boot_size=read_u32_le(buf, BOOT_SIZE_OFFSET, "boot_size"),
        update_offset=read_u32_le(buf, UPDATE_OFFSET_OFFSET, "update_offset"),
        update_size=read_u32_le(buf, UPDATE_SIZE_OFFSET, "update_size"),
        warnings=tuple(warnings),
    )


def unpack_rkfw(buf: bytes, dst_path: Union[str, Path]) -> WrapperInfo:
    """
    Unpack an RKFW image held in memory.

    Writes BOOT and embedded-update.img under ``dst_path``. The
    bootloader region content is not checked; the embedded region must
    start with the RKAF signature.
    """
    info = parse_rkfw_header(buf)
    dst = Path(dst_path)
    dst.mkdir(parents=True, exist_ok=True)

    _log_region(info.boot_offset, info.boot_size, BOOT_FILENAME)
    write_region(buf, info.boot_offset, info.boot_size, dst / BOOT_FILENAME)

    marker = bytes(buf[info.update_offset : info.update_offset + len(RKAF_SIGNATURE)])
    if marker != RKAF_SIGNATURE:
        raise MissingEmbeddedPackageError(
            "Cannot find embedded RKAF update.img",
            details={"offset": hex(info.update_offset), "found": marker.hex() or "<eof>"},
        )

    _log_region(info.update_offset, info.update_size, EMBEDDED_FILENAME)
    write_region(buf, info.update_offset, info.update_size, dst / EMBEDDED_FILENAME)

    return info
