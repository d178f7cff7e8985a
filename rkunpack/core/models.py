"""
Data models for rkunpack.

Defines dataclasses and enums describing the metadata recovered from
RKFW wrapper images and RKAF update packages.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Optional, Tuple, Union


class ImageFormat(Enum):
    """Container formats recognized by their leading signature."""

    RKFW = "rkfw"  # device-flashing wrapper
    RKAF = "rkaf"  # update package


class ChipFamily(Enum):
    """SoC families identified by the RKFW chip code byte."""

    RK29XX = "RK29xx"
    RK30XX = "RK30xx"
    RK31XX = "RK31xx"
    RK32XX = "RK32xx"
    RK3368 = "RK3368"
    RK3326 = "RK3326"
    RK3562 = "RK3562"
    RK3566 = "RK3566"
    PX30 = "PX30"
    UNKNOWN = "unknown"

    @classmethod
    def from_code(cls, code: int) -> "ChipFamily":
        """Map a chip code byte to its family."""
        mappings = {
            0x50: cls.RK29XX,
            0x60: cls.RK30XX,
            0x70: cls.RK31XX,
            0x80: cls.RK32XX,
            0x41: cls.RK3368,
            0x36: cls.RK3326,
            0x32: cls.RK3562,
            0x38: cls.RK3566,
            0x30: cls.PX30,
        }
        return mappings.get(code, cls.UNKNOWN)


@dataclass(frozen=True)
class PartitionInfo:
    """One real partition listed in an RKAF partition table."""

    name: str
    path: str
    flash_size: int
    flash_offset: int
    part_offset: int
    padded_size: int
    part_byte_count: int

    def manifest_line(self) -> str:
        """Render the partition-metadata.txt line for this partition."""
        return (
            f"{self.name},{self.path},{self.flash_size:#010x},{self.flash_offset:#010x},"
            f"{self.part_offset:#010x},{self.padded_size:#010x},{self.part_byte_count:#010x}"
        )

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "path": self.path,
            "flash_size": self.flash_size,
            "flash_offset": self.flash_offset,
            "part_offset": self.part_offset,
            "padded_size": self.padded_size,
            "part_byte_count": self.part_byte_count,
        }


@dataclass(frozen=True)
class PackageInfo:
    """Metadata of an RKAF update package."""

    manufacturer: str
    model: str
    filesize: int
    partitions: Tuple[PartitionInfo, ...] = ()

    package_id: str = ""
    version_code: int = 0
    unknown1: int = 0
    warnings: Tuple[str, ...] = ()

    @property
    def version(self) -> str:
        """Dotted form of the packed package version."""
        v = self.version_code
        return f"{(v >> 24) & 0xFF}.{(v >> 16) & 0xFF}.{v & 0xFFFF}"

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "manufacturer": self.manufacturer,
            "model": self.model,
            "filesize": self.filesize,
            "package_id": self.package_id,
            "version": self.version,
            "unknown1": self.unknown1,
            "partitions": [p.to_dict() for p in self.partitions],
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class WrapperInfo:
    """Metadata of an RKFW wrapper image."""

    version: str
    code: int
    timestamp: int
    chip_family: str
    chip_code: int
    boot_offset: int
    boot_size: int
    update_offset: int
    update_size: int

    warnings: Tuple[str, ...] = ()
    # Populated only by recursive unpacking
    embedded: Optional[PackageInfo] = None

    @property
    def build_time(self) -> Optional[datetime]:
        """Build date as an aware UTC datetime, None outside years 1..9999."""
        try:
            return datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=self.timestamp)
        except OverflowError:
            return None

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "version": self.version,
            "code": self.code,
            "timestamp": self.timestamp,
            "build_time": self.build_time.isoformat() if self.build_time else None,
            "chip_family": self.chip_family,
            "chip_code": self.chip_code,
            "boot_offset": self.boot_offset,
            "boot_size": self.boot_size,
            "update_offset": self.update_offset,
            "update_size": self.update_size,
            "warnings": list(self.warnings),
            "embedded": self.embedded.to_dict() if self.embedded else None,
        }


@dataclass(frozen=True)
class UnpackResult:
    """Outcome of unpacking one image: exactly one of the two info variants."""

    format: ImageFormat
    info: Union[WrapperInfo, PackageInfo]
    source: str = ""
    destination: str = ""
    finished_at: datetime = field(default_factory=datetime.now)

    @property
    def wrapper(self) -> Optional[WrapperInfo]:
        return self.info if self.format is ImageFormat.RKFW else None

    @property
    def package(self) -> Optional[PackageInfo]:
        return self.info if self.format is ImageFormat.RKAF else None

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "format": self.format.value,
            "source": self.source,
            "destination": self.destination,
            "finished_at": self.finished_at.isoformat(),
            "info": self.info.to_dict(),
        }
