"""
Core modules for rkunpack.
"""

from .config import Config
from .exceptions import (
    ExtractionError,
    InvalidTimestampError,
    MalformedHeaderError,
    MissingEmbeddedPackageError,
    RKUnpackError,
    TruncatedRegionError,
    UnrecognizedFormatError,
)
from .logger import get_logger, setup_logging
from .models import (
    ChipFamily,
    ImageFormat,
    PackageInfo,
    PartitionInfo,
    UnpackResult,
    WrapperInfo,
)
from .unpacker import Unpacker, detect_format, inspect_file, unpack_file

__all__ = [
    "Config",
    "get_logger",
    "setup_logging",
    "Unpacker",
    "detect_format",
    "inspect_file",
    "unpack_file",
    "ChipFamily",
    "ImageFormat",
    "PackageInfo",
    "PartitionInfo",
    "UnpackResult",
    "WrapperInfo",
    "RKUnpackError",
    "ExtractionError",
    "UnrecognizedFormatError",
    "MalformedHeaderError",
    "InvalidTimestampError",
    "MissingEmbeddedPackageError",
    "TruncatedRegionError",
]
