"""
rkunpack - Rockchip firmware image unpacker

Recognizes RKFW wrapper images and RKAF update packages and extracts
their regions into standalone files.

Features:
- RKFW header decoding (version, build date, chip family)
- BOOT and embedded update.img extraction
- RKAF partition extraction with a partition-metadata.txt manifest
- Optional recursive unpacking of the embedded package

License: MIT
"""

__version__ = "1.0.0"
__license__ = "MIT"

from rkunpack.core.config import Config
from rkunpack.core.logger import get_logger
from rkunpack.core.unpacker import Unpacker, inspect_file, unpack_file

__all__ = [
    "Config",
    "Unpacker",
    "get_logger",
    "inspect_file",
    "unpack_file",
    "__version__",
]
