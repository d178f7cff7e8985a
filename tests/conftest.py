"""
Pytest configuration and fixtures for rkunpack tests.

The image builders assemble synthetic RKFW and RKAF files with the
same field layout the parsers decode.
"""

import logging
import struct
import sys
import tempfile
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rkunpack.core.config import Config

RKAF_HEADER_SIZE = 0x800
RKFW_HEADER_SIZE = 0x66


def _fixed(text: str, size: int) -> bytes:
    raw = text.encode("utf-8")
    return raw + b"\x00" * (size - len(raw))


def build_rkaf(
    partitions=None,
    manufacturer: str = "RK3566",
    model: str = "TestBoard",
    package_id: str = "",
    version: int = 0x01000005,
    length=None,
    trailer: bytes = b"CRC!",
) -> bytes:
    """
    Assemble an RKAF package.

    ``partitions`` is a list of (name, full_path, data) tuples; data of
    None marks a placeholder slot that carries no payload.
    """
    if partitions is None:
        partitions = [
            ("package-file", "package-file", b"package-file\n"),
            ("bootloader", "Image/MiniLoaderAll.bin", b"\xaa" * 300),
            ("parameter", "Image/parameter.txt", b"CMDLINE: mtdparts=rk29xxnand:...\n"),
            ("RESERVED", "RESERVED", None),
            ("boot", "Image/boot.img", bytes(range(256)) * 80),
        ]

    body = bytearray()
    entries = []
    flash_offset = 0x2000
    for name, full_path, data in partitions:
        if data is None:
            part_offset, byte_count = 0, 0
        else:
            part_offset = RKAF_HEADER_SIZE + len(body)
            byte_count = len(data)
            body += data
            # Pad payloads to 2 KiB like the packing tool does
            body += b"\x00" * (-len(body) % 0x800)
        padded_size = (byte_count + 0x7FF) & ~0x7FF
        entries.append(
            _fixed(name, 32)
            + _fixed(full_path, 60)
            + struct.pack("<5I", padded_size, part_offset, flash_offset, padded_size, byte_count)
        )
        flash_offset += padded_size

    header = bytearray(RKAF_HEADER_SIZE)
    header[0:4] = b"RKAF"
    header[0x008:0x02A] = _fixed(model, 0x22)
    header[0x02A:0x048] = _fixed(package_id, 0x1E)
    header[0x048:0x080] = _fixed(manufacturer, 0x38)
    struct.pack_into("<III", header, 0x080, 0, version, len(entries))
    for i, entry in enumerate(entries):
        header[0x08C + i * 112 : 0x08C + (i + 1) * 112] = entry

    total = RKAF_HEADER_SIZE + len(body) + len(trailer)
    struct.pack_into("<I", header, 0x004, total - 4 if length is None else length)
    return bytes(header) + bytes(body) + trailer


def build_rkfw(
    boot: bytes = b"BOOT" + b"\x11" * 508,
    package: bytes = None,
    version=(8, 1, 0x0102),
    code: int = 0x01030000,
    date=(2024, 3, 15, 10, 30, 45),
    chip_code: int = 0x38,
) -> bytes:
    """Assemble an RKFW image: header, bootloader, embedded package, trailer."""
    if package is None:
        package = build_rkaf()

    major, minor, patch = version
    boot_offset = RKFW_HEADER_SIZE
    update_offset = boot_offset + len(boot)

    header = bytearray(RKFW_HEADER_SIZE)
    header[0:4] = b"RKFW"
    struct.pack_into("<H", header, 0x04, RKFW_HEADER_SIZE)
    struct.pack_into("<HBB", header, 0x06, patch, minor, major)
    struct.pack_into("<I", header, 0x0A, code)
    year, month, day, hour, minute, second = date
    struct.pack_into("<H5B", header, 0x0E, year, month, day, hour, minute, second)
    header[0x15] = chip_code
    struct.pack_into("<4I", header, 0x19, boot_offset, len(boot), update_offset, len(package))

    return bytes(header) + boot + package + b"\x00" * 32


@pytest.fixture
def config():
    """Create test configuration."""
    return Config(
        output_dir=tempfile.mkdtemp(),
        log_level="DEBUG",
    )


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def rkaf_image(temp_dir):
    """Write a well-formed RKAF package to disk."""
    path = temp_dir / "update.img"
    path.write_bytes(build_rkaf())
    return path


@pytest.fixture
def rkfw_image(temp_dir):
    """Write a well-formed RKFW image to disk."""
    path = temp_dir / "firmware.img"
    path.write_bytes(build_rkfw())
    return path


@pytest.fixture
def make_image(temp_dir):
    """Write arbitrary image bytes to disk and return the path."""

    def _make(data: bytes, name: str = "image.img") -> Path:
        path = temp_dir / name
        path.write_bytes(data)
        return path

    return _make


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by CLI runs so they don't outlive captured streams."""
    yield
    logger = logging.getLogger("rkunpack")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
