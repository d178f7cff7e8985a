"""
Bounds-checked field readers for packed little-endian header records.

Headers are decoded field by field from byte views; nothing relies on
native struct layout or alignment.
"""

import struct
from typing import Optional

from ..core.exceptions import MalformedHeaderError

RKFW_SIGNATURE = b"RKFW"
RKAF_SIGNATURE = b"RKAF"

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


def _check_bounds(buf: bytes, offset: int, size: int, field: str):
    if offset < 0 or offset + size > len(buf):
        raise MalformedHeaderError(
            f"Header too short for field '{field}'",
            details={"offset": hex(offset), "size": size, "available": len(buf)},
        )


def read_u8(buf: bytes, offset: int, field: str = "u8") -> int:
    _check_bounds(buf, offset, 1, field)
    return buf[offset]


def read_u16_le(buf: bytes, offset: int, field: str = "u16") -> int:
    _check_bounds(buf, offset, 2, field)
    return _U16.unpack_from(buf, offset)[0]


def read_u32_le(buf: bytes, offset: int, field: str = "u32") -> int:
    _check_bounds(buf, offset, 4, field)
    return _U32.unpack_from(buf, offset)[0]


def read_bytes(buf: bytes, offset: int, size: int, field: str = "bytes") -> bytes:
    _check_bounds(buf, offset, size, field)
    return bytes(buf[offset : offset + size])


def decode_cstring(
    raw: bytes, default: Optional[str] = None, errors: str = "strict"
) -> Optional[str]:
    """
    Decode a fixed-width NUL-terminated text field.

    Text runs up to the first NUL, or the whole field when none is
    present. Bytes that are not valid UTF-8 yield ``default`` under
    ``errors="strict"``; ``errors="replace"`` decodes them lossily.
    """
    end = raw.find(b"\x00")
    if end != -1:
        raw = raw[:end]
    try:
        return raw.decode("utf-8", errors)
    except UnicodeDecodeError:
        return default
