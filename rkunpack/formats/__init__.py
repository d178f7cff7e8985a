"""
Parsers for the RKFW wrapper and RKAF update package formats.
"""

from .layout import RKAF_SIGNATURE, RKFW_SIGNATURE
from .rkaf import describe_rkaf, parse_rkaf_header, unpack_rkaf
from .rkfw import parse_rkfw_header, unpack_rkfw

__all__ = [
    "RKAF_SIGNATURE",
    "RKFW_SIGNATURE",
    "describe_rkaf",
    "parse_rkaf_header",
    "parse_rkfw_header",
    "unpack_rkaf",
    "unpack_rkfw",
]
