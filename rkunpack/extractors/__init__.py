"""
Region extraction helpers.
"""

from .region import extract_region, write_region

__all__ = ["extract_region", "write_region"]
