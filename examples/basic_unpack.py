#!/usr/bin/env python3
"""
rkunpack Example: Basic Image Unpack

This example demonstrates how to use rkunpack as a library to unpack
an RKFW or RKAF image and walk the recovered partition table.

Usage:
    python examples/basic_unpack.py /path/to/update.img [output_dir]
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rkunpack import Config, Unpacker
from rkunpack.core.exceptions import RKUnpackError
from rkunpack.core.logger import setup_logging
from rkunpack.core.models import ImageFormat


def main():
    if len(sys.argv) < 2:
        print("Usage: python basic_unpack.py <image_path> [output_dir]")
        sys.exit(1)

    image_path = sys.argv[1]
    if not Path(image_path).exists():
        print(f"Error: File not found: {image_path}")
        sys.exit(1)

    setup_logging(level="INFO")

    config = Config()
    config.output_dir = sys.argv[2] if len(sys.argv) > 2 else "./unpacked"
    config.extractor.recursive = True

    try:
        result = Unpacker(config).unpack(image_path)
    except RKUnpackError as e:
        print(f"\n[!] Unpack failed: {e}")
        sys.exit(1)

    if result.format is ImageFormat.RKFW:
        wrapper = result.info
        print(f"\nRKFW {wrapper.version} for {wrapper.chip_family}, built {wrapper.build_time}")
        package = wrapper.embedded
    else:
        package = result.info

    if package:
        print(f"\n{package.manufacturer} {package.model}")
        for part in package.partitions:
            print(f"  {part.name:16} -> {part.path} ({part.part_byte_count} bytes)")


if __name__ == "__main__":
    main()
