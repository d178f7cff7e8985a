#!/usr/bin/env python3
"""
rkunpack Command Line Interface.

Usage:
    rkunpack unpack <image> [-o DIR] [--recursive] [--json] [--chunk-size N]
    rkunpack inspect <image>
    rkunpack --version
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rkunpack import __version__
from rkunpack.core.config import Config
from rkunpack.core.exceptions import RKUnpackError, format_exception_chain
from rkunpack.core.logger import get_logger, setup_logging
from rkunpack.core.models import PackageInfo, UnpackResult, WrapperInfo
from rkunpack.core.unpacker import Unpacker
from rkunpack.reporters.json_reporter import JSONReporter
from rkunpack.utils import format_size


# ANSI Colors
class Colors:
    HEADER = "\033[95m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    WARNING = "\033[93m"
    FAIL = "\033[91m"
    END = "\033[0m"
    BOLD = "\033[1m"


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="rkunpack",
        description="Unpack Rockchip RKFW firmware images and RKAF update packages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rkunpack unpack firmware.img
  rkunpack unpack firmware.img --output ./out --recursive --json
  rkunpack inspect update.img
        """,
    )

    parser.add_argument("-v", "--version", action="version", version=f"rkunpack {__version__}")

    parser.add_argument("-c", "--config", help="Path to configuration file", default=None)

    parser.add_argument(
        "--quiet", "-q", action="store_true", help="Only print errors and the final summary"
    )

    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # =========================================================================
    # Unpack command
    # =========================================================================
    unpack_parser = subparsers.add_parser("unpack", help="Extract all regions of an image")
    unpack_parser.add_argument("image", help="Path to RKFW or RKAF image")
    unpack_parser.add_argument(
        "-o", "--output", help="Output directory (default: from config, ./output)", default=None
    )
    unpack_parser.add_argument(
        "--recursive", action="store_true", help="Also unpack the embedded update.img of RKFW images"
    )
    unpack_parser.add_argument(
        "--json", action="store_true", help="Write unpack-info.json into the output directory"
    )
    unpack_parser.add_argument(
        "--chunk-size", type=int, default=None, help="Copy buffer size in bytes (default: 16384)"
    )

    # =========================================================================
    # Inspect command
    # =========================================================================
    inspect_parser = subparsers.add_parser("inspect", help="Show header metadata without extracting")
    inspect_parser.add_argument("image", help="Path to RKFW or RKAF image")

    return parser


def print_wrapper_info(info: WrapperInfo):
    print(f"\n{Colors.GREEN}RKFW wrapper image{Colors.END}")
    print(f"  Version:      {info.version}")
    print(f"  Code:         0x{info.code:08x}")
    if info.build_time:
        print(f"  Built:        {info.build_time:%Y-%m-%d %H:%M:%S} UTC ({info.timestamp})")
    else:
        print(f"  Built:        Unix timestamp {info.timestamp}")
    print(f"  Chip family:  {info.chip_family} (0x{info.chip_code:02x})")
    print(f"  BOOT:         0x{info.boot_offset:08x} {format_size(info.boot_size)}")
    print(f"  update.img:   0x{info.update_offset:08x} {format_size(info.update_size)}")
    if info.embedded:
        print_package_info(info.embedded, indent="  ")


def print_package_info(info: PackageInfo, indent: str = ""):
    print(f"\n{indent}{Colors.GREEN}RKAF update package{Colors.END}")
    print(f"{indent}  Manufacturer: {info.manufacturer}")
    print(f"{indent}  Model:        {info.model}")
    print(f"{indent}  Version:      {info.version}")
    print(f"{indent}  File size:    {info.filesize:,} bytes")
    print(f"\n{indent}  Partitions: {len(info.partitions)}")
    for part in info.partitions:
        print(
            f"{indent}    - {part.name:16} {part.path:32} "
            f"@0x{part.part_offset:08x} {format_size(part.part_byte_count)}"
        )


def print_result(result: UnpackResult):
    if isinstance(result.info, WrapperInfo):
        print_wrapper_info(result.info)
    else:
        print_package_info(result.info)

    warnings = list(result.info.warnings)
    if isinstance(result.info, WrapperInfo) and result.info.embedded:
        warnings += result.info.embedded.warnings
    for warning in warnings:
        print(f"  {Colors.WARNING}Warning: {warning}{Colors.END}")


def _check_image(image: str) -> Path:
    image_path = Path(image)
    if not image_path.exists():
        print(f"{Colors.FAIL}Error: File not found: {image}{Colors.END}")
        sys.exit(1)

    if image_path.is_dir():
        print(f"{Colors.FAIL}Error: '{image}' is a directory, not a file{Colors.END}")
        sys.exit(1)

    return image_path


def cmd_unpack(args, config: Config):
    """Execute unpack command."""
    image_path = _check_image(args.image)

    if args.output:
        config.output_dir = args.output
    if args.recursive:
        config.extractor.recursive = True
    if args.chunk_size is not None:
        config.extractor.chunk_size = args.chunk_size
    if args.json:
        config.reporter.write_json = True

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"{Colors.FAIL}Config error: {error}{Colors.END}")
        sys.exit(1)

    print(f"\n{Colors.CYAN}[*] Unpacking {image_path} -> {config.output_dir}{Colors.END}")

    result = Unpacker(config).unpack(str(image_path))
    print_result(result)

    if config.reporter.write_json:
        report = JSONReporter(config).generate(result, config.output_dir)
        print(f"\n  Summary: {report}")

    print(f"\n{Colors.GREEN}Unpack complete: {Path(config.output_dir).absolute()}{Colors.END}")


def cmd_inspect(args, config: Config):
    """Execute inspect command."""
    image_path = _check_image(args.image)
    result = Unpacker(config).inspect(str(image_path))
    print_result(result)


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    logger = get_logger("cli")

    try:
        config = Config.load(args.config)

        if args.debug:
            config.log_level = "DEBUG"
        elif args.quiet:
            config.log_level = "ERROR"

        setup_logging(level=config.log_level, log_file=config.log_file)

        if args.command == "unpack":
            cmd_unpack(args, config)
        elif args.command == "inspect":
            cmd_inspect(args, config)

    except KeyboardInterrupt:
        print(f"\n{Colors.WARNING}Interrupted by user{Colors.END}")
        sys.exit(130)
    except (RKUnpackError, OSError) as e:
        logger.debug(format_exception_chain(e))
        print(f"\n{Colors.FAIL}Error: {e}{Colors.END}")
        if args.debug:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
