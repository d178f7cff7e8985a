#!/usr/bin/env python3
"""
rkunpack - Rockchip firmware image unpacker

Main entry point for command-line usage.
"""

from rkunpack.cli import main

if __name__ == '__main__':
    main()
