"""
Utility functions for rkunpack.
"""

from pathlib import Path
from typing import Optional


def format_size(size_bytes: int) -> str:
    """Format byte size to human readable string."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_bytes < 1024:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.2f} PB"


def safe_extract_path(base_dir: str, file_path: str) -> Optional[str]:
    """Join a header-supplied path under base_dir, refusing directory traversal."""
    base = Path(base_dir).resolve()
    target = (base / file_path).resolve()

    if base in target.parents:
        return str(target)
    return None
