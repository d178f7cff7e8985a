"""
JSON Summary Generator.

Writes the metadata recovered from an unpacked image as a
machine-readable JSON document next to the extracted files.
"""

import json
from datetime import datetime
from pathlib import Path

from .. import __version__
from ..core.config import Config
from ..core.logger import get_logger
from ..core.models import UnpackResult

logger = get_logger(__name__)


class JSONReporter:
    """Generate JSON summaries from unpack results."""

    def __init__(self, config: Config):
        self.config = config

    def generate(self, result: UnpackResult, output_dir: str) -> str:
        """
        Generate JSON summary.

        Args:
            result: Completed unpack result
            output_dir: Output directory path

        Returns:
            Path to generated summary
        """
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        report_file = output_path / self.config.reporter.json_filename

        report = {
            "report_metadata": {
                "tool": "rkunpack",
                "version": __version__,
                "generated_at": datetime.now().isoformat(),
            },
            "result": result.to_dict(),
        }

        with open(report_file, "w") as f:
            json.dump(report, f, indent=2, default=str)

        logger.info(f"JSON summary generated: {report_file}")

        return str(report_file)
