"""
Summary output modules.
"""

from .json_reporter import JSONReporter

__all__ = ["JSONReporter"]
