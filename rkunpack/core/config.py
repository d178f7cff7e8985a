"""
Configuration management for rkunpack.

Handles loading, validation, and access to configuration settings
from YAML files and environment variables.
"""

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .exceptions import InvalidConfigError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 16 * 1024


@dataclass
class ExtractorConfig:
    """Region extraction configuration."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    recursive: bool = False  # unpack embedded-update.img of RKFW images too


@dataclass
class ReporterConfig:
    """Summary output configuration."""

    write_json: bool = False
    json_filename: str = "unpack-info.json"


@dataclass
class Config:
    """Main configuration container."""

    output_dir: str = "./output"
    log_level: str = "INFO"
    log_file: Optional[str] = None

    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)
    reporter: ReporterConfig = field(default_factory=ReporterConfig)

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """Load configuration from YAML file and environment variables."""
        config_data = {}

        default_paths = [
            Path("./rkunpack.yaml"),
            Path.home() / ".rkunpack" / "config.yaml",
        ]

        if config_path:
            config_file = Path(config_path)
            if not config_file.exists():
                raise InvalidConfigError(
                    "Configuration file not found", details={"path": config_path}
                )
        else:
            config_file = None
            for path in default_paths:
                if path.exists():
                    config_file = path
                    break

        if config_file:
            logger.info(f"Loading configuration from {config_file}")
            with open(config_file, "r") as f:
                try:
                    config_data = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise InvalidConfigError(
                        "Configuration file is not valid YAML", details={"path": str(config_file)}
                    ) from e

            if not isinstance(config_data, dict):
                raise InvalidConfigError(
                    "Configuration root must be a mapping", details={"path": str(config_file)}
                )

        config_data = cls._apply_env_overrides(config_data)

        return cls._from_dict(config_data)

    @classmethod
    def _apply_env_overrides(cls, config_data: Dict) -> Dict:
        """Apply environment variable overrides."""
        env_mappings = {
            "RKUNPACK_OUTPUT_DIR": ("output_dir",),
            "RKUNPACK_LOG_LEVEL": ("log_level",),
            "RKUNPACK_LOG_FILE": ("log_file",),
            "RKUNPACK_CHUNK_SIZE": ("extractor", "chunk_size"),
            "RKUNPACK_RECURSIVE": ("extractor", "recursive"),
        }

        for env_var, path in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                cls._set_nested(config_data, path, value)

        return config_data

    @staticmethod
    def _set_nested(data: Dict, path: tuple, value: Any):
        """Set a nested dictionary value."""
        for key in path[:-1]:
            data = data.setdefault(key, {})

        # Type conversion
        if isinstance(value, str):
            if value.isdigit():
                value = int(value)
            elif value.lower() in ("true", "false"):
                value = value.lower() == "true"

        data[path[-1]] = value

    @classmethod
    def _from_dict(cls, data: Dict) -> "Config":
        """Create Config instance from dictionary."""
        data = dict(data)
        extractor_data = data.pop("extractor", None) or {}
        reporter_data = data.pop("reporter", None) or {}

        try:
            return cls(
                extractor=ExtractorConfig(**extractor_data),
                reporter=ReporterConfig(**reporter_data),
                **{k: v for k, v in data.items() if k in cls.__dataclass_fields__},
            )
        except TypeError as e:
            raise InvalidConfigError(f"Unknown configuration key: {e}") from e

    def save(self, path: str):
        """Save configuration to YAML file."""
        with open(path, "w") as f:
            yaml.dump(dataclasses.asdict(self), f, default_flow_style=False)

        logger.info(f"Configuration saved to {path}")

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if str(self.log_level).upper() not in valid_levels:
            errors.append(f"Invalid log level: {self.log_level}")

        if not isinstance(self.extractor.chunk_size, int) or self.extractor.chunk_size < 1:
            errors.append(f"chunk_size must be a positive integer: {self.extractor.chunk_size}")

        output = Path(self.output_dir)
        if output.exists() and not output.is_dir():
            errors.append(f"Output path is not a directory: {self.output_dir}")

        return errors
