"""
Tool Configuration for the OCP Export Tool.

This module provides the settings of the tool itself (logging, default
type names and output locations), loaded from a single JSON or YAML file
with environment variable overrides. Problem-specific export options live
in :mod:`ocpexport.options`.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .constants import (
    DEFAULT_INT_TYPE,
    DEFAULT_MODULE_NAME,
    DEFAULT_PRECISION,
    DEFAULT_REAL_TYPE,
)
from .logging import get_logger

logger = get_logger(__name__)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    enable_file_logging: bool = False
    log_file: str = "ocpexport.log"


@dataclass
class CodegenConfig:
    """Defaults applied when the caller does not specify them."""

    real_type: str = DEFAULT_REAL_TYPE
    int_type: str = DEFAULT_INT_TYPE
    precision: int = DEFAULT_PRECISION
    module_name: str = DEFAULT_MODULE_NAME
    output_folder: str = "export"
    print_banner: bool = True


class ExportToolConfig:
    """
    Configuration manager for the export tool.

    Reads an optional JSON or YAML file; missing sections fall back to
    the dataclass defaults.
    """

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration file. If None, uses the
                ``OCPEXPORT_CONFIG`` environment variable or the default
                location next to this module.
        """
        self.config_file = self._get_config_file_path(config_file)
        self._config_data = self._load_config()

        self.logging = self._create_logging_config()
        self.codegen = self._create_codegen_config()

    def _get_config_file_path(self, config_file: Optional[str]) -> Path:
        """Get the configuration file path."""
        if config_file:
            return Path(config_file)

        env_file = os.getenv("OCPEXPORT_CONFIG")
        if env_file:
            return Path(env_file)

        config_dir = Path(__file__).parent
        yaml_config = config_dir / "ocpexport_config.yaml"
        if yaml_config.exists():
            return yaml_config
        return config_dir / "ocpexport_config.json"

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file (JSON or YAML)."""
        if not self.config_file.exists():
            logger.debug(f"Configuration file {self.config_file} not found, using defaults")
            return {}

        try:
            with open(self.config_file, "r") as f:
                if self.config_file.suffix.lower() in (".yaml", ".yml"):
                    config_data = yaml.safe_load(f)
                else:
                    config_data = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Failed to load configuration: {e}")
            return {}

        logger.info(f"Loaded configuration from {self.config_file}")
        return config_data or {}

    def _create_logging_config(self) -> LoggingConfig:
        """Create logging configuration from loaded data."""
        log_data = self._config_data.get("logging", {})

        return LoggingConfig(
            level=os.getenv("OCPEXPORT_LOG_LEVEL", log_data.get("level", "INFO")),
            enable_file_logging=log_data.get("enable_file_logging", False),
            log_file=log_data.get("log_file", "ocpexport.log"),
        )

    def _create_codegen_config(self) -> CodegenConfig:
        """Create code generation defaults from loaded data."""
        cg_data = self._config_data.get("codegen", {})

        env_quiet = os.getenv("OCPEXPORT_NO_BANNER", "").lower() in ("1", "true", "yes")

        return CodegenConfig(
            real_type=cg_data.get("real_type", DEFAULT_REAL_TYPE),
            int_type=cg_data.get("int_type", DEFAULT_INT_TYPE),
            precision=int(cg_data.get("precision", DEFAULT_PRECISION)),
            module_name=cg_data.get("module_name", DEFAULT_MODULE_NAME),
            output_folder=cg_data.get("output_folder", "export"),
            print_banner=not env_quiet and cg_data.get("print_banner", True),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the current configuration."""
        return {
            "version": "1.0",
            "logging": {
                "level": self.logging.level,
                "enable_file_logging": self.logging.enable_file_logging,
                "log_file": self.logging.log_file,
            },
            "codegen": {
                "real_type": self.codegen.real_type,
                "int_type": self.codegen.int_type,
                "precision": self.codegen.precision,
                "module_name": self.codegen.module_name,
                "output_folder": self.codegen.output_folder,
                "print_banner": self.codegen.print_banner,
            },
        }

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, "w") as f:
            if self.config_file.suffix.lower() in (".yaml", ".yml"):
                yaml.safe_dump(self.to_dict(), f, sort_keys=False)
            else:
                json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Configuration saved to {self.config_file}")


_global_config: Optional[ExportToolConfig] = None


def get_config() -> ExportToolConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = ExportToolConfig()
    return _global_config


def set_config(config: ExportToolConfig) -> None:
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def load_config(config_file: str) -> ExportToolConfig:
    """Load configuration from a specific file."""
    return ExportToolConfig(config_file)
