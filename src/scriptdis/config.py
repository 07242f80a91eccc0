"""
scriptdis Configuration
=======================

Listing and driver settings. Configuration can come from:
- Default values (defined here)
- Environment variables (DisassemblerConfig.from_env)
- Command-line options (applied by the CLI on top of the above)

Environment variables (all optional):
    SCRIPTDIS_ENGINE: Engine id used when --engine is not given
    SCRIPTDIS_SHOW_BYTES: "0"/"false"/"no" hides the raw bytes column
    SCRIPTDIS_BYTES_WIDTH: Width of the raw bytes column (integer)
    SCRIPTDIS_LOG_LEVEL: Logging level name (DEBUG, INFO, WARNING, ...)
"""

from dataclasses import dataclass
from typing import Mapping, Optional
import logging
import os

from scriptdis.instruction import DEFAULT_BYTES_WIDTH


logger = logging.getLogger(__name__)

_FALSE_VALUES = ("0", "false", "no", "off")
_TRUE_VALUES = ("1", "true", "yes", "on")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class DisassemblerConfig:
    """
    Settings shared by the disassemblers and the command-line driver.

    Attributes:
        default_engine: Engine id to use when none is requested (default: None)
        show_bytes: Include raw instruction bytes in listings (default: True)
        bytes_width: Width of the raw bytes column (default: 24)
        log_level: Logging level name for the driver (default: "WARNING")
    """

    default_engine: Optional[str] = None
    show_bytes: bool = True
    bytes_width: int = DEFAULT_BYTES_WIDTH
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DisassemblerConfig":
        """
        Create a DisassemblerConfig from environment variables.

        Invalid values are ignored (with a warning) and the default is kept.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            DisassemblerConfig with values from the environment
        """
        env = os.environ if environ is None else environ
        config = cls()

        if engine := env.get("SCRIPTDIS_ENGINE"):
            config.default_engine = engine

        if show_bytes := env.get("SCRIPTDIS_SHOW_BYTES"):
            lowered = show_bytes.strip().lower()
            if lowered in _FALSE_VALUES:
                config.show_bytes = False
            elif lowered in _TRUE_VALUES:
                config.show_bytes = True
            else:
                logger.warning(f"Ignoring invalid SCRIPTDIS_SHOW_BYTES={show_bytes!r}")

        if width := env.get("SCRIPTDIS_BYTES_WIDTH"):
            try:
                value = int(width)
            except ValueError:
                value = -1
            if value > 0:
                config.bytes_width = value
            else:
                logger.warning(f"Ignoring invalid SCRIPTDIS_BYTES_WIDTH={width!r}")

        if level := env.get("SCRIPTDIS_LOG_LEVEL"):
            if level.upper() in _LOG_LEVELS:
                config.log_level = level.upper()
            else:
                logger.warning(f"Ignoring invalid SCRIPTDIS_LOG_LEVEL={level!r}")

        return config
