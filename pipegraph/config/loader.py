"""
Config Loader

Loads composition settings from YAML files or the environment.
Settings control how strictly node annotations are checked when graphs are assembled.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class GraphSettings(BaseModel):
    """
    Settings applied while composing nodes.

    Attributes:
        strict_annotations: Reject nodes whose input or output type is not annotated
        numeric_promotion: Let int feed float and float feed complex (PEP 484 numeric tower)
        log_level: Level used by setup_logging()
    """
    model_config = ConfigDict(extra="forbid")

    strict_annotations: bool = False
    numeric_promotion: bool = True
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls, prefix: str = "PIPEGRAPH") -> "GraphSettings":
        """
        Create settings from environment variables.

        Environment Variables:
            {prefix}_STRICT_ANNOTATIONS: "true"/"false" (default: false)
            {prefix}_NUMERIC_PROMOTION: "true"/"false" (default: true)
            {prefix}_LOG_LEVEL: logging level name (default: WARNING)
        """
        values = {}
        for name in ("strict_annotations", "numeric_promotion"):
            raw = os.getenv(f"{prefix}_{name.upper()}")
            if raw is not None:
                values[name] = _parse_bool(f"{prefix}_{name.upper()}", raw)

        level = os.getenv(f"{prefix}_LOG_LEVEL")
        if level is not None:
            values["log_level"] = level

        return cls(**values)


class ConfigLoader:
    """
    Loads GraphSettings from a YAML file.

    The file holds either a bare mapping of settings or a mapping nested
    under a top-level "pipegraph" key:

        pipegraph:
          strict_annotations: true
          log_level: DEBUG

    Example usage:
        loader = ConfigLoader(Path("pipegraph.yaml"))
        settings = loader.load()
        configure(settings)
    """

    def __init__(self, config_path: Path):
        """
        Initialize loader with a config file path.

        Args:
            config_path: Path to the YAML settings file
        """
        self.config_path = Path(config_path)
        logger.debug(f"Initialized ConfigLoader with config_path: {self.config_path}")

    def load(self) -> GraphSettings:
        """
        Load and validate settings.

        Returns:
            Validated GraphSettings

        Raises:
            ValueError: If the file is missing, unreadable or fails validation
        """
        if not self.config_path.exists():
            raise ValueError(f"Config file not found: {self.config_path}")

        try:
            with open(self.config_path) as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse {self.config_path}: {e}")
            raise ValueError(f"Failed to parse {self.config_path}: {e}") from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError(
                f"Expected a mapping in {self.config_path.name}, "
                f"got {type(raw).__name__}"
            )
        if "pipegraph" in raw:
            raw = raw["pipegraph"] or {}
            if not isinstance(raw, dict):
                raise ValueError(
                    f"Expected a mapping under 'pipegraph' in {self.config_path.name}, "
                    f"got {type(raw).__name__}"
                )

        try:
            settings = GraphSettings.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Invalid settings in {self.config_path}: {e}")
            raise ValueError(f"Invalid settings in {self.config_path}: {e}") from e

        logger.info(f"Loaded settings from {self.config_path.name}: {settings.model_dump()}")
        return settings


_settings: Optional[GraphSettings] = None


def get_settings() -> GraphSettings:
    """Return the process-wide settings, creating defaults on first use"""
    global _settings
    if _settings is None:
        _settings = GraphSettings()
    return _settings


def configure(settings: Optional[GraphSettings] = None) -> GraphSettings:
    """
    Replace the process-wide settings.

    Args:
        settings: New settings; None restores defaults

    Returns:
        The settings now in effect
    """
    global _settings
    _settings = settings if settings is not None else GraphSettings()
    logger.debug(f"Configured pipegraph settings: {_settings.model_dump()}")
    return _settings


def setup_logging(settings: Optional[GraphSettings] = None) -> None:
    """Configure root logging for a host program using the settings' log level"""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")
