"""
Configuration for unity-yaml-editor.

Supports:
- Environment variables (highest priority)
- TOML configuration file (unity-yaml.toml)
- Default values (lowest priority)

Environment variables:
- UNITY_YAML_CONFIG_FILE: Path to TOML config file
- UNITY_YAML_PROJECT_ROOT: Unity project root (directory holding Assets/)
- UNITY_YAML_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
- UNITY_YAML_STRUCTURED_LOGGING: Emit JSON log lines (true/false)
- UNITY_YAML_PAGE_SIZE: Default page size for list reads
- UNITY_YAML_MAX_PAGE_SIZE: Upper bound for --page-size
- UNITY_YAML_GUID_CACHE: Path of the persisted GUID cache
- UNITY_YAML_PERSIST_GUID_CACHE: Persist GUID lookups between runs (true/false)
- UNITY_YAML_OUTPUT_FORMAT: Default output format (json or text)
"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from unity_yaml_editor.core.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILES = ("unity-yaml.toml", ".unity-yaml.toml")
OUTPUT_FORMATS = ("json", "text")


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _parse_positive_int(value: Any, name: str, fallback: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s '%s'. Falling back to %d.", name, value, fallback)
        return fallback
    if parsed < 1:
        logger.warning("%s must be positive, got %d. Falling back to %d.", name, parsed, fallback)
        return fallback
    return parsed


def _normalize_format(value: Any) -> str:
    normalized = str(value).strip().lower()
    if normalized not in OUTPUT_FORMATS:
        logger.warning(
            "Invalid output format '%s'. Falling back to 'json'. Valid options: %s",
            value,
            ", ".join(OUTPUT_FORMATS),
        )
        return "json"
    return normalized


@dataclass
class EditorConfig:
    """Editor configuration with support for env vars and TOML overrides."""

    # Project configuration
    project_root: Optional[Path] = None

    # Logging configuration
    log_level: str = "WARNING"
    structured_logging: bool = False

    # Pagination configuration
    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = MAX_PAGE_SIZE

    # GUID cache configuration
    guid_cache_path: Optional[Path] = None
    persist_guid_cache: bool = False

    # Output configuration
    output_format: str = "json"

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "EditorConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. TOML config file
        3. Default values
        """
        config = cls()

        toml_path = config_file or os.environ.get("UNITY_YAML_CONFIG_FILE")
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            for default_path in DEFAULT_CONFIG_FILES:
                if Path(default_path).exists():
                    config._load_toml(Path(default_path))
                    break

        config._load_env()
        config._clamp()
        return config

    def _load_toml(self, path: Path) -> None:
        """Load configuration from TOML file."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Error loading config file {path}: {e}")
            return

        if "project" in data:
            project = data["project"]
            if "root" in project:
                self.project_root = Path(project["root"])

        if "logging" in data:
            log = data["logging"]
            if "level" in log:
                self.log_level = str(log["level"]).upper()
            if "structured" in log:
                self.structured_logging = _parse_bool(log["structured"])

        if "pagination" in data:
            pages = data["pagination"]
            if "default_page_size" in pages:
                self.default_page_size = _parse_positive_int(
                    pages["default_page_size"], "default_page_size", DEFAULT_PAGE_SIZE
                )
            if "max_page_size" in pages:
                self.max_page_size = _parse_positive_int(
                    pages["max_page_size"], "max_page_size", MAX_PAGE_SIZE
                )

        if "guid_cache" in data:
            cache = data["guid_cache"]
            if "path" in cache:
                self.guid_cache_path = Path(cache["path"])
            if "persist" in cache:
                self.persist_guid_cache = _parse_bool(cache["persist"])

        if "output" in data:
            output = data["output"]
            if "format" in output:
                self.output_format = _normalize_format(output["format"])

        logger.debug(f"Loaded config from {path}")

    def _load_env(self) -> None:
        """Load configuration from environment variables."""
        if root := os.environ.get("UNITY_YAML_PROJECT_ROOT"):
            self.project_root = Path(root)

        if level := os.environ.get("UNITY_YAML_LOG_LEVEL"):
            self.log_level = level.upper()

        if structured := os.environ.get("UNITY_YAML_STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(structured)

        if page_size := os.environ.get("UNITY_YAML_PAGE_SIZE"):
            self.default_page_size = _parse_positive_int(
                page_size, "UNITY_YAML_PAGE_SIZE", self.default_page_size
            )

        if max_page_size := os.environ.get("UNITY_YAML_MAX_PAGE_SIZE"):
            self.max_page_size = _parse_positive_int(
                max_page_size, "UNITY_YAML_MAX_PAGE_SIZE", self.max_page_size
            )

        if cache := os.environ.get("UNITY_YAML_GUID_CACHE"):
            self.guid_cache_path = Path(cache)

        if persist := os.environ.get("UNITY_YAML_PERSIST_GUID_CACHE"):
            self.persist_guid_cache = _parse_bool(persist)

        if output_format := os.environ.get("UNITY_YAML_OUTPUT_FORMAT"):
            self.output_format = _normalize_format(output_format)

    def _clamp(self) -> None:
        if self.default_page_size > self.max_page_size:
            logger.warning(
                "default_page_size %d exceeds max_page_size %d; clamping",
                self.default_page_size,
                self.max_page_size,
            )
            self.default_page_size = self.max_page_size

    def setup_logging(self) -> None:
        """Configure logging based on settings.

        Log records go to stderr so they never interleave with the JSON
        envelope on stdout.
        """
        level = getattr(logging, self.log_level, logging.WARNING)

        if self.structured_logging:
            formatter = logging.Formatter(
                '{"timestamp":"%(asctime)s","level":"%(levelname)s",'
                '"logger":"%(name)s","message":"%(message)s"}'
            )
        else:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )

        root_logger = logging.getLogger("unity_yaml_editor")
        root_logger.setLevel(level)
        for handler in list(root_logger.handlers):
            if getattr(handler, "_unity_yaml_handler", False):
                root_logger.removeHandler(handler)

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        handler._unity_yaml_handler = True  # type: ignore[attr-defined]
        root_logger.addHandler(handler)


# Global configuration instance
_config: Optional[EditorConfig] = None


def get_config() -> EditorConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = EditorConfig.from_env()
    return _config


def set_config(config: Optional[EditorConfig]) -> None:
    """Set (or with None, reset) the global configuration instance."""
    global _config
    _config = config
