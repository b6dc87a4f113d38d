"""Configuration management for the old files cleanup daemon."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .matcher import LiteralPattern, Pattern, RegexPattern, to_pattern

_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


class ConfigError(ValueError):
    """Raised when a configuration value is invalid."""


def parse_bool(value: Any, default: bool) -> bool:
    """Parse a YAML value as a boolean.

    Args:
        value: Raw value (bool, int, str or None).
        default: Returned when value is None.

    Returns:
        Parsed boolean.

    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return str(value).strip().lower() in _TRUE_STRINGS


def parse_pattern(value: Any) -> Pattern:
    """Parse a pattern entry from YAML.

    A plain string is a literal file name, a mapping ``{regex: "..."}`` is a
    regular expression searched in the full path.
    """
    if isinstance(value, dict) and set(value) == {"regex"}:
        try:
            return RegexPattern(re.compile(str(value["regex"])))
        except re.error as e:
            raise ConfigError(f"Invalid regex {value['regex']!r}: {e}") from e
    if isinstance(value, str | re.Pattern | LiteralPattern | RegexPattern):
        return to_pattern(value)
    raise ConfigError(f"Invalid pattern: {value!r}")


def _dump_pattern(pattern: Pattern) -> str | dict[str, str]:
    if isinstance(pattern, RegexPattern):
        return {"regex": pattern.regex.pattern}
    return pattern.name


def _parse_int(data: dict[str, Any], key: str) -> int:
    try:
        return int(data[key])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {data[key]!r}") from e


def _parse_number(data: dict[str, Any], key: str) -> float:
    try:
        return float(data[key])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number, got {data[key]!r}") from e


def _parse_list(data: dict[str, Any], key: str) -> list[Any]:
    value = data[key]
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{key} must be a list, got {value!r}")
    return value


@dataclass
class SweepConfig:
    """Configuration for one sweeper; defaults are applied here once."""

    # Root directories, scanned in order
    directory_paths: list[Path] = field(default_factory=list)

    # Files strictly older than this many seconds are candidates
    age: int = 86400 * 7  # 7 days

    # Seconds between passes; 0 runs a single pass
    check_interval: float = 86400  # 1 day

    recursive: bool = False
    include: list[Pattern] = field(default_factory=list)
    exclude: list[Pattern] = field(default_factory=list)
    verbose: bool = False
    dry_run: bool = False

    # Let a new tick start a pass while the previous one is still running
    allow_overlap: bool = False

    # Logging
    log_file: Path = field(
        default_factory=lambda: Path.home() / ".local/state/old-files-cleanup/old-files-cleanup.log"
    )
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.directory_paths = [Path(p) for p in self.directory_paths]
        self.include = [to_pattern(p) for p in self.include]
        self.exclude = [to_pattern(p) for p in self.exclude]

    def validate(self) -> None:
        """Check values that must hold before any pass is scheduled.

        Raises:
            ConfigError: If a value is out of range.

        """
        if self.age < 0:
            raise ConfigError(f"age must be a non-negative number of seconds, got {self.age}")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigError(f"Invalid log_level: {self.log_level!r}")

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the default configuration file path."""
        return Path.home() / ".config/old-files-cleanup/config.yaml"

    @classmethod
    def load(cls, config_path: Path | None = None) -> SweepConfig:
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. Uses default if None.

        Returns:
            Loaded and validated configuration.

        Raises:
            ConfigError: If the file is malformed or holds invalid values.

        """
        if config_path is None:
            config_path = cls.get_config_path()

        if not config_path.exists():
            return cls()

        with config_path.open(encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Invalid YAML in {config_path}: expected a mapping")

        config = cls._from_dict(data)
        config.validate()
        return config

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> SweepConfig:
        """Create config from dictionary."""
        config = cls()

        if "directory_paths" in data:
            config.directory_paths = [
                Path(os.path.expanduser(p)) for p in _parse_list(data, "directory_paths")
            ]

        # Durations
        if "age" in data:
            config.age = _parse_int(data, "age")
        if "check_interval" in data:
            config.check_interval = _parse_number(data, "check_interval")

        # Flags
        config.recursive = parse_bool(data.get("recursive"), config.recursive)
        config.verbose = parse_bool(data.get("verbose"), config.verbose)
        config.dry_run = parse_bool(data.get("dry_run"), config.dry_run)
        config.allow_overlap = parse_bool(data.get("allow_overlap"), config.allow_overlap)

        # Matching rules
        if "include" in data:
            config.include = [parse_pattern(p) for p in _parse_list(data, "include")]
        if "exclude" in data:
            config.exclude = [parse_pattern(p) for p in _parse_list(data, "exclude")]

        # Logging
        if "logging" in data:
            logging_cfg = data["logging"] or {}
            if "file" in logging_cfg:
                config.log_file = Path(os.path.expanduser(logging_cfg["file"]))
            if "level" in logging_cfg:
                config.log_level = str(logging_cfg["level"]).upper()

        return config

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to YAML file.

        Args:
            config_path: Path to save config. Uses default if None.

        """
        if config_path is None:
            config_path = self.get_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "directory_paths": [str(p) for p in self.directory_paths],
            "age": self.age,
            "check_interval": self.check_interval,
            "recursive": self.recursive,
            "include": [_dump_pattern(p) for p in self.include],
            "exclude": [_dump_pattern(p) for p in self.exclude],
            "verbose": self.verbose,
            "dry_run": self.dry_run,
            "allow_overlap": self.allow_overlap,
            "logging": {
                "file": str(self.log_file),
                "level": self.log_level,
            },
        }

        with config_path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    @property
    def log_level_value(self) -> int:
        """Numeric logging level for ``log_level``."""
        return logging.getLevelName(self.log_level.upper())
