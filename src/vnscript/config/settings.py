"""vnscript configuration settings."""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vnscript.exceptions import ConfigurationError, check_config_keys


def load_data_file(path: Path) -> dict[str, Any]:
    """Read a YAML, TOML or JSON file into a dictionary.

    Args:
        path: File to read; the format is chosen by suffix.

    Returns:
        Parsed mapping (empty for an empty YAML document).

    Raises:
        ConfigurationError: If the suffix is not a supported format.
    """
    suffix = path.suffix.lower()

    if suffix in {".yml", ".yaml"}:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    elif suffix == ".toml":
        with path.open("rb") as f:
            data = tomllib.load(f)
    elif suffix == ".json":
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    else:
        raise ConfigurationError(
            message=f"Unsupported file format: {suffix}",
            hint="Use one of the supported formats: .yml, .yaml, .toml, or .json",
            details={
                "file": str(path),
                "detected_format": suffix,
                "supported_formats": [".yml", ".yaml", ".toml", ".json"],
            },
        )
    if not isinstance(data, dict):
        raise ConfigurationError(
            message=f"Expected a mapping at the top of {path}",
            details={"file": str(path), "found": type(data).__name__},
        )
    return data


class VNScriptSettings(BaseSettings):
    """vnscript configuration settings.

    Settings are loaded with the following precedence (highest to lowest):
    1. CLI arguments (when provided via command flags)
       Example: vnscript play story.txt --save-file saves.json

    2. Config file values (YAML, TOML, or JSON)
       Example: vnscript --config vnscript.yaml
       Multiple files: Later files override earlier ones

    3. Environment variables (prefixed with VNSCRIPT_)
       Example: export VNSCRIPT_REVEAL_INTERVAL_MS=15

    4. .env file (in current directory or specified path)

    5. Default values (defined in field declarations below)
    """

    model_config = SettingsConfigDict(
        env_prefix="VNSCRIPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Script settings
    start_node_id: str = Field(
        default="start",
        description="Identifier of the node every new game starts at",
        min_length=1,
    )
    default_background: str | None = Field(
        default="Black",
        description="Background asset carried before the script sets one",
    )
    asset_manifest: Path | None = Field(
        default=None,
        description="YAML, TOML or JSON file mapping symbolic asset names",
    )

    # Playback timing (milliseconds)
    reveal_interval_ms: int = Field(
        default=30,
        description="Delay between revealed characters",
        ge=1,
    )
    fast_reveal_interval_ms: int = Field(
        default=2,
        description="Delay between revealed characters in fast-forward mode",
        ge=1,
    )
    fast_forward_delay_ms: int = Field(
        default=100,
        description="Pause before fast-forward advances a revealed node",
        ge=0,
    )
    auto_ms_per_char: int = Field(
        default=50,
        description="Auto-play reading time per character",
        ge=0,
    )
    auto_min_delay_ms: int = Field(
        default=1000,
        description="Shortest auto-play reading delay",
        ge=0,
    )
    auto_max_delay_ms: int = Field(
        default=4000,
        description="Longest auto-play reading delay",
        ge=0,
    )
    end_grace_ms: int = Field(
        default=3000,
        description="Delay before an ending returns to the title",
        ge=0,
    )

    # Save settings
    save_file: Path = Field(
        default_factory=lambda: Path.cwd() / "vnscript_saves.json",
        description="JSON file backing the save slot store",
    )
    save_key: str = Field(
        default="galgame_saves_v1",
        description="Key under which the save slot collection is stored",
        min_length=1,
    )
    save_slot_count: int = Field(
        default=4,
        description="Number of save slots",
        ge=1,
    )
    save_preview_length: int = Field(
        default=20,
        description="Characters of node text kept as a save preview",
        ge=0,
    )

    # Debug settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Logging settings
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        pattern="^(?i)(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    log_format: str = Field(
        default="console",
        description="Log output format (console, json, structured)",
        pattern="^(?i)(console|json|structured)$",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    @field_validator("save_file", "log_file", "asset_manifest", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path | None:
        """Expand environment variables and ~, then resolve the path."""
        if v is None:
            return None
        if isinstance(v, str):
            expanded = os.path.expandvars(v)
            return Path(expanded).expanduser().resolve()
        if isinstance(v, Path):
            return v.resolve()
        raise ValueError(
            f"Path fields must be string or Path. Got {type(v).__name__}: {v!r}"
        )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        """Normalize log level to uppercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.upper()
        raise ValueError(f"log_level must be a string, got {type(v).__name__}")

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_log_format(cls, v: Any) -> str:
        """Normalize log format to lowercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.lower()
        raise ValueError(f"log_format must be a string, got {type(v).__name__}")

    @model_validator(mode="after")
    def check_auto_bounds(self) -> VNScriptSettings:
        """Reject an auto-play window whose minimum exceeds its maximum."""
        if self.auto_min_delay_ms > self.auto_max_delay_ms:
            raise ValueError(
                "auto_min_delay_ms must not exceed auto_max_delay_ms "
                f"({self.auto_min_delay_ms} > {self.auto_max_delay_ms})"
            )
        return self

    @classmethod
    def from_env(cls) -> VNScriptSettings:
        """Create settings from environment variables."""
        return cls()

    @classmethod
    def from_file(cls, config_path: Path | str) -> VNScriptSettings:
        """Load settings from a configuration file.

        Args:
            config_path: Path to configuration file (YAML, TOML, or JSON).

        Returns:
            Settings loaded from the file.

        Raises:
            ConfigurationError: If file format is not supported.
            FileNotFoundError: If config file doesn't exist.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        data = load_data_file(config_path)
        check_config_keys(data)
        return cls(**data)

    @classmethod
    def from_multiple_sources(
        cls,
        config_files: list[Path | str] | None = None,
        env_file: Path | str | None = None,
        cli_args: dict[str, Any] | None = None,
    ) -> VNScriptSettings:
        """Load settings with proper precedence from multiple sources.

        Args:
            config_files: List of config files to load (later files override earlier).
            env_file: Path to .env file (default: .env in current directory).
            cli_args: Dictionary of CLI arguments.

        Returns:
            Merged settings from all sources.
        """
        data: dict[str, Any] = {}

        for config_file in config_files or []:
            try:
                file_settings = cls.from_file(config_file)
            except FileNotFoundError:
                from vnscript.config.logging import get_logger as _get_logger

                _get_logger("vnscript.config.settings").warning(
                    "Configuration file not found, using defaults",
                    config_file=str(config_file),
                )
                continue
            # Only explicitly set keys, so env vars still apply to the rest
            data.update(file_settings.model_dump(exclude_unset=True))

        if env_file:
            settings = cast(
                "VNScriptSettings", cast(Any, cls)(_env_file=env_file, **data)
            )
        else:
            settings = cls(**data)

        if cli_args:
            cli_data = {k: v for k, v in cli_args.items() if v is not None}
            if cli_data:
                updated_data = settings.model_dump()
                updated_data.update(cli_data)
                settings = cls(**updated_data)

        return settings


# Global settings instance
_settings: VNScriptSettings | None = None


def _get_config_paths() -> list[Path | str]:
    """Get existing config files, lowest priority first."""
    potential_paths = [
        Path.home() / ".config" / "vnscript" / "config.yaml",
        Path.home() / ".config" / "vnscript" / "config.toml",
        Path.home() / ".config" / "vnscript" / "config.json",
        Path.cwd() / "vnscript.yaml",
        Path.cwd() / "vnscript.toml",
        Path.cwd() / "vnscript.json",
    ]

    existing_paths: list[Path | str] = []
    for path in potential_paths:
        try:
            if path.is_file():
                existing_paths.append(path)
        except OSError:
            continue
    return existing_paths


def get_settings() -> VNScriptSettings:
    """Get the global settings instance.

    Returns:
        Global VNScriptSettings instance.
    """
    global _settings
    if _settings is None:
        config_paths = _get_config_paths()
        if config_paths:
            _settings = VNScriptSettings.from_multiple_sources(
                config_files=config_paths
            )
        else:
            _settings = VNScriptSettings.from_env()
    return _settings


def set_settings(settings: VNScriptSettings) -> None:
    """Set the global settings instance.

    Args:
        settings: Settings instance to use globally.
    """
    global _settings
    _settings = settings


def clear_settings_cache() -> None:
    """Clear the global settings cache.

    Forces get_settings() to re-read environment variables and config
    files on the next call.
    """
    global _settings
    _settings = None


def reset_settings() -> None:
    """Reset the global settings instance."""
    clear_settings_cache()


def get_settings_for_cli(
    config_file: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> VNScriptSettings:
    """Get settings for CLI commands with consistent precedence.

    Args:
        config_file: Optional specific config file to load. If not provided,
                    uses standard config locations.
        cli_overrides: Dictionary of CLI argument overrides. Only non-None
                      values are applied.

    Returns:
        VNScriptSettings instance with all sources merged.

    Raises:
        FileNotFoundError: If config_file is specified but doesn't exist.
    """
    if config_file:
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        return VNScriptSettings.from_multiple_sources(
            config_files=[config_file],
            cli_args=cli_overrides,
        )

    settings = get_settings()
    if cli_overrides:
        filtered = {k: v for k, v in cli_overrides.items() if v is not None}
        if filtered:
            data = settings.model_dump()
            data.update(filtered)
            settings = VNScriptSettings(**data)
    return settings
