"""fountainkit configuration settings."""

from __future__ import annotations

import json
import os
import re
import tomllib
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fountainkit.exceptions import ConfigurationError, check_config_keys

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


class FountainKitSettings(BaseSettings):
    """Options for the block lexer, duration estimates, rendering and logging.

    Sources, strongest first:

    1. Command flags, e.g. ``fountainkit parse script.fountain --no-notes``
    2. Config files (YAML, TOML or JSON), e.g. ``--config fountainkit.yaml``
    3. ``FOUNTAINKIT_*`` environment variables, e.g.
       ``FOUNTAINKIT_MERGE_EMPTY_LINES=false``
    4. A ``.env`` file in the working directory
    5. The field defaults below
    """

    model_config = SettingsConfigDict(
        env_prefix="FOUNTAINKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Lexer options
    print_notes: bool = Field(
        default=True,
        description="Keep [[note]] content in the token text",
    )
    merge_empty_lines: bool = Field(
        default=True,
        description="Collapse consecutive blank lines into one separator",
    )
    use_dual_dialogue: bool = Field(
        default=True,
        description="Honor the ^ marker that pairs two dialogue blocks",
    )
    dialogue_foldable: bool = Field(
        default=False,
        description="Add a structure node for every character block in a scene",
    )
    embolden_character_names: bool = Field(
        default=True,
        description="Render character cues in bold",
    )
    each_scene_on_new_page: bool = Field(
        default=False,
        description="Insert a page break before every scene heading but the first",
    )
    print_dialogue_numbers: bool = Field(
        default=False,
        description="Number character cues sequentially",
    )

    # Duration estimation
    dial_sec_per_char: float = Field(
        default=0.3,
        description="Seconds of screen time per dialogue character",
        ge=0.0,
    )
    dial_sec_per_punc_short: float = Field(
        default=0.3,
        description="Pause in seconds for a short punctuation mark in dialogue",
        ge=0.0,
    )
    dial_sec_per_punc_long: float = Field(
        default=0.75,
        description="Pause in seconds for a long punctuation mark in dialogue",
        ge=0.0,
    )
    action_sec_per_char: float = Field(
        default=0.4,
        description="Seconds of screen time per action character",
        ge=0.0,
    )

    # Render profile
    default_color: str = Field(
        default="#000000",
        description="Text color used when no override is active",
    )
    note_color: str = Field(
        default="#888888",
        description="Text color for notes",
    )
    note_italic: bool = Field(
        default=True,
        description="Render notes in italic",
    )
    font_size: int = Field(default=12, description="Body font size", gt=0)
    note_font_size: int = Field(default=9, description="Note font size", gt=0)
    character_spacing: float = Field(
        default=1.0,
        description="Character spacing applied to every run",
    )

    # Logging settings
    log_level: str = Field(
        default="WARNING",
        description="Logging level",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    log_format: str = Field(
        default="console",
        description="Log output format",
        pattern="^(console|json|structured)$",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_log_file(cls, v: Any) -> Path | None:
        """Expand ``~`` and environment variables in the log file path."""
        if v is None:
            return None
        if isinstance(v, Path):
            return v.resolve()
        if not isinstance(v, str):
            raise ValueError(
                f"log_file must be a string or Path, got {type(v).__name__}: {v!r}"
            )
        return Path(os.path.expandvars(v)).expanduser().resolve()

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def normalize_case(cls, v: Any, info: ValidationInfo) -> str:
        """Accept log levels and formats in any letter case."""
        if not isinstance(v, str):
            raise ValueError(f"{info.field_name} must be a string, got {type(v).__name__}")
        return v.upper() if info.field_name == "log_level" else v.lower()

    @field_validator("default_color", "note_color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        """Require #RRGGBB colors, stored uppercase."""
        if not _HEX_COLOR.match(v):
            raise ValueError(f"Colors must look like #RRGGBB, got {v!r}")
        return v.upper()

    @classmethod
    def from_env(cls) -> FountainKitSettings:
        """Create settings from environment variables and defaults only."""
        return cls()

    @classmethod
    def from_file(cls, config_path: Path | str) -> FountainKitSettings:
        """Load settings from one YAML, TOML or JSON file.

        Raises:
            ConfigurationError: For an unknown suffix or a misspelled key.
            FileNotFoundError: If the file does not exist.
        """
        return cls(**read_config_file(config_path))

    @classmethod
    def from_multiple_sources(
        cls,
        config_files: list[Path | str] | None = None,
        env_file: Path | str | None = None,
        cli_args: dict[str, Any] | None = None,
    ) -> FountainKitSettings:
        """Merge config files, the environment and CLI arguments.

        Config files are applied in order, so a later file overrides an
        earlier one; missing files are skipped with a warning. Values from
        files beat environment variables, and non-None ``cli_args`` beat
        everything.

        Args:
            config_files: Config files to merge.
            env_file: Alternative .env file.
            cli_args: Values given on the command line.

        Returns:
            Validated settings.
        """
        data: dict[str, Any] = {}
        for config_file in config_files or []:
            try:
                data.update(read_config_file(config_file))
            except FileNotFoundError:
                from fountainkit.config.logging import get_logger as _get_logger

                _get_logger(__name__).warning(
                    "Configuration file not found, using defaults",
                    config_file=str(config_file),
                )

        data.update({k: v for k, v in (cli_args or {}).items() if v is not None})
        if env_file:
            return cast("FountainKitSettings", cast(Any, cls)(_env_file=env_file, **data))
        return cls(**data)


def _load_yaml(path: Path) -> Any:
    with path.open(encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _load_toml(path: Path) -> Any:
    with path.open("rb") as f:
        return tomllib.load(f)


def _load_json(path: Path) -> Any:
    with path.open(encoding="utf-8") as f:
        return json.load(f)


_LOADERS = {
    ".yml": _load_yaml,
    ".yaml": _load_yaml,
    ".toml": _load_toml,
    ".json": _load_json,
}


def read_config_file(config_path: Path | str) -> dict[str, Any]:
    """Read the raw key/value pairs of a config file.

    Args:
        config_path: Path ending in .yml, .yaml, .toml or .json

    Returns:
        Settings keys and values, not yet validated

    Raises:
        ConfigurationError: For an unknown suffix, a file that is not a
            mapping, or a misspelled key
        FileNotFoundError: If the file does not exist
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    loader = _LOADERS.get(suffix)
    if loader is None:
        raise ConfigurationError(
            message=f"Unsupported configuration file format: {suffix or '(none)'}",
            hint=f"Rename the file to end in one of {', '.join(_LOADERS)}",
            details={
                "file": str(path),
                "detected_format": suffix,
                "supported_formats": list(_LOADERS),
            },
        )

    data = loader(path)
    if not isinstance(data, dict):
        raise ConfigurationError(
            message=f"Configuration file {path.name} must contain a mapping of settings",
            hint="Write one 'key: value' pair per setting",
            details={"file": str(path), "found_type": type(data).__name__},
        )
    check_config_keys(data)
    return data


_CONFIG_SUFFIXES = (".yaml", ".json", ".toml")

_settings: FountainKitSettings | None = None
_config_paths_cache: list[Path] | None = None


def _get_config_paths() -> list[Path]:
    """Find the default config files that exist, lowest priority first.

    User files live in ~/.config/fountainkit/config.*; project files named
    fountainkit.* in the working directory override them.
    """
    global _config_paths_cache
    if _config_paths_cache is None:
        user_dir = Path.home() / ".config" / "fountainkit"
        candidates = [user_dir / f"config{suffix}" for suffix in _CONFIG_SUFFIXES]
        candidates += [Path.cwd() / f"fountainkit{suffix}" for suffix in _CONFIG_SUFFIXES]
        _config_paths_cache = [path for path in candidates if _is_file(path)]
    return _config_paths_cache


def _is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def get_settings() -> FountainKitSettings:
    """Return the global settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = FountainKitSettings.from_multiple_sources(
            config_files=list(_get_config_paths())
        )
    return _settings


def set_settings(settings: FountainKitSettings) -> None:
    """Replace the global settings instance."""
    global _settings
    _settings = settings


def clear_settings_cache() -> None:
    """Forget the global settings and the discovered config files.

    The next get_settings() call reads the environment and config files again.
    """
    global _settings, _config_paths_cache
    _settings = None
    _config_paths_cache = None


def reset_settings() -> None:
    """Reset the global settings instance."""
    clear_settings_cache()


def get_settings_for_cli(
    config_file: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> FountainKitSettings:
    """Resolve the settings a CLI command runs with.

    Args:
        config_file: Explicit --config file. It replaces the default config
            file lookup and must exist.
        cli_overrides: Command flags; None means the flag was not given.

    Returns:
        Settings with CLI flags applied on top.

    Raises:
        FileNotFoundError: If ``config_file`` does not exist.
    """
    if config_file is not None and not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    if config_file is not None:
        return FountainKitSettings.from_multiple_sources(
            config_files=[config_file], cli_args=overrides
        )
    if not overrides:
        return get_settings()
    return FountainKitSettings(**{**get_settings().model_dump(), **overrides})
