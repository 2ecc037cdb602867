"""
Configuration management for fuzzytunes.
"""
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from fuzzytunes.keys import Action, KeyBindings, is_valid_key
from fuzzytunes.logging_config import get_logger

try:
    import tomllib
except ImportError:
    import tomli as tomllib

logger = get_logger('config')

VIEW_NAMES = ("artists", "songs", "playlist", "genres")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_FZF_OPTIONS = "--reverse --no-sort --cycle"

# Environment variables consulted for selector options, lowest precedence first
SESSION_OPTIONS_ENV = "FUZZYTUNES_FZF_OPTS"
NATIVE_OPTIONS_ENV = "FZF_DEFAULT_OPTS"

KEY_SETTINGS = (
    "playlist_view_key", "track_view_key", "artist_view_key", "genre_view_key",
    "findadd_key", "delete_key", "clear_key", "next_key", "prev_key",
)


@dataclass(frozen=True)
class AppConfig:
    """Application configuration settings."""

    # Navigation
    default_view: str = "artists"
    full_song_format: str = "[[[%artist% - ]%title%]|[%file%]]"

    # Global view switches
    playlist_view_key: str = "f1"
    track_view_key: str = "f2"
    artist_view_key: str = "f3"
    genre_view_key: str = "f4"
    findadd_key: str = "ctrl-space"

    # Playlist view
    delete_key: str = "del"
    clear_key: str = "ctrl-x"
    next_key: str = ">"
    prev_key: str = "<"

    # Selector
    fzf_options: str = DEFAULT_FZF_OPTIONS

    # Logging settings
    log_level: str = "WARNING"
    log_file: str = ""

    def key_bindings(self) -> KeyBindings:
        """Build the immutable key table from this configuration."""
        return KeyBindings.from_overrides(
            {action: getattr(self, action.config_key) for action in Action}
        )


def _validate(key: str, value: Any) -> Optional[str]:
    """Return a problem description for ``key = value``, or None if it is usable."""
    if not isinstance(value, str):
        return f"{key} must be a string, got {type(value).__name__}"
    if key == "default_view" and value not in VIEW_NAMES:
        return f"default_view must be one of {', '.join(VIEW_NAMES)}, got {value!r}"
    if key in KEY_SETTINGS and not is_valid_key(value):
        return f"{key}: {value!r} is not a key fzf recognizes"
    if key == "full_song_format" and not value.strip():
        return "full_song_format must not be empty"
    if key == "log_level" and value.upper() not in LOG_LEVELS:
        return f"Invalid log level: {value!r}"
    return None


def parse_config_data(data: Mapping[str, Any]) -> Tuple[AppConfig, List[str]]:
    """Apply raw settings over the defaults.

    Every key is checked on its own. Problems are collected rather than
    raised; a rejected key keeps its default.

    Returns:
        Tuple of (config, list of problems)
    """
    known = {f.name for f in fields(AppConfig)}
    accepted: Dict[str, Any] = {}
    problems: List[str] = []
    for key, value in data.items():
        if key not in known:
            problems.append(f"Unknown config key: {key}")
            continue
        problem = _validate(key, value)
        if problem:
            problems.append(problem)
            continue
        accepted[key] = value.upper() if key == "log_level" else value
    return AppConfig(**accepted), problems


class ConfigManager:
    """Loads and validates the configuration file."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self._get_default_config_path()
        self.config: AppConfig = AppConfig()
        self.problems: List[str] = []
        self._load_config()

    def _get_default_config_path(self) -> Path:
        """Get default configuration file path."""
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config) / "fuzzytunes" / "config.toml"
        return Path.home() / ".config" / "fuzzytunes" / "config.toml"

    def _load_config(self) -> None:
        """Load configuration from file."""
        if not self.config_path.exists():
            logger.debug(f"Config file not found at {self.config_path}, using defaults")
            return

        try:
            with open(self.config_path, "rb") as f:
                data = tomllib.load(f)
        except (tomllib.TOMLDecodeError, OSError) as e:
            self.problems.append(f"Could not read {self.config_path}: {e}")
            return

        self.config, self.problems = parse_config_data(data)
        logger.debug(f"Loaded configuration from {self.config_path}")

    def report_problems(self) -> None:
        """Log every collected problem as a warning."""
        for problem in self.problems:
            logger.warning(f"Config: {problem}")


def load_config(config_path: Optional[Path] = None) -> ConfigManager:
    """Load configuration and return manager."""
    return ConfigManager(config_path)


def resolve_selector_options(config_value: Optional[str],
                             environ: Optional[Mapping[str, str]] = None) -> Tuple[str, str]:
    """Pick the fzf options to use.

    Precedence, highest first: FZF_DEFAULT_OPTS, FUZZYTUNES_FZF_OPTS, the
    config file value, the built-in default. Blank values are skipped.

    Returns:
        Tuple of (options, name of the tier that supplied them)
    """
    environ = os.environ if environ is None else environ
    tiers = (
        (NATIVE_OPTIONS_ENV, environ.get(NATIVE_OPTIONS_ENV)),
        (SESSION_OPTIONS_ENV, environ.get(SESSION_OPTIONS_ENV)),
        ("config", config_value),
    )
    for tier, value in tiers:
        if value and value.strip():
            return value, tier
    return DEFAULT_FZF_OPTIONS, "default"
