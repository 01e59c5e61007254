"""
Configuration file support for sexpstream.

Provides hierarchical configuration loading from:
1. Project config: .sexpstream.toml or sexpstream.toml in the project root
2. User config: ~/.config/sexpstream/config.toml

Command-line options override config file values, and project config
overrides user config.
"""

import tomllib
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import ConfigError
from .grammar import DEFAULT_TAB_WIDTH

# Config file names to search for in project directories
CONFIG_FILENAMES = [".sexpstream.toml", "sexpstream.toml"]

# User-level config path
USER_CONFIG_PATH = Path.home() / ".config" / "sexpstream" / "config.toml"

# All known config keys for validation
KNOWN_KEYS = {
    "parser": {"tab_width"},
    "output": {"format", "color"},
}

OUTPUT_FORMATS = ("table", "json")


@dataclass
class ParserConfig:
    """Parser settings."""

    tab_width: int = DEFAULT_TAB_WIDTH


@dataclass
class OutputConfig:
    """CLI output settings."""

    format: str = "table"
    color: bool = True


@dataclass
class Config:
    """Merged configuration from all sources."""

    parser: ParserConfig = field(default_factory=ParserConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    # Track which file each setting came from (for `config --show`)
    _sources: dict = field(default_factory=dict, repr=False)

    @classmethod
    def load(cls, start_dir: Path | None = None) -> "Config":
        """
        Load configuration with precedence: project > user > defaults.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Merged configuration object

        Raises:
            ConfigError: If a config file is malformed or holds invalid values
        """
        if start_dir is None:
            start_dir = Path.cwd()

        config = cls()
        sources: dict[str, str] = {}

        if USER_CONFIG_PATH.is_file():
            _merge_config(config, _load_toml_file(USER_CONFIG_PATH), str(USER_CONFIG_PATH), sources)

        project_config = _find_project_config(start_dir)
        if project_config:
            _merge_config(config, _load_toml_file(project_config), str(project_config), sources)

        config._sources = sources
        return config

    def get_source(self, key: str) -> str:
        """Get the source file for a config key."""
        return self._sources.get(key, "default")

    def items(self) -> list[tuple[str, Any]]:
        """Flattened ``section.key`` / value pairs."""
        return [
            ("parser.tab_width", self.parser.tab_width),
            ("output.format", self.output.format),
            ("output.color", self.output.color),
        ]


def _find_project_config(start_dir: Path) -> Path | None:
    """
    Find project config by walking up the directory tree.

    Stops at a .git directory or the filesystem root.
    """
    current = start_dir.resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        if (current / ".git").exists():
            break

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file, raising ConfigError if it cannot be read or parsed."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e


def _merge_config(
    config: Config, data: dict[str, Any], source: str, sources: dict[str, str]
) -> None:
    """Merge loaded TOML data into ``config``, validating each value."""
    for key in data:
        if key not in KNOWN_KEYS:
            warnings.warn(f"Unknown config key '{key}' in {source}", stacklevel=3)

    if "parser" in data:
        parser_data = _section(data, "parser", source)
        _warn_unknown_keys(parser_data, KNOWN_KEYS["parser"], "parser", source)

        if "tab_width" in parser_data:
            tab_width = parser_data["tab_width"]
            if not isinstance(tab_width, int) or isinstance(tab_width, bool) or tab_width < 1:
                raise ConfigError(
                    "parser.tab_width must be a positive integer",
                    context={"file": source, "got": tab_width},
                )
            config.parser.tab_width = tab_width
            sources["parser.tab_width"] = source

    if "output" in data:
        output_data = _section(data, "output", source)
        _warn_unknown_keys(output_data, KNOWN_KEYS["output"], "output", source)

        if "format" in output_data:
            fmt = output_data["format"]
            if fmt not in OUTPUT_FORMATS:
                raise ConfigError(
                    f"output.format must be one of: {', '.join(OUTPUT_FORMATS)}",
                    context={"file": source, "got": fmt},
                )
            config.output.format = fmt
            sources["output.format"] = source
        if "color" in output_data:
            color = output_data["color"]
            if not isinstance(color, bool):
                raise ConfigError(
                    "output.color must be true or false",
                    context={"file": source, "got": color},
                )
            config.output.color = color
            sources["output.color"] = source


def _section(data: dict[str, Any], name: str, source: str) -> dict[str, Any]:
    section = data[name]
    if not isinstance(section, dict):
        raise ConfigError(
            f"'{name}' must be a table",
            context={"file": source, "got": section},
            suggestions=[f"Write the settings under a [{name}] header"],
        )
    return section


def _warn_unknown_keys(data: dict[str, Any], known: set[str], section: str, source: str) -> None:
    """Warn about unknown keys in a config section."""
    for key in data:
        if key not in known:
            warnings.warn(f"Unknown config key '{section}.{key}' in {source}", stacklevel=4)


def generate_template() -> str:
    """Generate a template config file with all options documented."""
    return """# sexpstream configuration file
# Place as .sexpstream.toml in project root or ~/.config/sexpstream/config.toml for user defaults

[parser]
# Columns a tab advances in reported error positions
# tab_width = 8

[output]
# Output format for the `events` command: table, json
# format = "table"

# Colored terminal output
# color = true
"""


def get_config_paths() -> dict[str, Path | None]:
    """Get paths to config files that would be loaded."""
    return {
        "user": USER_CONFIG_PATH if USER_CONFIG_PATH.is_file() else None,
        "project": _find_project_config(Path.cwd()),
    }
