"""
Configuration management for dialectry.

This module provides configuration file parsing and hierarchy management
for dialectry configuration files. Files use an INI-style format with
quoted subsections, e.g. ``[dialect "h2"]``.
"""

import configparser
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import ConfigurationError
from .types import coerce_config_value, validate_config_key

CONFIG_FILENAME = "dialectry.conf"
CONFIG_ENV_VAR = "DIALECTRY_CONFIG"


@dataclass
class ConfigSource:
    """Represents a configuration source with its priority and path."""
    path: Optional[Path]
    priority: int
    source_type: str  # 'system', 'global', 'local', 'explicit'
    parser: Optional[configparser.ConfigParser] = None


class Config:
    """
    Configuration management for dialectry.

    Handles loading and merging configuration from multiple sources
    in priority order: system < global < local < explicit.
    """

    def __init__(self, config_files: Optional[List[Path]] = None) -> None:
        """
        Initialize configuration manager.

        Args:
            config_files: Explicit list of config files to load instead of
                the default locations
        """
        self._sources: List[ConfigSource] = []
        self._merged_config: Dict[str, Any] = {}

        if config_files:
            self._load_explicit_configs(config_files)
        else:
            self._load_default_configs()

        self._merge_configurations()

    def _load_explicit_configs(self, config_files: List[Path]) -> None:
        """Load explicitly specified configuration files."""
        for i, config_file in enumerate(config_files):
            config_file = Path(config_file)
            if not config_file.exists():
                raise ConfigurationError(
                    f"Configuration file does not exist: {config_file}",
                    config_file=str(config_file)
                )
            source = ConfigSource(
                path=config_file,
                priority=100 + i,
                source_type='explicit',
                parser=self._load_config_file(config_file)
            )
            self._sources.append(source)

    def _load_default_configs(self) -> None:
        """Load configuration files from default locations."""
        for path in self._get_system_config_paths():
            if path.exists():
                self._add_source(path, 10, 'system')

        global_path = self._get_global_config_path()
        if global_path and global_path.exists():
            self._add_source(global_path, 20, 'global')

        for path in self._get_local_config_paths():
            self._add_source(path, 30, 'local')

        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            path = Path(env_path)
            if not path.exists():
                raise ConfigurationError(
                    f"{CONFIG_ENV_VAR} points to a missing file: {path}",
                    config_file=str(path)
                )
            self._add_source(path, 100, 'explicit')

    def _add_source(self, path: Path, priority: int, source_type: str) -> None:
        self._sources.append(ConfigSource(
            path=path,
            priority=priority,
            source_type=source_type,
            parser=self._load_config_file(path)
        ))

    def _get_system_config_paths(self) -> List[Path]:
        """Get system-wide configuration file paths."""
        if sys.platform.startswith('win'):
            if 'PROGRAMDATA' in os.environ:
                return [Path(os.environ['PROGRAMDATA']) / 'dialectry' / CONFIG_FILENAME]
            return []
        return [
            Path('/etc/dialectry') / CONFIG_FILENAME,
            Path('/usr/local/etc/dialectry') / CONFIG_FILENAME,
        ]

    def _get_global_config_path(self) -> Optional[Path]:
        """Get global user configuration file path."""
        home = Path.home()

        if sys.platform.startswith('win'):
            return home / '.dialectry' / CONFIG_FILENAME

        xdg_config = os.environ.get('XDG_CONFIG_HOME')
        if xdg_config:
            return Path(xdg_config) / 'dialectry' / CONFIG_FILENAME
        return home / '.config' / 'dialectry' / CONFIG_FILENAME

    def _get_local_config_paths(self) -> List[Path]:
        """Get local project configuration file paths."""
        current = Path.cwd()

        # Nearest dialectry.conf in the current directory or a parent
        while True:
            config_path = current / CONFIG_FILENAME
            if config_path.exists():
                return [config_path]
            if current == current.parent:
                return []
            current = current.parent

    def _load_config_file(self, config_path: Path) -> configparser.ConfigParser:
        """
        Load and parse a configuration file.

        Args:
            config_path: Path to configuration file

        Returns:
            Parsed configuration

        Raises:
            ConfigurationError: If file cannot be parsed
        """
        parser = configparser.ConfigParser(
            interpolation=None,
            allow_no_value=True,
            delimiters=('=',),
            comment_prefixes=('#', ';'),
            inline_comment_prefixes=('#', ';'),
            strict=False
        )

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = self._preprocess_config_content(f.read())
                parser.read_string(content, source=str(config_path))
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read configuration file: {e}",
                config_file=str(config_path)
            )
        except configparser.Error as e:
            raise ConfigurationError(
                f"Invalid configuration syntax: {e}",
                config_file=str(config_path)
            )

        return parser

    def _preprocess_config_content(self, content: str) -> str:
        """Normalise whitespace in quoted subsection headers like [dialect  "h2"]."""
        pattern = r'^\[\s*([a-zA-Z][a-zA-Z0-9._]*)\s+"([^"]+)"\s*\]'
        return re.sub(pattern, r'[\1 "\2"]', content, flags=re.MULTILINE)

    def _merge_configurations(self) -> None:
        """Merge all configuration sources in priority order."""
        self._sources.sort(key=lambda s: s.priority)

        merged: Dict[str, Any] = {}
        for source in self._sources:
            if source.parser:
                self._merge_parser_into_dict(source.parser, merged)

        self._merged_config = merged

    def _merge_parser_into_dict(self, parser: configparser.ConfigParser,
                               target: Dict[str, Any]) -> None:
        """Merge a ConfigParser into a dictionary."""
        for section_name in parser.sections():
            if ' ' in section_name and '"' in section_name:
                main_section, sub_section = self._parse_subsection(section_name)
                section = target.setdefault(main_section, {}).setdefault(sub_section, {})
            else:
                section = target.setdefault(section_name, {})

            for key, value in parser.items(section_name):
                section[key] = value

    def _parse_subsection(self, section_name: str) -> Tuple[str, str]:
        """Parse section name like 'dialect "h2"' into main and sub sections."""
        main, sub = section_name.split(' ', 1)
        return main, sub.strip().strip('"')

    def _get_nested_value(self, config: Dict[str, Any], key: str) -> Any:
        """Get nested value using dot notation."""
        current = config

        for part in key.split('.'):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return None

        return current

    def get(self, key: str, default: Any = None, expected_type: Optional[type] = None) -> Any:
        """
        Get configuration value with dot notation.

        Args:
            key: Configuration key in dot notation (e.g., 'core.verbosity')
            default: Default value if key not found
            expected_type: Expected type for value coercion

        Returns:
            Configuration value, coerced to expected type if specified

        Raises:
            ConfigurationError: If key is invalid or type coercion fails
        """
        if not validate_config_key(key):
            raise ConfigurationError(f"Invalid configuration key: {key}", config_key=key)

        value = self._get_nested_value(self._merged_config, key)

        if value is None:
            return default

        if expected_type and isinstance(value, str):
            try:
                return coerce_config_value(value, expected_type)
            except (ValueError, TypeError) as e:
                raise ConfigurationError(
                    f"Cannot convert '{value}' to {expected_type.__name__} for key '{key}': {e}",
                    config_key=key
                )

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get configuration section.

        Args:
            section: Section name (e.g., 'dialect' or 'dialect.h2')

        Returns:
            Dictionary of section values
        """
        return self._get_nested_value(self._merged_config, section) or {}

    def get_config_sources(self) -> List[ConfigSource]:
        """Get list of configuration sources in priority order."""
        return self._sources.copy()

    def __repr__(self) -> str:
        sources = [s.source_type for s in self._sources]
        return f"Config(sources={sources})"
