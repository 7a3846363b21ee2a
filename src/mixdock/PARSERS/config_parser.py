"""
Parser for builder.yaml configuration files.
"""
import os
import re
import yaml
from typing import Any, Dict, Optional
from pydantic import ValidationError
from ..MODELS.builder_config import BuilderConfig
from ..errors import ConfigError

# ${VAR} or ${VAR:-default}
VARIABLE_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}')

class ConfigParser:
    """
    Parser for builder configuration files.
    """
    def __init__(self, context: Optional[Dict[str, str]] = None):
        """
        :param context: Variables available to ${VAR} expansion. Defaults to the process environment.
        """
        self.context = context if context is not None else dict(os.environ)

    def parse(self, config_path: str) -> BuilderConfig:
        """
        Parses a configuration file from a path.

        Relative paths in the file are resolved against the file's directory.

        :param config_path: Path to the configuration file.
        :return: Parsed configuration.
        """
        try:
            with open(config_path, 'r') as f:
                content = f.read()
        except OSError as e:
            raise ConfigError(f"Failed to read config file {config_path}") from e
        base_dir = os.path.dirname(os.path.abspath(config_path))
        return self.parse_from_string(content, base_dir=base_dir)

    def parse_from_string(self, content: str, base_dir: Optional[str] = None) -> BuilderConfig:
        """
        Parses a configuration from a string.

        :param content: YAML content.
        :param base_dir: Directory relative paths are resolved against; left relative if None.
        :return: Parsed configuration.
        """
        content = self.expand_variables(content)
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError("Invalid YAML in config") from e
        if not data:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Config must be a mapping of sections")

        sections = {}
        for name, values in data.items():
            key = str(name).lower()
            if values is None:
                values = {}
            if not isinstance(values, dict):
                raise ConfigError(f"Config section {name!r} must be a mapping")
            sections[key] = {str(k).lower(): self._scalar(v) for k, v in values.items()}

        try:
            config = BuilderConfig(**sections)
        except ValidationError as e:
            raise ConfigError("Invalid config") from e

        if base_dir:
            self._resolve_paths(config, base_dir)
        return config

    def expand_variables(self, content: str) -> str:
        """
        Expands ${VAR} and ${VAR:-default}. Unset variables without a default expand to "".
        """
        def replace(match):
            value = self.context.get(match.group(1))
            if value:
                return value
            return match.group(2) or ""

        return VARIABLE_PATTERN.sub(replace, content)

    @staticmethod
    def _scalar(value: Any) -> Any:
        # Blank values load as None
        if value is None:
            return ""
        # Unquoted versions such as 30010 load as numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def _resolve_paths(self, config: BuilderConfig, base_dir: str):
        for section, field in config.PATH_FIELDS:
            holder = getattr(config, section)
            value = getattr(holder, field)
            if not value:
                continue
            value = os.path.expanduser(value)
            if not os.path.isabs(value):
                value = os.path.normpath(os.path.join(base_dir, value))
            setattr(holder, field, value)
