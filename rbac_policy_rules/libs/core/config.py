"""
Configuration Management

Handles loading and validating configuration files for the policy rules tool.
"""

import logging
import yaml
from pathlib import Path
from typing import Dict, Any

from .constants import ErrorMessages, OutputConstants
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages configuration loading and validation"""

    # Configuration schema - defines expected structure and types
    CONFIG_SCHEMA = {
        'filter': {
            'type': dict,
            'required': False,
            'fields': {
                'regex': {'type': str, 'required': False},
                'inverse': {'type': bool, 'required': False}
            }
        },
        'output': {
            'type': dict,
            'required': False,
            'fields': {
                'format': {'type': str, 'required': False}
            }
        },
        'cluster': {
            'type': dict,
            'required': False,
            'fields': {
                'context': {'type': str, 'required': False},
                'skip_tls': {'type': bool, 'required': False},
                'input': {'type': str, 'required': False}
            }
        },
        'global': {
            'type': dict,
            'required': False,
            'fields': {
                'debug': {'type': bool, 'required': False}
            }
        },
    }

    def __init__(self):
        """Initialize configuration manager"""
        self.config_data = {}
        self.config_file_path = None

    def load_config(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from YAML file

        Args:
            config_path: Path to configuration file

        Returns:
            Dict containing configuration data

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid
        """
        config_file = Path(config_path)

        if not config_file.is_file():
            raise ConfigurationError(ErrorMessages.ConfigError.CONFIG_FILE_NOT_FOUND.format(config_path=config_path))

        try:
            with open(config_file, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file {config_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to load configuration from {config_path}: {e}") from e

        self.load_dict(data or {})
        self.config_file_path = config_path
        logger.debug(f"Loaded configuration from {config_path}")
        return self.config_data

    def load_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate and adopt an already-parsed configuration mapping

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a dictionary")

        self._validate_against_schema(data, self.CONFIG_SCHEMA)
        self.config_data = data
        return self.config_data

    def _validate_against_schema(self, data: Dict[str, Any], schema: Dict[str, Any], path: str = "") -> None:
        """
        Validate data against schema definition

        Args:
            data: Data to validate
            schema: Schema definition
            path: Current path for error reporting

        Raises:
            ConfigurationError: If data doesn't match schema
        """
        for key in data:
            if key not in schema:
                current_path = f"{path}.{key}" if path else key
                raise ConfigurationError(f"Unknown configuration field {current_path}")

        for key, field_schema in schema.items():
            current_path = f"{path}.{key}" if path else key

            if key in data:
                value = data[key]

                # Skip None values for optional fields
                if value is None and not field_schema.get('required', False):
                    continue

                expected_type = field_schema['type']
                if not isinstance(value, expected_type):
                    raise ConfigurationError(f"{current_path} must be a {expected_type.__name__}")

                if expected_type == dict and 'fields' in field_schema:
                    self._validate_against_schema(value, field_schema['fields'], current_path)

            elif field_schema.get('required', False):
                raise ConfigurationError(f"Required field {current_path} is missing")

    def get_value(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key

        Args:
            key: Configuration key (supports dot notation like 'filter.regex')
            default: Default value if key not found or null

        Returns:
            Configuration value or default
        """
        value = self.config_data

        try:
            for k in key.split('.'):
                value = value[k]
        except (KeyError, TypeError):
            return default

        return default if value is None else value

    def _dict_to_yaml_with_comments(self, data: Dict[str, Any], indent: int = 0) -> str:
        """
        Convert dictionary to YAML string preserving comments

        Keys starting with '#' are emitted as comment lines.
        """
        yaml_lines = []
        indent_str = "  " * indent

        for key, value in data.items():
            if key.startswith("#"):
                yaml_lines.append(f"{indent_str}{key}")
            elif isinstance(value, dict):
                yaml_lines.append(f"{indent_str}{key}:")
                yaml_lines.append(self._dict_to_yaml_with_comments(value, indent + 1))
            elif isinstance(value, bool):
                yaml_lines.append(f"{indent_str}{key}: {str(value).lower()}")
            elif isinstance(value, str):
                yaml_lines.append(f'{indent_str}{key}: "{value}"')
            else:
                yaml_lines.append(f"{indent_str}{key}: {value}")

        return "\n".join(yaml_lines)

    def get_config_template_content(self) -> str:
        """
        Generate configuration template content as string without file I/O

        Returns:
            str: YAML configuration template content
        """
        template = {
            "# RBAC Policy Rules Configuration File": None,
            "# Command-line flags take precedence over these values": None,
            "filter": {
                "# Case-insensitive regular expression matched against subject names": None,
                "regex": OutputConstants.DEFAULT_NAME_PATTERN,
                "# Keep subjects that do NOT match the expression": None,
                "inverse": False
            },
            "output": {
                "# table | yaml | json": None,
                "format": OutputConstants.DEFAULT_OUTPUT_FORMAT
            },
            "cluster": {
                "# kubeconfig context, empty for the current context": None,
                "context": "",
                "skip_tls": False,
                "# Read RBAC objects from a YAML/JSON file instead of the cluster": None,
                "input": ""
            },
            "global": {
                "debug": False
            }
        }

        return self._dict_to_yaml_with_comments(template)
