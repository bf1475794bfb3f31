"""Configuration management for the benchmark runner"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List
from benchaudit.models import Config
from benchaudit.controls.constraints import clean_ids


class ConfigManager:
    """Manages configuration loading and merging from files and CLI arguments"""

    DEFAULT_CONFIG = {
        'benchmark': {
            'definitions': None,  # Must be provided by user
            'define': [],
            'checks': '',
            'groups': '',
        },
        'execution': {
            'timeout': 60,
            'boundary': '/',
        },
        'output': {
            'format': 'text',
            'file': None,
            'no_remediations': False,
            'include_test_output': False,
        },
        'logging': {
            'level': 'WARNING',
        }
    }

    @classmethod
    def load_config(
        cls,
        config_file: Optional[str] = None,
        cli_overrides: Optional[Dict[str, Any]] = None
    ) -> Config:
        """
        Load configuration from file and apply CLI overrides.

        Args:
            config_file: Path to YAML config file (optional)
            cli_overrides: Dictionary of CLI argument overrides (optional)

        Returns:
            Config object with merged configuration

        Raises:
            ValueError: If configuration is invalid
            FileNotFoundError: If config file doesn't exist
        """
        # Start with defaults
        config_dict = cls._deep_copy_dict(cls.DEFAULT_CONFIG)

        # Load from file if provided
        if config_file:
            file_config = cls._load_yaml_file(config_file)
            config_dict = cls._merge_dicts(config_dict, file_config)

        # Apply CLI overrides
        if cli_overrides:
            config_dict = cls._apply_cli_overrides(config_dict, cli_overrides)

        # Convert to Config object
        return cls._dict_to_config(config_dict)

    @classmethod
    def _load_yaml_file(cls, filepath: str) -> Dict[str, Any]:
        """Load YAML configuration file"""
        path = Path(filepath)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        if not path.is_file():
            raise ValueError(f"Configuration path is not a file: {filepath}")

        try:
            with open(path, 'r') as f:
                config = yaml.safe_load(f)

            if config is None:
                return {}

            if not isinstance(config, dict):
                raise ValueError("Configuration file must contain a YAML dictionary")

            return config
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

    @classmethod
    def _merge_dicts(cls, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two dictionaries"""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = cls._merge_dicts(result[key], value)
            else:
                result[key] = value

        return result

    @classmethod
    def _apply_cli_overrides(cls, config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """Apply CLI argument overrides to configuration"""
        result = cls._deep_copy_dict(config)

        # Map CLI arguments to config structure
        cli_mapping = {
            'definitions': ('benchmark', 'definitions'),
            'define': ('benchmark', 'define'),
            'checks': ('benchmark', 'checks'),
            'groups': ('benchmark', 'groups'),
            'timeout': ('execution', 'timeout'),
            'boundary': ('execution', 'boundary'),
            'output_format': ('output', 'format'),
            'output_file': ('output', 'file'),
            'no_remediations': ('output', 'no_remediations'),
            'include_test_output': ('output', 'include_test_output'),
            'log_level': ('logging', 'level'),
        }

        for cli_key, value in overrides.items():
            if value is None:
                continue

            # click hands over an empty tuple for a repeatable option that was not given
            if isinstance(value, (list, tuple)):
                if not value:
                    continue
                value = list(value)

            if cli_key in cli_mapping:
                section, config_key = cli_mapping[cli_key]
                if section not in result:
                    result[section] = {}
                result[section][config_key] = value

        return result

    @classmethod
    def _dict_to_config(cls, config_dict: Dict[str, Any]) -> Config:
        """Convert configuration dictionary to Config object"""
        benchmark = config_dict.get('benchmark') or {}
        execution = config_dict.get('execution') or {}
        output = config_dict.get('output') or {}
        logging_section = config_dict.get('logging') or {}

        # Ensure define is a list of strings
        define = benchmark.get('define') or []
        if isinstance(define, str):
            define = [define]
        elif not isinstance(define, list):
            raise ValueError("benchmark.define must be a list of key=value strings")
        define = [str(item) for item in define]

        # Expand definitions and output paths
        definitions = benchmark.get('definitions')
        if definitions:
            definitions = os.path.expanduser(os.path.expandvars(str(definitions)))

        output_file = output.get('file')
        if output_file:
            output_file = os.path.expanduser(os.path.expandvars(str(output_file)))

        boundary = os.path.expanduser(os.path.expandvars(str(execution.get('boundary') or '/')))

        try:
            timeout = int(execution.get('timeout', 60))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid timeout: {execution.get('timeout')}")

        return Config(
            definitions_file=definitions,
            defined_constraints=define,
            check_ids=cls._ids(benchmark.get('checks')),
            group_ids=cls._ids(benchmark.get('groups')),
            timeout=timeout,
            boundary_path=boundary,
            output_format=str(output.get('format') or 'text'),
            output_file=output_file,
            no_remediations=bool(output.get('no_remediations', False)),
            include_test_output=bool(output.get('include_test_output', False)),
            log_level=str(logging_section.get('level') or 'WARNING'),
        )

    @staticmethod
    def _ids(value: Any) -> List[str]:
        """Accept IDs as a comma separated string or a YAML list"""
        if isinstance(value, list):
            return [str(item).strip() for item in value if str(item).strip()]
        return clean_ids(value)

    @classmethod
    def _deep_copy_dict(cls, d: Dict[str, Any]) -> Dict[str, Any]:
        """Deep copy a dictionary"""
        result = {}
        for key, value in d.items():
            if isinstance(value, dict):
                result[key] = cls._deep_copy_dict(value)
            elif isinstance(value, list):
                result[key] = value.copy()
            else:
                result[key] = value
        return result

    @classmethod
    def create_default_config_file(cls, filepath: str) -> None:
        """Create a default configuration file"""
        config_template = """# Benchmark Runner Configuration File

benchmark:
  # Benchmark definition file (YAML)
  definitions: /etc/benchaudit/benchmark.yaml

  # Facts about this system, used to select sub-checks
  define:
    - platform=ubuntu

  # Optional: comma separated check IDs to run (takes precedence over groups)
  checks: ""

  # Optional: comma separated group IDs to run
  groups: ""

execution:
  # Seconds to wait for each audit command
  timeout: 60

  # Root of the file system seen by file and text searches
  boundary: /

output:
  # Report format: text, json or junit
  format: text

  # Optional: write the report to this file instead of stdout
  file: null

  # Leave remediations out of the text report
  no_remediations: false

  # Show the raw audit output of failed checks
  include_test_output: false

logging:
  # DEBUG, INFO, WARNING, ERROR or CRITICAL
  level: WARNING
"""

        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            f.write(config_template)
