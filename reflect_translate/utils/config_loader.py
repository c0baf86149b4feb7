import os

import yaml

from reflect_translate.errors import ConfigurationError

CONFIG_ENV_VAR = "REFLECT_TRANSLATE_CONFIG"
DEFAULT_CONFIG_PATH = "config.yaml"


def load_config(config_path=None, required=False):
    """
    Load configuration from a YAML file.

    The path falls back to $REFLECT_TRANSLATE_CONFIG, then config.yaml.
    A missing file is an error only when `required` is set; otherwise the
    caller gets an empty dict and every setting takes its default.
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)

    if not os.path.exists(config_path):
        if required:
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Could not read configuration {config_path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"Configuration {config_path} must be a mapping, got {type(config).__name__}"
        )
    return config


def get_section(config, name):
    """Return a config section as a dict, treating a missing or empty one as {}."""
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping")
    return section
