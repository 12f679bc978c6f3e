"""
Configuration loading for the Markov chain models.

Configuration lives in YAML files under the project's ``configs`` directory:

- ``markov_chain_{environment}.yaml`` is tried first,
- ``markov_chain.yaml`` is the fallback.

Whatever is found is merged over ``DEFAULT_CONFIG`` so callers can always rely
on every key being present.
"""

import copy
import os

import yaml

DEFAULT_CONFIG = {
    "markov_chain": {
        "n": 2,
    },
    "logging": {
        "level": "DEBUG",
        "console_json": True,
        "log_file": None,
        "log_dir": None,
    },
}


def find_config_dir(start=None):
    """
    Walk up from ``start`` until a directory containing ``configs`` is found.

    Args:
        start (str, optional): Directory to start from (defaults to this module's directory)

    Returns:
        str or None: Path of the ``configs`` directory, or None if there is none
    """
    current_dir = os.path.abspath(start or os.path.dirname(__file__))

    while True:
        candidate = os.path.join(current_dir, "configs")
        if os.path.isdir(candidate):
            return candidate
        parent = os.path.dirname(current_dir)
        if parent == current_dir:
            return None
        current_dir = parent


def merge_config(base, override):
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        # An empty YAML section keeps the defaults
        if value is None and isinstance(merged.get(key), dict):
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(config_path, environment, logger=None):
    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        if logger:
            logger.warning(f"Error loading config from {config_path}: {e}", extra={
                "metrics": {"config_path": config_path, "environment": environment}
            })
        return None

    if not isinstance(config, dict):
        if logger:
            logger.warning(f"Ignoring config {config_path}: top level is not a mapping")
        return None

    if logger:
        logger.info("Config loaded", extra={
            "metrics": {"config_path": config_path, "environment": environment}
        })
    return config


def load_config(environment="development", config_dir=None, logger=None):
    """
    Load the configuration for an environment.

    Args:
        environment (str): Environment name ('development', 'test', ...)
        config_dir (str, optional): Directory holding the YAML files; located with
            ``find_config_dir`` when omitted
        logger (logging.Logger, optional): Logger used to report what was loaded

    Returns:
        dict: ``DEFAULT_CONFIG`` merged with the first readable config file
    """
    config_dir = config_dir or find_config_dir()
    if config_dir is None:
        if logger:
            logger.warning("No configs directory found, using defaults", extra={
                "metrics": {"environment": environment}
            })
        return copy.deepcopy(DEFAULT_CONFIG)

    candidates = [
        os.path.join(config_dir, f"markov_chain_{environment}.yaml"),
        os.path.join(config_dir, "markov_chain.yaml"),
    ]

    for config_path in candidates:
        if not os.path.exists(config_path):
            continue
        config = _read_yaml(config_path, environment, logger)
        if config is not None:
            return merge_config(DEFAULT_CONFIG, config)

    if logger:
        logger.warning("No configuration found, using defaults", extra={
            "metrics": {"environment": environment, "config_dir": config_dir}
        })
    return copy.deepcopy(DEFAULT_CONFIG)
