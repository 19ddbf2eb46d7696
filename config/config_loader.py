import copy
import logging
import os
import yaml
from pathlib import Path

from simulator.config import SIM_CONFIG

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"
CONFIG_ENV_VAR = "CONVEYOR_SIM_CONFIG"

_CONFIG_CACHE = {}


def resolve_config_path(path=None) -> Path:
    """
    Explicit path > $CONVEYOR_SIM_CONFIG > config/config.yaml
    """
    if path:
        return Path(path)

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    return DEFAULT_CONFIG_PATH


def load_config(path=None) -> dict:
    """
    Load YAML config with per-file cache.
    Sections are merged over SIM_CONFIG defaults.
    """

    config_path = resolve_config_path(path)
    key = str(config_path)

    if key in _CONFIG_CACHE:
        return _CONFIG_CACHE[key]

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {config_path}")

    config = merge_defaults(data)

    _CONFIG_CACHE[key] = config
    return config


def merge_defaults(data: dict) -> dict:
    config = copy.deepcopy(SIM_CONFIG)

    for section, values in data.items():
        if values is None:
            continue

        if section in config and not isinstance(values, dict):
            raise ValueError(f"Config section '{section}' must be a mapping")

        config.setdefault(section, {}).update(values)

    return config


def configure_logging(config: dict):
    log_cfg = config.get("logging", {})

    logging.basicConfig(
        level=getattr(logging, str(log_cfg.get("level", "INFO")).upper()),
        format=log_cfg.get("format", SIM_CONFIG["logging"]["format"]),
    )
