"""
Configuration loading for the biome engine.

Handles loading biome, voxel and climate settings from config.yaml files.
"""

import hashlib
import struct
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

BIOME_DEFAULTS = {
    "profile_dir": "data/biome_profiles",
    "strict": False,
    "seed": 0,
}

CLIMATE_DEFAULTS = {
    "surface_level": 64,
    "temperature_scale": 0.002,
    "moisture_scale": 0.003,
}

TRUE_STRINGS = {"true", "yes", "on", "1"}
FALSE_STRINGS = {"false", "no", "off", "0"}


def _stable_hash(seed_str) -> int:
    """Stable seed hashing so string seeds give the same world on every run."""
    if isinstance(seed_str, int) and not isinstance(seed_str, bool):
        return seed_str
    digest = hashlib.md5(str(seed_str).encode()).digest()
    return struct.unpack(">I", digest[:4])[0] & 0x7FFFFFFF


def _as_bool(value, key: str) -> bool:
    """Read a flag that may have been written as a quoted string in YAML."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
    raise ValueError(f"Config value '{key}' must be true or false, got {value!r}")


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load full configuration from config.yaml.

    Args:
        config_path: Path to config.yaml file

    Returns:
        Dictionary with full configuration (empty if the file is empty)

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    if config_path is None:
        config_path = Path("config.yaml")
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f)

    return config or {}


def biome_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract the ``biomes`` section with defaults applied.

    The seed is converted to a numeric hash and ``profile_dir`` to a Path.
    ``strict`` accepts a YAML boolean or one of the strings true/false,
    yes/no, on/off, 1/0; anything else raises ValueError.
    """
    settings = {**BIOME_DEFAULTS, **(config.get("biomes") or {})}
    settings["seed"] = _stable_hash(settings["seed"])
    settings["profile_dir"] = Path(settings["profile_dir"])
    settings["strict"] = _as_bool(settings["strict"], "biomes.strict")
    return settings


def climate_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    """Extract the ``climate`` section with defaults applied."""
    return {**CLIMATE_DEFAULTS, **(config.get("climate") or {})}


def load_biome_config(config_path: Path = Path("config.yaml")) -> Dict[str, Any]:
    """
    Load the biome section of config.yaml.

    Args:
        config_path: Path to config.yaml file (defaults to "config.yaml" in current directory)

    Returns:
        Dictionary with processed biome configuration (seed is converted to numeric hash)

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    return biome_settings(load_config(config_path))
