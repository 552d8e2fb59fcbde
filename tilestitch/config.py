from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from common.errors import ConfigurationError


DEFAULT_CONFIG_PATH = "config/params.yaml"

DEFAULTS: Dict[str, Any] = {
    "tile_size": 256,
    "max_pixels": 10000 * 10000,
    "user_agent": "tile-stitch/1.0.0",
    "timeout_s": 30.0,
    "subdomain_seed": None,
    "log_level": None,
    "log_format": None,
}

# Accepted YAML value types per key; None is allowed only where the default is None.
VALUE_TYPES: Dict[str, Tuple[type, ...]] = {
    "tile_size": (int,),
    "max_pixels": (int,),
    "user_agent": (str,),
    "timeout_s": (int, float),
    "subdomain_seed": (int, str),
    "log_level": (str,),
    "log_format": (str,),
}


def _check_value(key: str, value: Any, source: Path) -> None:
    if value is None and DEFAULTS[key] is None:
        return
    # YAML booleans are ints to isinstance()
    if isinstance(value, bool) or not isinstance(value, VALUE_TYPES[key]):
        expected = "/".join(t.__name__ for t in VALUE_TYPES[key])
        raise ConfigurationError(f"Config key {key} in {source} must be {expected}, got {value!r}")


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Defaults overlaid with a YAML mapping.

    An explicit `path` must exist; the default path is used only if present.
    Unknown keys, mistyped values and unparsable YAML raise ConfigurationError.
    """
    cfg = dict(DEFAULTS)
    p = Path(path or DEFAULT_CONFIG_PATH)
    if not p.exists():
        if path is not None:
            raise ConfigurationError(f"Config file not found: {path}")
        return cfg
    with p.open("r") as f:
        try:
            loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Can't parse config file {p}: {e}") from e
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Config file {p} must contain a mapping")
    unknown = sorted(set(loaded) - set(DEFAULTS), key=str)
    if unknown:
        raise ConfigurationError(f"Unknown config keys in {p}: {', '.join(map(str, unknown))}")
    for key, value in loaded.items():
        _check_value(key, value, p)
    cfg.update(loaded)
    return cfg
