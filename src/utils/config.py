"""
Configuration loading.

Settings live in a YAML file (``configs/default.yaml``).  Values from the file
are merged over :data:`DEFAULT_CONFIG`, so a file only needs to name what it
changes.
"""

import copy
import logging
import os
from typing import Any, Dict, Optional

import yaml

from src.utils.errors import ConfigError

DEFAULT_CONFIG: Dict[str, Any] = {
    "sampling": {
        "feature_num": 100,
        "mode": "dense",
        "resize": False,
        "max_extra_iterations": 16,
    },
    "engine": {
        "feature_scale_levels": 1,
        "feature_scale_mul": 0.1,
        "vary_xy_step_with_scale": True,
        "vary_img_bound_with_scale": False,
        "n_octave_layers": 3,
        "contrast_threshold": 0.04,
        "edge_threshold": 10.0,
        "sigma": 1.6,
    },
    "output": {
        "image_prefix": "result",
    },
    "logging": {
        "level": "INFO",
    },
}

SAMPLING_MODES = ("dog", "dense")


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path: Optional[str] = None) -> dict:
    """Load a YAML config file over the built-in defaults.

    Parameters
    ----------
    path : str, optional
        Config file.  When omitted the defaults are returned.

    Raises
    ------
    ConfigError
        If the file is missing, is not a mapping, or holds invalid values.
    """
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if path is None:
        return cfg

    if not os.path.exists(path):
        raise ConfigError(f"config file not found: {path}", {"path": path})
    with open(path, "r") as fh:
        loaded = yaml.safe_load(fh) or {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"config file must hold a mapping: {path}",
                          {"path": path})

    cfg = _merge(cfg, loaded)
    validate_config(cfg)
    return cfg


def validate_config(cfg: dict) -> None:
    for section in DEFAULT_CONFIG:
        if not isinstance(cfg.get(section), dict):
            raise ConfigError(f"config section {section!r} must be a mapping, "
                              f"got {cfg.get(section)!r}")

    sampling = cfg["sampling"]
    feature_num = sampling["feature_num"]
    if isinstance(feature_num, bool) or not isinstance(feature_num, int) \
            or feature_num <= 0:
        raise ConfigError(f"sampling.feature_num must be a positive integer, "
                          f"got {sampling['feature_num']!r}")
    if sampling["mode"] not in SAMPLING_MODES:
        raise ConfigError(f"sampling.mode must be one of {SAMPLING_MODES}, "
                          f"got {sampling['mode']!r}")
    if not isinstance(sampling["max_extra_iterations"], int) or \
            sampling["max_extra_iterations"] < 0:
        raise ConfigError("sampling.max_extra_iterations must be a "
                          "non-negative integer")
    if not isinstance(sampling["resize"], bool):
        raise ConfigError(f"sampling.resize must be true or false, "
                          f"got {sampling['resize']!r}")
    if not isinstance(cfg["output"]["image_prefix"], str):
        raise ConfigError("output.image_prefix must be a string")

    level = cfg["logging"]["level"]
    if not isinstance(logging.getLevelName(str(level).upper()), int):
        raise ConfigError(f"unknown logging level {level!r}")
