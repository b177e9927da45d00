"""Configuration loading and validation."""

from __future__ import annotations

from .io import load_config, load_optics_of_config
from .settings import BACKENDS, OPTICSOFConfig

__all__ = [
    "BACKENDS",
    "OPTICSOFConfig",
    "load_config",
    "load_optics_of_config",
]
