from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from pyopticsof.config.settings import OPTICSOFConfig
from pyopticsof.errors import ConfigurationError

SECTION_NAME = "optics_of"


def load_config(path: str | Path) -> dict[str, Any]:
    """Load a config file into a Python dict.

    Supported formats:
    - JSON (.json) always
    - YAML (.yml/.yaml) only when PyYAML is installed
    """

    config_path = Path(path)
    suffix = str(config_path.suffix).lower()

    if suffix == ".json":
        with config_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    elif suffix in (".yml", ".yaml"):
        try:
            import yaml  # type: ignore[import-not-found]
        except Exception as exc:  # noqa: BLE001 - dependency boundary
            raise ImportError(
                "YAML config files require PyYAML.\n"
                "Install it via:\n"
                "  pip install 'pyopticsof[yaml]'"
            ) from exc

        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    else:
        raise ConfigurationError(
            f"Unsupported config extension: {suffix!r} for {str(config_path)!r}. "
            "Supported: .json, .yml, .yaml."
        )

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigurationError(
            "Config must be an object/dict at the top level, "
            f"got {type(data).__name__} from {str(config_path)!r}."
        )

    return dict(data)


def load_optics_of_config(
    path: str | Path,
    *,
    overrides: Mapping[str, Any] | None = None,
) -> OPTICSOFConfig:
    """Build a validated `OPTICSOFConfig` from a config file.

    The algorithm settings may sit at the top level or under an
    ``optics_of`` section. `overrides` (e.g. explicit CLI flags) win over the
    file; `None` values in `overrides` are ignored.
    """

    raw = load_config(path)
    section = raw.get(SECTION_NAME, raw)
    if not isinstance(section, Mapping):
        raise ConfigurationError(
            f"{SECTION_NAME!r} must be a dict/object, got {type(section).__name__}"
        )

    merged = dict(section)
    for key, value in dict(overrides or {}).items():
        if value is not None:
            merged[key] = value
    return OPTICSOFConfig.from_dict(merged)
