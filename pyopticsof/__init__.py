"""pyopticsof - OPTICS-OF local outlier scoring.

Keep top-level imports lightweight: the scientific stack (scipy, sklearn,
joblib) is only loaded when an export is first used, so `import pyopticsof`
and `pyopticsof.cli --help` stay fast.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__version__ = "0.1.0"

__all__ = [
    # Modules
    "config",
    "models",
    "neighbors",
    "reporting",
    "scoring",
    "utils",
    # Algorithm
    "OPTICSOF",
    "CoreOPTICSOF",
    "optics_of_scores",
    "OPTICSOFConfig",
    "OutlierResult",
    "OutlierScoreMeta",
    "build_query_provider",
    # Errors
    "ConfigurationError",
    "InsufficientDataError",
]


_LAZY_SUBMODULES = {
    "config",
    "models",
    "neighbors",
    "reporting",
    "scoring",
    "utils",
}

_LAZY_EXPORTS = {
    "OPTICSOF": ("models.optics_of", "OPTICSOF"),
    "CoreOPTICSOF": ("models.optics_of", "CoreOPTICSOF"),
    "optics_of_scores": ("models.optics_of", "optics_of_scores"),
    "OPTICSOFConfig": ("config.settings", "OPTICSOFConfig"),
    "OutlierResult": ("scoring.result", "OutlierResult"),
    "OutlierScoreMeta": ("scoring.result", "OutlierScoreMeta"),
    "build_query_provider": ("neighbors.providers", "build_query_provider"),
    "ConfigurationError": ("errors", "ConfigurationError"),
    "InsufficientDataError": ("errors", "InsufficientDataError"),
}


def __getattr__(name: str) -> Any:  # pragma: no cover - thin delegation
    if name in _LAZY_SUBMODULES:
        module = import_module(f"{__name__}.{name}")
        globals()[name] = module
        return module

    target = _LAZY_EXPORTS.get(name)
    if target is not None:
        module_name, attr = target
        module = import_module(f"{__name__}.{module_name}")
        value = getattr(module, attr)
        globals()[name] = value
        return value

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:  # pragma: no cover - tooling convenience
    return sorted(set(globals()) | set(__all__))
