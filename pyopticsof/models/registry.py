"""
Model registry for pyopticsof estimators.

Estimators register a constructor under a stable name so that CLIs and
config files can build them from plain strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional


@dataclass
class ModelEntry:
    name: str
    constructor: Callable[..., Any]
    tags: tuple[str, ...]
    metadata: Dict[str, Any]


class ModelRegistry:
    """Registry for storing model constructors with metadata."""

    def __init__(self) -> None:
        self._registry: Dict[str, ModelEntry] = {}

    # ------------------------------------------------------------------
    def register(
        self,
        name: str,
        constructor: Callable[..., Any],
        *,
        tags: Optional[Iterable[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        overwrite: bool = False,
    ) -> None:
        if not overwrite and name in self._registry:
            raise KeyError(
                f"Model {name!r} already exists. Set overwrite=True to replace it."
            )
        self._registry[name] = ModelEntry(
            name=name,
            constructor=constructor,
            tags=tuple(tags or ()),
            metadata=dict(metadata or {}),
        )

    def get(self, name: str) -> Callable[..., Any]:
        return self.info(name).constructor

    def available(self, *, tags: Optional[Iterable[str]] = None) -> List[str]:
        if tags is None:
            return sorted(self._registry)
        tag_set = set(tags)
        return sorted(
            entry.name for entry in self._registry.values() if tag_set.issubset(entry.tags)
        )

    def info(self, name: str) -> ModelEntry:
        try:
            return self._registry[name]
        except KeyError as exc:
            available = ", ".join(sorted(self._registry)) or "<empty>"
            raise KeyError(f"Model {name!r} not found. Available models: {available}") from exc


MODEL_REGISTRY = ModelRegistry()


def register_model(
    name: str,
    *,
    tags: Optional[Iterable[str]] = None,
    metadata: Optional[Dict[str, Any]] = None,
    overwrite: bool = False,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator for registering models at import time.

    Examples
    --------
    >>> @register_model("my_model", tags=["density"])
    ... class MyModel:
    ...     pass
    """

    def decorator(constructor: Callable[..., Any]) -> Callable[..., Any]:
        MODEL_REGISTRY.register(
            name,
            constructor,
            tags=tags,
            metadata=metadata,
            overwrite=overwrite,
        )
        return constructor

    return decorator


def create_model(name: str, *args, **kwargs):
    """
    Create a model instance from its registered name.

    Examples
    --------
    >>> model = create_model("optics_of", min_pts=10)
    """
    constructor = MODEL_REGISTRY.get(name)
    return constructor(*args, **kwargs)


def list_models(*, tags: Optional[Iterable[str]] = None) -> List[str]:
    """List available model names, optionally filtered by tags (all must match)."""
    return MODEL_REGISTRY.available(tags=tags)
