"""Query providers: distance, k-nearest-neighbor and range queries over a dataset."""

from __future__ import annotations

from .providers import (
    BruteForceQueryProvider,
    FaissQueryProvider,
    QueryProvider,
    SklearnQueryProvider,
    build_query_provider,
)

__all__ = [
    "BruteForceQueryProvider",
    "FaissQueryProvider",
    "QueryProvider",
    "SklearnQueryProvider",
    "build_query_provider",
]
