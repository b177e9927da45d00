"""Query providers consumed by the OPTICS-OF phases.

The algorithm only talks to the `QueryProvider` protocol. The concrete
providers below wrap a feature matrix and delegate the actual search to
scipy (brute force), scikit-learn (tree indexes) or faiss (flat L2 index).

Conventions shared by every provider:

- ``k_nearest(oid, k)`` includes ``oid`` itself (distance 0) and is sorted by
  non-decreasing distance; ties are ordered by dataset position.
- ``range_query(oid, radius)`` is inclusive (``distance <= radius``).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Hashable, List, Optional, Protocol, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.distance import cdist
from sklearn.utils import check_array

from pyopticsof.errors import InsufficientDataError
from pyopticsof.utils.optional_deps import optional_import, require
from pyopticsof.utils.param_check import check_integer

logger = logging.getLogger(__name__)

Neighbor = Tuple[Hashable, float]
Metric = Union[str, Callable[..., float]]

# sklearn metric names that scipy spells differently.
_SCIPY_METRIC_ALIASES = {
    "l1": "cityblock",
    "manhattan": "cityblock",
    "l2": "euclidean",
}


class QueryProvider(Protocol):
    @property
    def ids(self) -> Sequence[Hashable]: ...

    def distance(self, a: Hashable, b: Hashable) -> float: ...

    def k_nearest(self, oid: Hashable, k: int) -> List[Neighbor]: ...

    def range_query(self, oid: Hashable, radius: float) -> List[Hashable]: ...


def _scipy_metric(metric: Metric) -> Metric:
    if callable(metric):
        return metric
    name = str(metric).lower()
    return _SCIPY_METRIC_ALIASES.get(name, name)


def _inclusive_radius(radius: float) -> float:
    # Tree/index backends recompute distances and may land one ulp above the
    # kNN distance that defined the radius.
    return float(np.nextafter(float(radius), np.inf))


class _ArrayQueryProvider:
    """Shared bookkeeping for providers backed by an in-memory feature matrix."""

    def __init__(
        self,
        X: Any,
        ids: Optional[Sequence[Hashable]] = None,
        metric: Metric = "euclidean",
    ) -> None:
        self._X: NDArray[np.float64] = check_array(X, ensure_2d=True, dtype=np.float64)
        n_samples = int(self._X.shape[0])

        if ids is None:
            ids = list(range(n_samples))
        ids = list(ids)
        if len(ids) != n_samples:
            raise ValueError(f"Got {len(ids)} ids for {n_samples} rows")
        if len(set(ids)) != n_samples:
            raise ValueError("ids must be unique")

        self._ids: Tuple[Hashable, ...] = tuple(ids)
        self._positions = {oid: i for i, oid in enumerate(self._ids)}
        self.metric = metric
        self._scipy_metric = _scipy_metric(metric)

    @property
    def ids(self) -> Tuple[Hashable, ...]:
        return self._ids

    @property
    def n_samples(self) -> int:
        return len(self._ids)

    def _position(self, oid: Hashable) -> int:
        try:
            return self._positions[oid]
        except KeyError as exc:
            raise KeyError(f"Unknown object id: {oid!r}") from exc

    def _check_k(self, k: int) -> int:
        k = check_integer(k, low=1, param_name="k")
        if k > self.n_samples:
            raise InsufficientDataError(
                f"Requested {k} nearest neighbors but the dataset holds {self.n_samples} objects"
            )
        return k

    def distance(self, a: Hashable, b: Hashable) -> float:
        xa = self._X[self._position(a)][np.newaxis, :]
        xb = self._X[self._position(b)][np.newaxis, :]
        return float(cdist(xa, xb, metric=self._scipy_metric)[0, 0])

    def _neighbors_from(self, distances: NDArray, indices: NDArray) -> List[Neighbor]:
        order = np.lexsort((indices, distances))
        return [(self._ids[int(indices[j])], float(distances[j])) for j in order]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(n_samples={self.n_samples}, metric={self.metric!r})"


class BruteForceQueryProvider(_ArrayQueryProvider):
    """Exact provider backed by a precomputed full distance matrix.

    Memory is quadratic in the dataset size; suited for small and medium
    datasets and for arbitrary scipy metrics (or a Python callable).
    """

    def __init__(
        self,
        X: Any,
        ids: Optional[Sequence[Hashable]] = None,
        metric: Metric = "euclidean",
    ) -> None:
        super().__init__(X, ids=ids, metric=metric)
        self._dist_matrix = cdist(self._X, self._X, metric=self._scipy_metric).astype(np.float64)
        self._dist_matrix.setflags(write=False)
        logger.debug("Built %dx%d distance matrix", self.n_samples, self.n_samples)

    def distance(self, a: Hashable, b: Hashable) -> float:
        return float(self._dist_matrix[self._position(a), self._position(b)])

    def k_nearest(self, oid: Hashable, k: int) -> List[Neighbor]:
        k = self._check_k(k)
        row = self._dist_matrix[self._position(oid)]
        order = np.argsort(row, kind="stable")[:k]
        return [(self._ids[int(j)], float(row[j])) for j in order]

    def range_query(self, oid: Hashable, radius: float) -> List[Hashable]:
        row = self._dist_matrix[self._position(oid)]
        return [self._ids[int(j)] for j in np.flatnonzero(row <= float(radius))]


class SklearnQueryProvider(_ArrayQueryProvider):
    """Exact provider backed by scikit-learn's `NearestNeighbors` (kd/ball tree)."""

    def __init__(
        self,
        X: Any,
        ids: Optional[Sequence[Hashable]] = None,
        metric: Metric = "euclidean",
        algorithm: str = "auto",
        leaf_size: int = 30,
        n_jobs: Optional[int] = None,
    ) -> None:
        super().__init__(X, ids=ids, metric=metric)
        sklearn_neighbors, error = optional_import("sklearn.neighbors")
        if sklearn_neighbors is None:
            raise ImportError(
                "scikit-learn is required for the sklearn query provider.\n"
                "Install it via:\n  pip install 'scikit-learn'\n"
                f"Original error: {error}"
            ) from error

        self._nn = sklearn_neighbors.NearestNeighbors(  # type: ignore[attr-defined]
            algorithm=algorithm,
            leaf_size=int(leaf_size),
            metric=metric,
            n_jobs=n_jobs,
        )
        self._nn.fit(self._X)

    def k_nearest(self, oid: Hashable, k: int) -> List[Neighbor]:
        k = self._check_k(k)
        query = self._X[self._position(oid)][np.newaxis, :]
        distances, indices = self._nn.kneighbors(query, n_neighbors=k, return_distance=True)
        return self._neighbors_from(distances[0], indices[0])

    def range_query(self, oid: Hashable, radius: float) -> List[Hashable]:
        query = self._X[self._position(oid)][np.newaxis, :]
        indices = self._nn.radius_neighbors(
            query,
            radius=_inclusive_radius(radius),
            return_distance=False,
        )[0]
        return [self._ids[int(j)] for j in np.sort(indices)]


class FaissQueryProvider(_ArrayQueryProvider):
    """Euclidean provider backed by a faiss `IndexFlatL2`.

    Search runs in float32, so distances carry float32 rounding; `distance`
    itself is computed in float64.
    """

    def __init__(self, X: Any, ids: Optional[Sequence[Hashable]] = None) -> None:
        super().__init__(X, ids=ids, metric="euclidean")
        self._faiss = require("faiss", extra="faiss", purpose="FAISS query provider")
        self._X32 = np.ascontiguousarray(self._X, dtype=np.float32)
        self._index = self._faiss.IndexFlatL2(int(self._X32.shape[1]))
        self._index.add(self._X32)

    def k_nearest(self, oid: Hashable, k: int) -> List[Neighbor]:
        k = self._check_k(k)
        p = self._position(oid)
        distances_sq, indices = self._index.search(self._X32[p : p + 1], k)
        distances = np.sqrt(np.maximum(distances_sq[0].astype(np.float64), 0.0))
        return self._neighbors_from(distances, indices[0])

    def range_query(self, oid: Hashable, radius: float) -> List[Hashable]:
        p = self._position(oid)
        radius_sq = np.float32(float(radius) ** 2)
        # faiss keeps strictly-closer results; widen by one float32 ulp.
        radius_sq = float(np.nextafter(radius_sq, np.float32(np.inf)))
        lims, _distances, indices = self._index.range_search(self._X32[p : p + 1], radius_sq)
        found = indices[int(lims[0]) : int(lims[1])]
        return [self._ids[int(j)] for j in np.sort(found)]


def build_query_provider(
    X: Any,
    *,
    backend: str = "brute",
    ids: Optional[Sequence[Hashable]] = None,
    metric: Metric = "euclidean",
    n_jobs: Optional[int] = None,
) -> QueryProvider:
    backend_lower = str(backend).lower()
    if backend_lower in ("brute", "brute_force", "scipy"):
        return BruteForceQueryProvider(X, ids=ids, metric=metric)
    if backend_lower in ("sklearn", "scikit", "scikit-learn"):
        return SklearnQueryProvider(X, ids=ids, metric=metric, n_jobs=n_jobs)
    if backend_lower in ("faiss",):
        if not isinstance(metric, str) or metric.lower() not in ("euclidean", "l2"):
            raise ValueError(f"faiss backend only supports the euclidean metric, got {metric!r}")
        return FaissQueryProvider(X, ids=ids)
    raise ValueError(f"Unknown query backend: {backend}. Choose from: brute, sklearn, faiss")
