# -*- coding: utf-8 -*-
"""
OPTICS-OF (OPTICS Outlier Factor) detector.

OPTICS-OF scores every object by comparing the local reachability density of
its ``min_pts`` nearest neighbors against its own density. The computation
runs in three passes with a hard barrier between them:

1. core distances: k-NN list, core distance (distance to the ``min_pts``-th
   neighbor) and neighborhood size (objects within the core distance);
2. local reachability density from the reachability distances
   ``max(core_distance(n), d(o, n))`` to every neighbor;
3. outlier factor: summed neighbor/own density ratios divided by the
   neighborhood size.

A score of 1.0 means "as dense as its neighbors"; larger values are more
isolated. Duplicated points can make densities infinite and factors NaN; such
values follow IEEE-754 semantics and are returned as they are.

Reference:
    Breunig, M.M., Kriegel, H.-P., Ng, R.T. and Sander, J., 1999.
    OPTICS-OF: Identifying Local Outliers.
    Proc. of the 3rd European Conference on Principles of Knowledge Discovery
    and Data Mining (PKDD), Prague.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Hashable, List, Optional, Sequence, Tuple

import numpy as np
from joblib import Parallel, delayed, effective_n_jobs
from numpy.typing import NDArray

from pyopticsof.config.settings import OPTICSOFConfig
from pyopticsof.errors import InsufficientDataError
from pyopticsof.neighbors.providers import QueryProvider, build_query_provider
from pyopticsof.scoring.result import OutlierResult, assemble_result
from pyopticsof.utils.param_check import check_integer

from .base_detector import BaseDetector
from .registry import register_model

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoreDistanceTable:
    """Phase-1 output, indexed by dataset position."""

    ids: Tuple[Hashable, ...]
    neighbors: NDArray[np.intp]
    neighbor_distances: NDArray[np.float64]
    core_distances: NDArray[np.float64]
    neighborhood_sizes: NDArray[np.int64]

    @property
    def min_pts(self) -> int:
        return int(self.neighbors.shape[1])


@dataclass(frozen=True)
class DensityTable:
    """Phase-2 output: per-neighbor reachability distances and densities."""

    reachability_distances: NDArray[np.float64]
    lrd: NDArray[np.float64]


def _freeze(*arrays: np.ndarray) -> None:
    for arr in arrays:
        arr.setflags(write=False)


def _run_phase(worker: Callable[[int, int], Any], n_objects: int, n_jobs: int) -> List[Any]:
    """Apply `worker(start, stop)` over contiguous position slices.

    Returns only after every slice has been processed. Workers write to
    disjoint slices of the phase's output arrays, so threads need no locking.
    """

    n_workers = min(int(effective_n_jobs(n_jobs)), n_objects)
    if n_workers <= 1:
        return [worker(0, n_objects)]

    bounds = np.linspace(0, n_objects, num=n_workers + 1, dtype=int)
    return Parallel(n_jobs=n_workers, require="sharedmem")(
        delayed(worker)(int(start), int(stop)) for start, stop in zip(bounds[:-1], bounds[1:])
    )


def compute_core_distances(
    provider: QueryProvider,
    min_pts: int,
    *,
    n_jobs: int = 1,
) -> CoreDistanceTable:
    """Phase 1: k-NN lists, core distances and neighborhood sizes."""

    k = check_integer(min_pts, low=1, param_name="min_pts")
    ids = tuple(provider.ids)
    n_objects = len(ids)
    if n_objects < k:
        raise InsufficientDataError(
            f"OPTICS-OF needs at least min_pts={k} objects, got {n_objects}"
        )

    positions = {oid: i for i, oid in enumerate(ids)}
    neighbors = np.empty((n_objects, k), dtype=np.intp)
    neighbor_distances = np.empty((n_objects, k), dtype=np.float64)
    core_distances = np.empty(n_objects, dtype=np.float64)
    neighborhood_sizes = np.empty(n_objects, dtype=np.int64)

    def worker(start: int, stop: int) -> None:
        for p in range(start, stop):
            oid = ids[p]
            knn = list(provider.k_nearest(oid, k))
            if len(knn) < k:
                raise InsufficientDataError(
                    f"k_nearest returned {len(knn)} neighbors for {oid!r}, expected {k}"
                )
            if len(knn) > k:
                raise ValueError(
                    f"k_nearest returned {len(knn)} neighbors for {oid!r}, expected {k}"
                )
            for j, (neighbor_id, dist) in enumerate(knn):
                neighbors[p, j] = positions[neighbor_id]
                neighbor_distances[p, j] = float(dist)

            core = float(np.max(neighbor_distances[p]))
            core_distances[p] = core
            neighborhood_sizes[p] = len(provider.range_query(oid, core))

    _run_phase(worker, n_objects, n_jobs)
    _freeze(neighbors, neighbor_distances, core_distances, neighborhood_sizes)
    return CoreDistanceTable(
        ids=ids,
        neighbors=neighbors,
        neighbor_distances=neighbor_distances,
        core_distances=core_distances,
        neighborhood_sizes=neighborhood_sizes,
    )


def compute_local_densities(
    provider: QueryProvider,
    core: CoreDistanceTable,
    *,
    n_jobs: int = 1,
) -> DensityTable:
    """Phase 2: reachability distances and local reachability densities.

    Reachability distances are summed in neighbor-list order, so the result
    does not depend on `n_jobs`.
    """

    n_objects, k = core.neighbors.shape
    reach = np.empty((n_objects, k), dtype=np.float64)
    lrd = np.empty(n_objects, dtype=np.float64)

    def worker(start: int, stop: int) -> None:
        with np.errstate(divide="ignore", invalid="ignore"):
            for p in range(start, stop):
                oid = core.ids[p]
                total = 0.0
                for j in range(k):
                    q = int(core.neighbors[p, j])
                    dist = float(provider.distance(oid, core.ids[q]))
                    rd = max(float(core.core_distances[q]), dist)
                    reach[p, j] = rd
                    total += rd
                lrd[p] = np.float64(core.neighborhood_sizes[p]) / np.float64(total)

    _run_phase(worker, n_objects, n_jobs)
    _freeze(reach, lrd)
    return DensityTable(reachability_distances=reach, lrd=lrd)


def compute_outlier_factors(
    core: CoreDistanceTable,
    density: DensityTable,
    *,
    n_jobs: int = 1,
) -> Tuple[NDArray[np.float64], float, float]:
    """Phase 3: outlier factors plus the observed (min, max).

    The ratio sum runs over the ``min_pts`` neighbors but is divided by the
    neighborhood size, which can be larger when distances tie.
    NaN factors are skipped by the extrema; with no comparable factor the
    extrema stay at ``(+inf, -inf)``.
    """

    n_objects = core.neighbors.shape[0]
    factors = np.empty(n_objects, dtype=np.float64)

    def worker(start: int, stop: int) -> Tuple[float, float]:
        lo, hi = np.inf, -np.inf
        with np.errstate(divide="ignore", invalid="ignore"):
            for p in range(start, stop):
                own = density.lrd[p]
                total = np.float64(0.0)
                for q in core.neighbors[p]:
                    total += density.lrd[q] / own
                of = float(total / np.float64(core.neighborhood_sizes[p]))
                factors[p] = of
                if of < lo:
                    lo = of
                if of > hi:
                    hi = of
        return lo, hi

    extrema = _run_phase(worker, n_objects, n_jobs)
    _freeze(factors)
    observed_min = min((lo for lo, _ in extrema), default=np.inf)
    observed_max = max((hi for _, hi in extrema), default=-np.inf)
    return factors, float(observed_min), float(observed_max)


class OPTICSOF:
    """Runs the three OPTICS-OF phases against a query provider.

    Parameters
    ----------
    config : OPTICSOFConfig
        Validated run settings; only ``min_pts`` and ``n_jobs`` are used here.

    Attributes
    ----------
    core_ : CoreDistanceTable
        Phase-1 tables of the last successful run.
    density_ : DensityTable
        Phase-2 tables (reachability distances, lrd) of the last successful run.
    """

    def __init__(self, config: OPTICSOFConfig) -> None:
        if not isinstance(config, OPTICSOFConfig):
            raise TypeError(f"config must be an OPTICSOFConfig, got {type(config).__name__}")
        self.config = config
        self.core_: Optional[CoreDistanceTable] = None
        self.density_: Optional[DensityTable] = None

    def run(self, provider: QueryProvider) -> OutlierResult:
        min_pts = self.config.min_pts
        n_jobs = self.config.n_jobs
        logger.info("Running OPTICS-OF on %d objects (min_pts=%d)", len(provider.ids), min_pts)

        core = compute_core_distances(provider, min_pts, n_jobs=n_jobs)
        logger.debug(
            "Core distances done: mean core distance %.6g, max neighborhood %d",
            float(np.mean(core.core_distances)),
            int(np.max(core.neighborhood_sizes)),
        )

        density = compute_local_densities(provider, core, n_jobs=n_jobs)
        logger.debug("Local densities done: %d infinite", int(np.isinf(density.lrd).sum()))

        factors, observed_min, observed_max = compute_outlier_factors(core, density, n_jobs=n_jobs)
        n_bad = int((~np.isfinite(factors)).sum())
        if n_bad:
            logger.info("%d objects have non-finite outlier factors (duplicate points?)", n_bad)

        self.core_ = core
        self.density_ = density
        logger.info("OPTICS-OF complete. Score range: [%.4g, %.4g]", observed_min, observed_max)
        return assemble_result(core.ids, factors, observed_min, observed_max)


def optics_of_scores(
    X: Any,
    min_pts: int,
    *,
    ids: Optional[Sequence[Hashable]] = None,
    backend: str = "brute",
    metric: str = "euclidean",
    n_jobs: int = 1,
) -> OutlierResult:
    """Score a feature matrix in one call.

    Examples
    --------
    >>> result = optics_of_scores(X, min_pts=10)
    >>> result.top_n(5)
    """

    config = OPTICSOFConfig(min_pts=min_pts, backend=backend, metric=metric, n_jobs=n_jobs)
    provider = build_query_provider(
        X,
        backend=config.backend,
        ids=ids,
        metric=config.metric,
        n_jobs=config.n_jobs,
    )
    return OPTICSOF(config).run(provider)


@register_model(
    "optics_of",
    tags=("classical", "neighbors", "density", "optics"),
    metadata={
        "description": "OPTICS-OF - OPTICS-based local outlier factor",
        "paper": "Breunig et al., PKDD 1999",
        "year": 1999,
        "density_based": True,
        "transductive": True,
    },
)
class CoreOPTICSOF(BaseDetector):
    """
    Estimator wrapper around `OPTICSOF` following the detector contract.

    OPTICS-OF is transductive: scores are defined relative to the fitted
    dataset only. `decision_function` therefore accepts the training data and
    rejects anything else; refit on the combined data to score new objects.

    Parameters
    ----------
    min_pts : int, default=10
        Neighborhood size, must be > 1.
    contamination : float, default=0.1
        Expected proportion of outliers (0 < contamination <= 0.5).
    backend : {"brute", "sklearn", "faiss"}, default="brute"
        Query provider used for the neighbor searches.
    metric : str, default="euclidean"
        Distance metric understood by the backend.
    n_jobs : int, default=1
        Worker threads per phase.

    Attributes
    ----------
    decision_scores_ : ndarray of shape (n_samples,)
        Outlier factors of the training data.
    threshold_ : float
        Threshold for binary classification.
    labels_ : ndarray of shape (n_samples,)
        Binary labels (0: normal, 1: outlier).
    result_ : OutlierResult
        Scores keyed by object id, with score metadata.
    """

    def __init__(
        self,
        *,
        min_pts: int = 10,
        contamination: float = 0.1,
        backend: str = "brute",
        metric: str = "euclidean",
        n_jobs: int = 1,
    ) -> None:
        self.config = OPTICSOFConfig(
            min_pts=min_pts,
            backend=backend,
            metric=metric,
            n_jobs=n_jobs,
            contamination=contamination,
        )
        super().__init__(contamination=self.config.contamination)
        self._X_train: Optional[NDArray[np.float64]] = None

    @classmethod
    def from_config(cls, config: OPTICSOFConfig) -> "CoreOPTICSOF":
        return cls(**config.to_dict())

    @property
    def min_pts(self) -> int:
        return self.config.min_pts

    def fit(self, X, y=None, ids: Optional[Sequence[Hashable]] = None):  # noqa: ANN001, ANN201
        provider = build_query_provider(
            X,
            backend=self.config.backend,
            ids=ids,
            metric=self.config.metric,
            n_jobs=self.config.n_jobs,
        )
        algorithm = OPTICSOF(self.config)
        self.result_ = algorithm.run(provider)
        self.core_ = algorithm.core_
        self.density_ = algorithm.density_
        self._X_train = np.asarray(X, dtype=np.float64)
        self.decision_scores_ = self.result_.as_array()
        self._process_decision_scores()
        return self

    def decision_function(self, X):  # noqa: ANN001, ANN201
        if self._X_train is None:
            raise RuntimeError("Detector must be fitted before calling decision_function")

        X = np.asarray(X, dtype=np.float64)
        if X.shape != self._X_train.shape or not np.array_equal(X, self._X_train):
            raise ValueError(
                "OPTICS-OF scores are only defined for the fitted dataset; "
                "refit on the combined data to score new objects"
            )
        return np.array(self.decision_scores_, dtype=np.float64)
