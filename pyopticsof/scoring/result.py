"""Containers for OPTICS-OF scores.

`OutlierResult` is a read-only mapping ``object id -> outlier factor``
carrying an `OutlierScoreMeta` record. The meta record describes a *quotient*
score: values are interpreted relative to the baseline 1.0 ("as dense as its
neighbors") rather than as probabilities.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, Hashable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray


def _usable(value: float) -> bool:
    return not (math.isnan(value) or math.isinf(value))


@dataclass(frozen=True)
class OutlierScoreMeta:
    observed_min: float
    observed_max: float
    baseline: float = 1.0
    theoretical_min: float = 0.0
    theoretical_max: float = math.inf

    def normalize_score(self, value: float) -> float:
        """Shift a raw score by the baseline, scaling it when a finite maximum exists.

        Values at or below the baseline map to 0. Above it, scores are scaled
        by the distance from the baseline to the (finite) theoretical or
        observed maximum, giving ``[0, 1]`` for observed scores. Without a
        usable maximum (e.g. `observed_max` is `+inf`) only the baseline shift
        is applied and the result is unbounded.
        """

        value = float(value)
        if _usable(self.baseline):
            center = self.baseline
        elif _usable(self.theoretical_min):
            center = self.theoretical_min
        elif _usable(self.observed_min):
            center = self.observed_min
        else:
            center = 0.0

        if value < center:
            return 0.0

        upper = math.nan
        if _usable(self.theoretical_max):
            upper = self.theoretical_max
        elif _usable(self.observed_max):
            upper = self.observed_max

        if _usable(upper) and upper > center:
            return (value - center) / (upper - center)
        return value - center

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


class OutlierResult(Mapping):
    """Read-only mapping of object ids to outlier factors.

    Iteration follows the dataset order the scores were assembled in.
    """

    name = "OPTICS Outlier Scores"
    short_name = "optics-outlier"

    def __init__(self, ids: Sequence[Hashable], scores: NDArray[np.float64], meta: OutlierScoreMeta) -> None:
        scores = np.array(scores, dtype=np.float64).reshape(-1)
        if len(ids) != scores.shape[0]:
            raise ValueError(f"Got {len(ids)} ids for {scores.shape[0]} scores")
        scores.setflags(write=False)

        self._ids: Tuple[Hashable, ...] = tuple(ids)
        self._scores = scores
        self._positions = {oid: i for i, oid in enumerate(self._ids)}
        self.meta = meta

    def __getitem__(self, oid: Hashable) -> float:
        return float(self._scores[self._positions[oid]])

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return (
            f"OutlierResult(n={len(self)}, observed_min={self.meta.observed_min!r}, "
            f"observed_max={self.meta.observed_max!r})"
        )

    @property
    def ids(self) -> Tuple[Hashable, ...]:
        return self._ids

    def as_array(self, ids: Optional[Sequence[Hashable]] = None) -> NDArray[np.float64]:
        """Scores as a float64 array, in dataset order or in the order of `ids`."""

        if ids is None:
            return self._scores.copy()
        return np.asarray([self[oid] for oid in ids], dtype=np.float64)

    def normalized(self) -> NDArray[np.float64]:
        return np.asarray([self.meta.normalize_score(s) for s in self._scores], dtype=np.float64)

    def ranking(self) -> List[Hashable]:
        """Ids ordered from most to least outlying.

        NaN scores sort last; ties keep dataset order.
        """

        def key(i: int) -> Tuple[bool, float, int]:
            score = float(self._scores[i])
            if math.isnan(score):
                return (True, 0.0, i)
            return (False, -score, i)

        return [self._ids[i] for i in sorted(range(len(self._ids)), key=key)]

    def top_n(self, n: int) -> List[Tuple[Hashable, float]]:
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        return [(oid, self[oid]) for oid in self.ranking()[:n]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "meta": self.meta.to_dict(),
            "scores": [
                {"id": oid, "score": float(s)} for oid, s in zip(self._ids, self._scores)
            ],
        }


def assemble_result(
    ids: Sequence[Hashable],
    factors: NDArray[np.float64],
    observed_min: float,
    observed_max: float,
) -> OutlierResult:
    """Package the final outlier factors with their score metadata."""

    meta = OutlierScoreMeta(observed_min=float(observed_min), observed_max=float(observed_max))
    return OutlierResult(ids, factors, meta)
