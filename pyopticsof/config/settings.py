from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping

from pyopticsof.errors import ConfigurationError
from pyopticsof.utils.param_check import check_integer, check_parameter

BACKENDS = ("brute", "sklearn", "faiss")


@dataclass(frozen=True)
class OPTICSOFConfig:
    """Validated settings for one OPTICS-OF run.

    Validation happens once, at construction; a constructed config is always
    usable.

    Parameters
    ----------
    min_pts:
        Neighborhood size parameter (the k of the k-NN queries), must be > 1.
    backend:
        Query provider used when scoring raw feature matrices.
    metric:
        Distance metric name understood by the chosen backend.
    n_jobs:
        Worker threads per phase. 1 runs sequentially, -1 uses all cores.
    contamination:
        Expected outlier share in (0, 0.5], only used for `labels_`.
    """

    min_pts: int
    backend: str = "brute"
    metric: str = "euclidean"
    n_jobs: int = 1
    contamination: float = 0.1

    def __post_init__(self) -> None:
        check_integer(
            self.min_pts,
            low=1,
            include_left=False,
            param_name="min_pts",
            error_cls=ConfigurationError,
        )
        object.__setattr__(self, "min_pts", int(self.min_pts))

        backend = str(self.backend).lower()
        if backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown backend: {self.backend!r}. Choose from: {', '.join(BACKENDS)}"
            )
        object.__setattr__(self, "backend", backend)

        if isinstance(self.metric, str):
            object.__setattr__(self, "metric", self.metric.lower())
        if backend == "faiss" and self.metric not in ("euclidean", "l2"):
            raise ConfigurationError(
                f"faiss backend only supports the euclidean metric, got {self.metric!r}"
            )

        n_jobs = check_integer(self.n_jobs, param_name="n_jobs", error_cls=ConfigurationError)
        if n_jobs == 0:
            raise ConfigurationError("n_jobs must be a positive integer or -1, got 0")
        object.__setattr__(self, "n_jobs", n_jobs)

        try:
            check_parameter(
                self.contamination,
                low=0.0,
                high=0.5,
                include_left=False,
                param_name="contamination",
                error_cls=ConfigurationError,
            )
        except TypeError as exc:
            raise ConfigurationError(str(exc)) from exc
        object.__setattr__(self, "contamination", float(self.contamination))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "OPTICSOFConfig":
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"config must be a dict/object, got {type(raw).__name__}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown config keys: {unknown}. Allowed keys: {', '.join(sorted(known))}"
            )
        if "min_pts" not in raw:
            raise ConfigurationError("min_pts is required")
        return cls(**dict(raw))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
