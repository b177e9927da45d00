"""Estimators, the OPTICS-OF phases and the model registry."""

from .base_detector import BaseDetector
from .optics_of import (
    OPTICSOF,
    CoreDistanceTable,
    CoreOPTICSOF,
    DensityTable,
    compute_core_distances,
    compute_local_densities,
    compute_outlier_factors,
    optics_of_scores,
)
from .registry import MODEL_REGISTRY, create_model, list_models, register_model

__all__ = [
    "BaseDetector",
    "CoreDistanceTable",
    "CoreOPTICSOF",
    "DensityTable",
    "MODEL_REGISTRY",
    "OPTICSOF",
    "compute_core_distances",
    "compute_local_densities",
    "compute_outlier_factors",
    "create_model",
    "list_models",
    "optics_of_scores",
    "register_model",
]
