# -*- coding: utf-8 -*-
"""Detector base contract for pyopticsof estimators.

This module implements the small PyOD-style detector contract the estimator
wrappers rely on:

- contamination-based thresholding (`threshold_`, `labels_`)
- binary predictions (`predict` returns {0,1})

Notes
-----
The design is inspired by PyOD's `BaseDetector` contract.
PyOD is BSD 2-Clause licensed.
"""

from __future__ import annotations

import math

import numpy as np

from pyopticsof.errors import ConfigurationError
from pyopticsof.utils.param_check import check_parameter


class BaseDetector:
    """Base class for outlier detectors.

    Parameters
    ----------
    contamination:
        Expected proportion of outliers in (0, 0.5]. Used to derive `threshold_`
        from training scores.
    """

    def __init__(self, contamination: float = 0.1) -> None:
        check_parameter(
            contamination,
            low=0.0,
            high=0.5,
            include_left=False,
            param_name="contamination",
            error_cls=ConfigurationError,
        )
        self.contamination = float(contamination)

    # ---------------------------------------------------------------------
    # Subclass API
    def fit(self, X, y=None):  # noqa: ANN001, ANN201 - sklearn/pyod-like signature
        raise NotImplementedError

    def decision_function(self, X):  # noqa: ANN001, ANN201 - sklearn/pyod-like signature
        raise NotImplementedError

    # ---------------------------------------------------------------------
    # Shared helpers
    def _process_decision_scores(self) -> "BaseDetector":
        """Compute threshold and training labels from `decision_scores_`.

        The percentile is taken over finite scores only, so `+inf` scores are
        labelled as outliers and NaN scores as inliers. Without any finite
        score the threshold is `+inf` and every label is 0.
        """

        if not hasattr(self, "decision_scores_"):
            raise AttributeError("decision_scores_ missing; set it before calling _process_decision_scores().")

        scores = np.asarray(self.decision_scores_, dtype=np.float64)
        if scores.ndim != 1:
            scores = scores.reshape(-1)
        self.decision_scores_ = scores

        finite = scores[np.isfinite(scores)]
        if finite.size:
            threshold = float(np.percentile(finite, 100.0 * (1.0 - float(self.contamination))))
        else:
            threshold = math.inf
        labels = (scores > threshold).astype(int).ravel()

        self.threshold_ = threshold
        self.labels_ = labels
        return self

    # ---------------------------------------------------------------------
    def predict(self, X):  # noqa: ANN001, ANN201
        """Predict binary outlier labels.

        Returns 0 for inliers and 1 for outliers.
        """

        if not hasattr(self, "threshold_"):
            raise RuntimeError("Model must be fitted before calling predict().")

        scores = np.asarray(self.decision_function(X), dtype=np.float64)
        if scores.ndim != 1:
            scores = scores.reshape(-1)
        return (scores > float(self.threshold_)).astype(int).ravel()

    def fit_predict(self, X, y=None):  # noqa: ANN001, ANN201
        self.fit(X, y=y)
        return np.asarray(self.labels_, dtype=int)
