"""Outlier score containers and normalization metadata."""

from __future__ import annotations

from .result import OutlierResult, OutlierScoreMeta, assemble_result

__all__ = [
    "OutlierResult",
    "OutlierScoreMeta",
    "assemble_result",
]
