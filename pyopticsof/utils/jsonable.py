from __future__ import annotations

import math
from pathlib import Path
from typing import Any

import numpy as np


def _float_to_jsonable(value: float) -> Any:
    if math.isnan(value):
        return None
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return value


def to_jsonable(value: Any) -> Any:
    """Convert common scientific/python objects into strict-JSON values.

    - `pathlib.Path` → `str`
    - `numpy` scalars → builtin Python scalars via `.item()`
    - `numpy.ndarray` → nested Python lists via `.tolist()`
    - non-finite floats → `None` (NaN) or the strings ``"inf"`` / ``"-inf"``
    - Recurses through `dict` / `list` / `tuple`

    Outlier factors can legitimately be non-finite, and `json.dumps` would
    otherwise emit the non-standard tokens ``NaN`` / ``Infinity``.
    """

    if isinstance(value, Path):
        return str(value)

    if isinstance(value, np.generic):
        value = value.item()
    elif isinstance(value, np.ndarray):
        return to_jsonable(value.tolist())

    if isinstance(value, float):
        return _float_to_jsonable(value)
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value
