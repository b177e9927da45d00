"""Small parameter validation helpers.

We keep these utilities minimal (no extra deps) and stable because they are
used by the configuration layer and every query provider.
"""

from __future__ import annotations

from numbers import Integral, Number
from typing import Type


def check_parameter(
    param: Number,
    low: Number | None = None,
    high: Number | None = None,
    *,
    param_name: str = "parameter",
    include_left: bool = True,
    include_right: bool = True,
    error_cls: Type[ValueError] = ValueError,
) -> None:
    """Validate a numeric parameter is within a given range.

    Parameters
    ----------
    param:
        The numeric value to validate.
    low / high:
        Optional bounds. When `None`, the bound is not checked.
    include_left / include_right:
        Whether the comparison is inclusive.
    param_name:
        Used in error messages.
    error_cls:
        Exception type raised for out-of-range values. Must subclass
        `ValueError`; type mismatches always raise `TypeError`.
    """

    if not isinstance(param, Number) or isinstance(param, bool):
        raise TypeError(f"{param_name} must be a number, got {type(param).__name__}")

    if low is not None and high is not None and low > high:
        raise ValueError(f"Invalid bounds for {param_name}: low={low} > high={high}")

    if low is not None:
        if include_left:
            if param < low:
                raise error_cls(f"{param_name} must be >= {low}, got {param}")
        else:
            if param <= low:
                raise error_cls(f"{param_name} must be > {low}, got {param}")

    if high is not None:
        if include_right:
            if param > high:
                raise error_cls(f"{param_name} must be <= {high}, got {param}")
        else:
            if param >= high:
                raise error_cls(f"{param_name} must be < {high}, got {param}")


def check_integer(
    param: object,
    low: int | None = None,
    *,
    param_name: str = "parameter",
    include_left: bool = True,
    error_cls: Type[ValueError] = ValueError,
) -> int:
    """Validate an integral parameter (numpy integers included) and return it as `int`."""

    if not isinstance(param, Integral) or isinstance(param, bool):
        raise error_cls(f"{param_name} must be an integer, got {param!r}")
    check_parameter(
        int(param),
        low=low,
        param_name=param_name,
        include_left=include_left,
        error_cls=error_cls,
    )
    return int(param)
