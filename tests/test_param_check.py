import numpy as np
import pytest

from pyopticsof.errors import ConfigurationError
from pyopticsof.utils.param_check import check_integer, check_parameter


def test_check_parameter_enforces_bounds() -> None:
    # Inclusive lower bound
    check_parameter(1, low=1, param_name="x", include_left=True)
    with pytest.raises(ValueError, match="x"):
        check_parameter(0, low=1, param_name="x", include_left=True)

    # Exclusive lower bound
    with pytest.raises(ValueError, match="x"):
        check_parameter(1, low=1, param_name="x", include_left=False)

    # Inclusive upper bound
    check_parameter(1, high=1, param_name="x", include_right=True)
    with pytest.raises(ValueError, match="x"):
        check_parameter(2, high=1, param_name="x", include_right=True)

    # Exclusive upper bound
    with pytest.raises(ValueError, match="x"):
        check_parameter(1, high=1, param_name="x", include_right=False)


def test_check_parameter_custom_error_class() -> None:
    with pytest.raises(ConfigurationError, match="min_pts must be > 1"):
        check_parameter(1, low=1, include_left=False, param_name="min_pts", error_cls=ConfigurationError)


def test_check_parameter_rejects_non_numbers() -> None:
    with pytest.raises(TypeError):
        check_parameter("1", low=0, param_name="x")
    with pytest.raises(TypeError):
        check_parameter(True, low=0, param_name="x")


def test_check_integer() -> None:
    assert check_integer(np.int32(3), low=1, param_name="k") == 3
    with pytest.raises(ValueError, match="integer"):
        check_integer(3.0, low=1, param_name="k")
    with pytest.raises(ValueError, match="k must be >= 1"):
        check_integer(0, low=1, param_name="k")
