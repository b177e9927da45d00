"""Exceptions raised by pyopticsof.

Both concrete errors subclass `ValueError` so callers that already guard
parameter validation with `except ValueError` keep working.
"""

from __future__ import annotations


class OPTICSOFError(Exception):
    """Base class for all pyopticsof errors."""


class ConfigurationError(OPTICSOFError, ValueError):
    """Raised when a configuration value is invalid (e.g. ``min_pts <= 1``)."""


class InsufficientDataError(OPTICSOFError, ValueError):
    """Raised when the dataset holds fewer objects than ``min_pts``.

    The k-nearest-neighbor query cannot return a full neighbor list in that
    case, so the whole run is aborted before any score is produced.
    """
