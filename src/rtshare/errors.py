"""Error taxonomy for the RT-share models, metrics and fitter.

Every error carries the offending ``name`` and ``value`` so callers can report
which parameter, weight or curve was rejected.

Example:
    >>> from rtshare.errors import InvalidParameterError
    >>> err = InvalidParameterError("mean must be positive", name="mean", value=-1.0)
    >>> err.name, err.value
    ('mean', -1.0)
"""

from __future__ import annotations

from typing import Any


class RTShareError(Exception):
    """Base class for all rtshare failures."""

    def __init__(self, message: str, *, name: str | None = None, value: Any = None) -> None:
        super().__init__(message)
        self.name = name
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": str(self),
            "name": self.name,
            "value": self.value,
        }


class InvalidParameterError(RTShareError, ValueError):
    """A distribution parameter, share weight or grid is outside its domain."""


class DegenerateWeightError(RTShareError, ValueError):
    """A share of 0 or 1 collapses a stage to zero variance."""


class InvalidCurveError(RTShareError, ValueError):
    """A CDF is non-monotone or leaves [0, 1]."""


class DimensionMismatchError(RTShareError, ValueError):
    """Grid and curve lengths disagree."""


class FitFailureError(RTShareError, RuntimeError):
    """The share optimizer exhausted its iteration budget."""

    def __init__(
        self,
        message: str,
        *,
        iterations: int,
        bracket: tuple[float, float],
        name: str | None = "share",
        value: Any = None,
    ) -> None:
        super().__init__(message, name=name, value=value)
        self.iterations = iterations
        self.bracket = bracket
