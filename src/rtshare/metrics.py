"""Redundancy-gain and race-model violation metrics.

Both metrics compare two CDFs at matched probability levels. Each curve is
inverted by linear interpolation along the grid's RT axis, giving t(p), the
first RT at which the piecewise-linear curve reaches probability p. Levels are
sampled at the midpoints of equal slices of the probability range the two
curves share, and the difference t_reference(p) - t_model(p) is integrated with
the midpoint rule, so results are areas in time units [ms]. Midpoints keep the
levels off p = 0 and p = 1, where t(p) is not determined by the curve.

Sign convention: a positive value means the model curve is faster (lies to
the left of) the reference curve.
"""

from __future__ import annotations

import numpy as np

from .channel import SupportGrid
from .errors import DimensionMismatchError, InvalidCurveError

DEFAULT_PROBABILITY_SAMPLES = 1001
DEFAULT_TOLERANCE = 1.0e-9


def validate_curve(
    grid: SupportGrid | np.ndarray,
    curve: np.ndarray,
    name: str = "curve",
    tol: float = DEFAULT_TOLERANCE,
) -> np.ndarray:
    """Check that ``curve`` is a CDF aligned with ``grid`` and return a clean copy.

    Decreases and range excursions up to ``tol`` are treated as round-off and
    removed; anything larger is rejected.

    Raises:
        DimensionMismatchError: If curve and grid lengths differ.
        InvalidCurveError: If the curve is non-monotone, non-finite or leaves [0, 1].
    """
    grid = SupportGrid.coerce(grid)
    curve = np.asarray(curve, dtype=float)
    if curve.ndim != 1 or curve.size != grid.size:
        raise DimensionMismatchError(
            f"{name} has shape {curve.shape} but the support grid has {grid.size} points.\n"
            f"Curves must be evaluated on the grid they are compared over.",
            name=name,
            value=curve.shape,
        )
    if not np.all(np.isfinite(curve)):
        raise InvalidCurveError(
            f"{name} contains non-finite probabilities.", name=name, value=None
        )
    low, high = float(curve.min()), float(curve.max())
    if low < -tol or high > 1.0 + tol:
        raise InvalidCurveError(
            f"{name} leaves [0, 1]: range [{low:.6g}, {high:.6g}].",
            name=name,
            value=(low, high),
        )
    steps = np.diff(curve)
    if steps.size and float(steps.min()) < -tol:
        idx = int(np.argmin(steps))
        raise InvalidCurveError(
            f"{name} is not monotone non-decreasing: drops by {-steps[idx]:.6g} "
            f"between grid[{idx}]={grid.values[idx]:.6g} and grid[{idx + 1}]={grid.values[idx + 1]:.6g}.",
            name=name,
            value=float(steps[idx]),
        )
    return np.maximum.accumulate(np.clip(curve, 0.0, 1.0))


def invert_cdf(grid: SupportGrid | np.ndarray, curve: np.ndarray, p: np.ndarray | float) -> np.ndarray:
    """RT at which a piecewise-linear CDF first reaches each probability in ``p``.

    Levels below the first grid value map to grid[0]; levels above the last
    map to grid[-1]. ``curve`` must already be non-decreasing.
    """
    grid = SupportGrid.coerce(grid)
    times = grid.values
    curve = np.asarray(curve, dtype=float)
    p = np.asarray(p, dtype=float)
    if times.size == 1:
        return np.full_like(p, times[0])

    idx = np.searchsorted(curve, p, side="left")
    idx = np.clip(idx, 1, times.size - 1)
    lo_p, hi_p = curve[idx - 1], curve[idx]
    lo_t, hi_t = times[idx - 1], times[idx]
    span = hi_p - lo_p
    safe_span = np.where(span > 0, span, 1.0)
    frac = np.where(span > 0, (p - lo_p) / safe_span, 1.0)
    frac = np.clip(frac, 0.0, 1.0)
    result = lo_t + frac * (hi_t - lo_t)
    return np.where(p <= curve[0], times[0], result)


def _matched_times(
    grid: SupportGrid,
    model: np.ndarray,
    reference: np.ndarray,
    samples: int,
) -> tuple[float, np.ndarray, np.ndarray] | None:
    p_low = max(float(model[0]), float(reference[0]))
    p_high = min(float(model[-1]), float(reference[-1]))
    if p_high <= p_low:
        return None
    width = p_high - p_low
    levels = p_low + (np.arange(samples) + 0.5) * (width / samples)
    return width, invert_cdf(grid, model, levels), invert_cdf(grid, reference, levels)


def compute_rse(
    grid: SupportGrid | np.ndarray,
    model_cdf: np.ndarray,
    reference_cdf: np.ndarray,
    samples: int = DEFAULT_PROBABILITY_SAMPLES,
    tol: float = DEFAULT_TOLERANCE,
) -> float:
    """Redundancy gain of ``model_cdf`` over ``reference_cdf`` [ms].

    Area between the two curves over their common probability range,
    integral of (t_reference(p) - t_model(p)) dp. Positive when the model is
    faster than the reference (typically Grice's bound). Returns 0.0 when the
    curves share no probability range.
    """
    grid = SupportGrid.coerce(grid)
    model = validate_curve(grid, model_cdf, name="model_cdf", tol=tol)
    reference = validate_curve(grid, reference_cdf, name="reference_cdf", tol=tol)
    matched = _matched_times(grid, model, reference, samples)
    if matched is None:
        return 0.0
    width, t_model, t_reference = matched
    return float(np.mean(t_reference - t_model) * width)


def compute_violation(
    grid: SupportGrid | np.ndarray,
    model_cdf: np.ndarray,
    miller_cdf: np.ndarray,
    samples: int = DEFAULT_PROBABILITY_SAMPLES,
    tol: float = DEFAULT_TOLERANCE,
) -> float:
    """Race-model inequality violation of ``model_cdf`` [ms].

    Area over the common probability range where the model is faster than
    Miller's bound, integral of max(0, t_miller(p) - t_model(p)) dp. Zero
    means the model respects the bound; a positive area is a violation.
    """
    grid = SupportGrid.coerce(grid)
    model = validate_curve(grid, model_cdf, name="model_cdf", tol=tol)
    miller = validate_curve(grid, miller_cdf, name="miller_cdf", tol=tol)
    matched = _matched_times(grid, model, miller, samples)
    if matched is None:
        return 0.0
    width, t_model, t_miller = matched
    return float(np.mean(np.maximum(t_miller - t_model, 0.0)) * width)
