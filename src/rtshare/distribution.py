"""Closed-form Wald (inverse Gaussian) latency distribution.

A channel with mean mu and shape lambda has CDF

    F(t) = Phi(sqrt(lambda/t) * (t/mu - 1))
         + exp(2*lambda/mu) * Phi(-sqrt(lambda/t) * (t/mu + 1))

for t > 0 and F(t) = 0 otherwise. The second term is assembled in log space
so that exp(2*lambda/mu) cannot overflow when the channel is sharply peaked.
"""

from __future__ import annotations

import numpy as np
from scipy.stats import invgauss, norm

from .channel import ChannelParams, ShareWeight, SupportGrid, require_positive
from .errors import DegenerateWeightError, InvalidParameterError


def wald_cdf(t: np.ndarray | float, mean: float, shape: float) -> np.ndarray:
    """Evaluate the Wald CDF at arbitrary latencies.

    Args:
        t: Latencies [ms]; any shape, need not be sorted.
        mean: Mean latency mu (> 0).
        shape: Shape parameter lambda (> 0).

    Returns:
        Cumulative probabilities with the same shape as ``t``, clipped to [0, 1].
    """
    require_positive("mean", float(mean), "wald_cdf")
    require_positive("shape", float(shape), "wald_cdf")
    t = np.asarray(t, dtype=float)
    flat = np.atleast_1d(t).ravel()
    out = np.zeros_like(flat)
    positive = flat > 0
    if np.any(positive):
        tp = flat[positive]
        root = np.sqrt(shape / tp)
        first = norm.cdf(root * (tp / mean - 1.0))
        second = np.exp(2.0 * shape / mean + norm.logcdf(-root * (tp / mean + 1.0)))
        out[positive] = first + second
    return np.clip(out, 0.0, 1.0).reshape(t.shape)


def wald_ppf(p: np.ndarray | float, mean: float, shape: float) -> np.ndarray:
    """Inverse CDF: the latency at which the Wald CDF reaches ``p``."""
    require_positive("mean", float(mean), "wald_ppf")
    require_positive("shape", float(shape), "wald_ppf")
    p = np.asarray(p, dtype=float)
    if np.any((p < 0.0) | (p > 1.0)):
        raise InvalidParameterError(
            f"Probabilities must lie in [0, 1], got range [{p.min():.4f}, {p.max():.4f}].",
            name="p",
            value=(float(p.min()), float(p.max())),
        )
    return invgauss.ppf(p, mean / shape, scale=shape)


def evaluate_cdf(grid: SupportGrid | np.ndarray, mean: float, shape: float) -> np.ndarray:
    """Evaluate one channel's CDF over a support grid.

    The result is forced to be non-decreasing with a running maximum, which
    only ever absorbs floating-point round-off.
    """
    grid = SupportGrid.coerce(grid)
    values = wald_cdf(grid.values, mean, shape)
    return np.maximum.accumulate(values)


def channel_cdf(grid: SupportGrid | np.ndarray, channel: ChannelParams) -> np.ndarray:
    return evaluate_cdf(grid, channel.mean, channel.shape)


def stage_cdf(
    grid: SupportGrid | np.ndarray,
    channel: ChannelParams,
    share: ShareWeight | float,
    stage: int,
) -> np.ndarray:
    """CDF of the first (stage=1) or second (stage=2) processing stage.

    Stage 1 is evaluated as the channel (mean*w, shape*w) and stage 2 as
    (mean*(1-w), shape*(1-w)).

    Raises:
        DegenerateWeightError: If the requested stage receives a zero share.
    """
    share = ShareWeight.coerce(share)
    if stage not in (1, 2):
        raise InvalidParameterError(
            f"stage must be 1 or 2, got {stage}.", name="stage", value=stage
        )
    fraction = share.first if stage == 1 else share.second
    if fraction == 0.0:
        raise DegenerateWeightError(
            f"channel '{channel.name}': stage {stage} has share 0 and no latency distribution.\n"
            f"Treat a zero-share stage as an instantaneous relay instead of evaluating it.",
            name="share",
            value=share.value,
        )
    stage_channel = channel.scaled(fraction)
    return evaluate_cdf(grid, stage_channel.mean, stage_channel.shape)
