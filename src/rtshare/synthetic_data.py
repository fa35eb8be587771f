"""Synthetic redundant-signal datasets.

This module provides a Miller (1982)-like audio/visual channel pair and
builders for data with a known RT-share:

- make_relay_sample: deterministic empirical table whose AV column follows
  the relay model exactly, for round-trip fitting
- simulate_relay_rts: seeded Monte Carlo draws of the relay architecture,
  for checking the convolution against sampling

Example:
    >>> from rtshare.synthetic_data import load_synthetic_dataset
    >>>
    >>> data = load_synthetic_dataset()
    >>> print(data["audio"].mean, data["sample"].n_rows)

Note: These are idealized test cases, not digitized observations.
"""

from __future__ import annotations

from typing import Dict

import numpy as np
from scipy.stats import invgauss

from .channel import ChannelParams, EmpiricalSample, ShareWeight, SupportGrid
from .config import RTShareConfig
from .distribution import wald_ppf
from .metrics import invert_cdf
from .relay import relay_cdf

AUDIO = ChannelParams(name="a", mean=400.0, shape=6400.0)
VISUAL = ChannelParams(name="v", mean=350.0, shape=5500.0)
SYNTHETIC_SHARE = 0.3
DEFAULT_PROBABILITIES = np.linspace(0.05, 0.95, 19)


def make_relay_sample(
    audio: ChannelParams,
    visual: ChannelParams,
    share: ShareWeight | float,
    probabilities: np.ndarray | None = None,
    resolution: float = RTShareConfig.relay_resolution,
    label: str = "synthetic",
) -> EmpiricalSample:
    """Empirical-style table generated by the relay model at a known share.

    The unisensory columns are Wald quantiles; the AV column inverts the relay
    CDF, evaluated on its own convolution lattice, at each probability.
    """
    probabilities = np.asarray(
        probabilities if probabilities is not None else DEFAULT_PROBABILITIES, dtype=float
    )
    rt_a = wald_ppf(probabilities, audio.mean, audio.shape)
    rt_v = wald_ppf(probabilities, visual.mean, visual.shape)

    t_max = float(max(np.max(rt_a), np.max(rt_v))) * 1.5
    n_bins = int(np.ceil(t_max / resolution))
    lattice = SupportGrid(np.arange(1, n_bins + 1) * resolution)
    curve = relay_cdf(lattice, audio, visual, share, resolution=resolution)
    rt_av = invert_cdf(lattice, curve, probabilities)

    return EmpiricalSample(
        rt_a=np.asarray(rt_a, dtype=float),
        rt_v=np.asarray(rt_v, dtype=float),
        rt_av=np.asarray(rt_av, dtype=float),
        probability=probabilities,
        label=label,
    )


def _stage_draws(channel: ChannelParams, fraction: float, size: int, rng: np.random.Generator) -> np.ndarray:
    if fraction == 0.0:
        return np.zeros(size)
    stage = channel.scaled(fraction)
    return invgauss.rvs(stage.mean / stage.shape, scale=stage.shape, size=size, random_state=rng)


def simulate_relay_rts(
    audio: ChannelParams,
    visual: ChannelParams,
    share: ShareWeight | float,
    n_trials: int = 10_000,
    seed: int = RTShareConfig.simulation_seed,
) -> np.ndarray:
    """Draw AV response times min(A1, V1) + min(A2, V2) with a seeded generator."""
    share = ShareWeight.coerce(share)
    rng = np.random.default_rng(seed)
    a1 = _stage_draws(audio, share.first, n_trials, rng)
    a2 = _stage_draws(audio, share.second, n_trials, rng)
    v1 = _stage_draws(visual, share.first, n_trials, rng)
    v2 = _stage_draws(visual, share.second, n_trials, rng)
    return np.minimum(a1, v1) + np.minimum(a2, v2)


def empirical_cdf(samples: np.ndarray, grid: SupportGrid | np.ndarray) -> np.ndarray:
    grid = SupportGrid.coerce(grid)
    ordered = np.sort(np.asarray(samples, dtype=float))
    return np.searchsorted(ordered, grid.values, side="right") / ordered.size


def load_synthetic_dataset() -> Dict[str, object]:
    return {
        "audio": AUDIO,
        "visual": VISUAL,
        "sample": make_relay_sample(AUDIO, VISUAL, SYNTHETIC_SHARE),
        "share": SYNTHETIC_SHARE,
    }
