"""RT-share relay model for redundant-signal response times.

Redundant audio-visual signals usually produce faster responses than either
signal alone. This package tests whether such speedups respect the race-model
inequality by modelling each channel's latency as a Wald (inverse Gaussian)
law and comparing a two-stage relay architecture against the classical
bounds of Grice, Raab and Miller.

Main Components:
    - ChannelParams / ShareWeight / SupportGrid: Immutable model inputs
    - compute_bounds: Grice, Miller and Raab curves from two channels
    - relay_cdf / RelayModel: Two-stage relay prediction for a given RT-share
    - compute_rse / compute_violation: Redundancy gain and violation [ms]
    - fit_share: Estimate the RT-share from an empirical AV CDF
    - sweep_weights: Parallel RSE(w) and Violation(w) series

Quick Start:
    >>> from rtshare import ChannelParams, fit_share, sweep_weights
    >>> from rtshare.synthetic_data import load_synthetic_dataset
    >>>
    >>> data = load_synthetic_dataset()
    >>> fit = fit_share(data["sample"], data["audio"], data["visual"])
    >>> print(f"Best RT-share: {fit.optimal_weight:.4f}")
"""

from .bounds import BoundCurves, compute_bounds
from .channel import ChannelParams, EmpiricalSample, ShareWeight, StageDecomposition, SupportGrid
from .config import RTShareConfig
from .distribution import evaluate_cdf
from .errors import (
    DegenerateWeightError,
    DimensionMismatchError,
    FitFailureError,
    InvalidCurveError,
    InvalidParameterError,
    RTShareError,
)
from .metrics import compute_rse, compute_violation
from .optimizer import FitResult, fit_share
from .relay import RelayModel, relay_cdf
from .sweep import SweepResult, sweep_weights

__all__ = [
    "BoundCurves",
    "ChannelParams",
    "DegenerateWeightError",
    "DimensionMismatchError",
    "EmpiricalSample",
    "FitFailureError",
    "FitResult",
    "InvalidCurveError",
    "InvalidParameterError",
    "RTShareConfig",
    "RTShareError",
    "RelayModel",
    "ShareWeight",
    "StageDecomposition",
    "SupportGrid",
    "SweepResult",
    "compute_bounds",
    "compute_rse",
    "compute_violation",
    "evaluate_cdf",
    "fit_share",
    "relay_cdf",
    "sweep_weights",
]
