"""Parallel RT-share sweep: relay curve, RSE and violation per weight."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

import numpy as np
from tqdm import tqdm

from .bounds import BoundCurves, compute_bounds
from .channel import ChannelParams, SupportGrid
from .config import RTShareConfig
from .metrics import compute_rse, compute_violation
from .relay import RelayModel


def _get_verbosity() -> int:
    """Get verbosity level from environment: 0=quiet, 1=normal, 2=verbose."""
    return int(os.environ.get("RTSHARE_VERBOSITY", "1"))


@dataclass(frozen=True)
class SweepResult:
    """Index-aligned outputs of a weight sweep.

    Attributes:
        weights: Swept RT-share values, shape (n_weights,).
        model_cdfs: Relay CDFs, shape (n_grid, n_weights); column i belongs to weights[i].
        rse: Redundancy gain over Grice's bound [ms] per weight.
        violation: Violation of Miller's bound [ms] per weight.
        raab_rse: Redundancy gain of Raab's race over Grice's bound [ms].
        bounds: Unisensory curves and bounds the sweep was measured against.
    """

    weights: np.ndarray
    model_cdfs: np.ndarray
    rse: np.ndarray
    violation: np.ndarray
    raab_rse: float
    bounds: BoundCurves

    @property
    def grid(self) -> SupportGrid:
        return self.bounds.grid


def sweep_weights(
    audio: ChannelParams,
    visual: ChannelParams,
    config: RTShareConfig | None = None,
    weights: np.ndarray | None = None,
    grid: SupportGrid | np.ndarray | None = None,
    bounds: BoundCurves | None = None,
    max_workers: int | None = None,
) -> SweepResult:
    """Evaluate the relay model and both metrics for every weight.

    Each weight is an independent task that writes only its own column of
    ``model_cdfs`` and its own slot of ``rse`` and ``violation``. Grid,
    channels and bound curves are shared read-only. ``max_workers=1`` runs
    the same tasks sequentially with identical results.
    """
    config = config or RTShareConfig()
    grid = SupportGrid.coerce(grid if grid is not None else config.grid)
    weights = np.asarray(weights if weights is not None else config.sweep_weights, dtype=float)
    bounds = bounds or compute_bounds(grid, audio, visual, tol=config.curve_tolerance)
    workers = max_workers if max_workers is not None else config.max_workers

    model = RelayModel(grid, audio, visual, resolution=config.relay_resolution)
    n_weights = weights.size
    model_cdfs = np.full((grid.size, n_weights), np.nan)
    rse = np.full(n_weights, np.nan)
    violation = np.full(n_weights, np.nan)

    def evaluate(idx: int) -> int:
        curve = model.evaluate(float(weights[idx]))
        model_cdfs[:, idx] = curve
        rse[idx] = compute_rse(
            grid, curve, bounds.grice,
            samples=config.probability_samples, tol=config.curve_tolerance,
        )
        violation[idx] = compute_violation(
            grid, curve, bounds.miller,
            samples=config.probability_samples, tol=config.curve_tolerance,
        )
        return idx

    verbosity = _get_verbosity()
    progress = tqdm(total=n_weights, desc="Sweeping RT-share", disable=verbosity == 0, leave=False)
    with progress:
        if workers == 1:
            for idx in range(n_weights):
                evaluate(idx)
                progress.update(1)
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(evaluate, idx) for idx in range(n_weights)]
                for future in as_completed(futures):
                    future.result()
                    progress.update(1)

    raab_rse = compute_rse(
        grid, bounds.raab, bounds.grice,
        samples=config.probability_samples, tol=config.curve_tolerance,
    )
    return SweepResult(
        weights=weights,
        model_cdfs=model_cdfs,
        rse=rse,
        violation=violation,
        raab_rse=raab_rse,
        bounds=bounds,
    )
