"""Configuration primitives for the RT-share relay analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
import numpy as np


@dataclass(frozen=True)
class RTShareConfig:
    """Holds tunable constants for the relay model, metrics and share fitting.

    This frozen dataclass centralizes the evaluation ranges and numerical
    settings used across the pipeline. Key parameter groups:

    **Support Grid:**
    - grid_min, grid_max, grid_points: Evenly spaced RT axis [ms] on which
      every CDF is evaluated and compared (default 100..700 ms, 100 points)

    **Weight Sweep:**
    - sweep_min, sweep_max, sweep_points: RT-share values scanned for the
      RSE(w) and Violation(w) series
    - max_workers: Thread count for the sweep (1 runs sequentially)

    **Relay Model:**
    - relay_resolution: Lattice spacing [ms] of the stage convolution

    **Metrics:**
    - probability_samples: Number of matched probability levels
    - curve_tolerance: Slack allowed on monotonicity and [0, 1] range checks

    **Share Fitter:**
    - share_min, share_max, share_samples: Coarse scan range for w
    - gss_tol, gss_max_iter: Golden section search parameters

    **Simulation:**
    - simulation_seed: Seed for Monte Carlo RT draws
    """

    grid_min: float = 100.0
    grid_max: float = 700.0
    grid_points: int = 100

    sweep_min: float = 0.0
    sweep_max: float = 0.5
    sweep_points: int = 100
    max_workers: int | None = None

    relay_resolution: float = 0.5

    probability_samples: int = 1001
    curve_tolerance: float = 1.0e-9

    share_min: float = 0.0
    share_max: float = 0.5
    share_samples: int = 51
    gss_tol: float = 1.0e-6
    gss_max_iter: int = 128

    simulation_seed: int = 1337

    _grid: np.ndarray = field(init=False, repr=False)
    _sweep_weights: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.grid_max > self.grid_min:
            raise ValueError(
                f"grid_max must exceed grid_min, got [{self.grid_min}, {self.grid_max}].\n"
                f"The support grid has to span a non-empty RT range."
            )
        if self.grid_points < 2:
            raise ValueError(f"grid_points must be at least 2, got {self.grid_points}.")
        if not (0.0 <= self.sweep_min <= self.sweep_max <= 1.0):
            raise ValueError(
                f"Sweep range must satisfy 0 <= sweep_min <= sweep_max <= 1, "
                f"got [{self.sweep_min}, {self.sweep_max}]."
            )
        if self.sweep_points < 1:
            raise ValueError(
                f"sweep_points must be at least 1, got {self.sweep_points}.\n"
                f"The weight sweep needs one or more RT-share values."
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(
                f"max_workers must be None or at least 1, got {self.max_workers}.\n"
                f"Use 1 for a sequential sweep or None for the executor default."
            )
        if not (0.0 <= self.share_min < self.share_max <= 1.0):
            raise ValueError(
                f"Share range must satisfy 0 <= share_min < share_max <= 1, "
                f"got [{self.share_min}, {self.share_max}]."
            )
        if self.share_samples < 3:
            raise ValueError(f"share_samples must be at least 3, got {self.share_samples}.")
        if self.relay_resolution <= 0:
            raise ValueError(f"relay_resolution must be positive, got {self.relay_resolution}.")
        if self.probability_samples < 2:
            raise ValueError(f"probability_samples must be at least 2, got {self.probability_samples}.")

        grid = np.linspace(self.grid_min, self.grid_max, self.grid_points)
        weights = np.linspace(self.sweep_min, self.sweep_max, self.sweep_points)
        object.__setattr__(self, "_grid", grid)
        object.__setattr__(self, "_sweep_weights", weights)

    @property
    def grid(self) -> np.ndarray:
        """Pre-computed RT support grid [ms]."""
        return self._grid

    @property
    def sweep_weights(self) -> np.ndarray:
        """Pre-computed RT-share values for the weight sweep."""
        return self._sweep_weights

    @property
    def share_grid(self) -> np.ndarray:
        """Coarse grid of RT-share values scanned before refinement."""
        return np.linspace(self.share_min, self.share_max, self.share_samples)
