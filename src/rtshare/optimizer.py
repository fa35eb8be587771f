"""RT-share scanning and refinement against an empirical AV CDF."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass

import numpy as np
from tqdm import tqdm

from .channel import ChannelParams, EmpiricalSample, SupportGrid
from .config import RTShareConfig
from .errors import FitFailureError, InvalidParameterError
from .relay import relay_cdf


def _get_verbosity() -> int:
    """Get verbosity level from environment: 0=quiet, 1=normal, 2=verbose."""
    return int(os.environ.get("RTSHARE_VERBOSITY", "1"))


@dataclass(frozen=True)
class ShareObjective:
    """RMSE between the relay model and the empirical AV CDF.

    The error is measured on the probability axis: the model is evaluated at
    the empirical AV response times and compared with the empirical
    cumulative probabilities at those times.
    """

    rt: np.ndarray
    probability: np.ndarray
    audio: ChannelParams
    visual: ChannelParams
    resolution: float

    @classmethod
    def from_sample(
        cls,
        sample: EmpiricalSample,
        audio: ChannelParams,
        visual: ChannelParams,
        resolution: float,
    ) -> "ShareObjective":
        rt, probability = sample.condition("AV")
        return cls(rt=rt, probability=probability, audio=audio, visual=visual, resolution=resolution)

    def model_at_samples(self, share: float) -> np.ndarray:
        # Empirical RTs may repeat; evaluate on the unique support and expand back.
        support, inverse = np.unique(self.rt, return_inverse=True)
        curve = relay_cdf(SupportGrid(support), self.audio, self.visual, share, resolution=self.resolution)
        return curve[inverse]

    def __call__(self, share: float) -> float:
        residuals = self.model_at_samples(share) - self.probability
        return float(np.sqrt(np.mean(np.square(residuals))))


@dataclass(frozen=True)
class ScanResult:
    share_values: np.ndarray
    rmse_values: np.ndarray
    best_share: float
    best_index: int
    best_rmse: float


@dataclass(frozen=True)
class GoldenSectionEstimate:
    share: float
    rmse: float
    iterations: int
    bracket: tuple[float, float]


@dataclass(frozen=True)
class FitResult:
    """Best-fitting RT-share and its residual error.

    Attributes:
        optimal_weight: Fitted first-stage share w*.
        rmse: Root-mean-square probability error at w*.
        iterations: Golden-section iterations used by the refinement.
        bracket: Final golden-section bracket.
        scan: Coarse scan the refinement started from.
    """

    optimal_weight: float
    rmse: float
    iterations: int
    bracket: tuple[float, float]
    scan: ScanResult


def scan_share(objective: ShareObjective, share_grid: np.ndarray) -> ScanResult:
    share_grid = np.asarray(share_grid, dtype=float)
    rmse_values = np.zeros_like(share_grid)

    verbosity = _get_verbosity()
    share_iter = tqdm(
        enumerate(share_grid),
        total=len(share_grid),
        desc="Scanning RT-share values",
        disable=verbosity == 0,
        leave=False,
    )
    for idx, share in share_iter:
        rmse_values[idx] = objective(float(share))
        if verbosity >= 2 and idx % max(1, len(share_grid) // 20) == 0:
            current_best = float(share_grid[int(np.argmin(rmse_values[: idx + 1]))])
            share_iter.set_postfix({"current_best": f"{current_best:.4f}"})

    # np.argmin returns the first minimum, so ties resolve to the smallest share.
    best_index = int(np.argmin(rmse_values))
    return ScanResult(
        share_values=share_grid,
        rmse_values=rmse_values,
        best_share=float(share_grid[best_index]),
        best_index=best_index,
        best_rmse=float(rmse_values[best_index]),
    )


def _find_bracket(scan: ScanResult) -> tuple[float, float]:
    idx = scan.best_index
    last = scan.share_values.size - 1
    left = scan.share_values[max(idx - 1, 0)]
    right = scan.share_values[min(idx + 1, last)]
    return float(left), float(right)


def golden_section_refinement(
    objective: ShareObjective,
    bracket: tuple[float, float],
    tol: float,
    max_iter: int,
) -> GoldenSectionEstimate:
    """Minimize ``objective`` inside ``bracket`` by golden-section search.

    Raises:
        FitFailureError: If the bracket is still wider than ``tol`` after
            ``max_iter`` iterations.
    """
    phi = (1 + math.sqrt(5)) / 2.0
    a, b = bracket
    c = b - (b - a) / phi
    d = a + (b - a) / phi
    fc = objective(c)
    fd = objective(d)
    iterations = 0
    while abs(b - a) > tol and iterations < max_iter:
        if fc <= fd:
            b, d, fd = d, c, fc
            c = b - (b - a) / phi
            fc = objective(c)
        else:
            a, c, fc = c, d, fd
            d = a + (b - a) / phi
            fd = objective(d)
        iterations += 1
    if abs(b - a) > tol:
        raise FitFailureError(
            f"Golden-section search did not converge after {iterations} iterations.\n"
            f"Bracket [{a:.6g}, {b:.6g}] is wider than tolerance {tol:g}.\n"
            f"Increase gss_max_iter or loosen gss_tol.",
            iterations=iterations,
            bracket=(float(a), float(b)),
            value=(a + b) / 2.0,
        )
    share_star = (a + b) / 2.0
    return GoldenSectionEstimate(
        share=float(share_star),
        rmse=objective(share_star),
        iterations=iterations,
        bracket=(float(a), float(b)),
    )


def fit_share(
    sample: EmpiricalSample,
    audio: ChannelParams,
    visual: ChannelParams,
    config: RTShareConfig | None = None,
) -> FitResult:
    """Estimate the RT-share that best reproduces the empirical AV CDF.

    A deterministic coarse scan over [share_min, share_max] locates the best
    grid point; golden-section search then refines between its neighbours.
    The same share is used for both channels, with 1 - w for the second stage.

    Args:
        sample: Empirical CDF table; only the AV column enters the error.
        audio: Fitted audio channel parameters.
        visual: Fitted visual channel parameters.
        config: Scan range and refinement tolerances.

    Returns:
        FitResult with the optimal share and its RMSE.

    Raises:
        FitFailureError: If the refinement exceeds its iteration budget.
    """
    config = config or RTShareConfig()
    if sample.n_rows < 1:
        raise InvalidParameterError("Empirical sample has no rows to fit.", name="sample", value=0)
    objective = ShareObjective.from_sample(sample, audio, visual, config.relay_resolution)

    scan = scan_share(objective, config.share_grid)
    golden = golden_section_refinement(
        objective,
        _find_bracket(scan),
        tol=config.gss_tol,
        max_iter=config.gss_max_iter,
    )

    # The refinement only searches the neighbourhood; keep the scan point if it is still better.
    if scan.best_rmse < golden.rmse:
        optimal, rmse = scan.best_share, scan.best_rmse
    else:
        optimal, rmse = golden.share, golden.rmse

    return FitResult(
        optimal_weight=optimal,
        rmse=rmse,
        iterations=golden.iterations,
        bracket=golden.bracket,
        scan=scan,
    )
