"""Two-stage relay model for redundant-signal response times.

Each channel X is split by its RT-share w into two independent Wald stages,
X1 ~ Wald(mu*w, lambda*w) and X2 ~ Wald(mu*(1-w), lambda*(1-w)). The first
stages of both channels race, and whichever finishes first relays into the
second-stage race:

    RT_AV = min(A1, V1) + min(A2, V2)

This equals the fastest of the four stage paths A1+A2, A1+V2, V1+A2, V1+V2.
With w = 0 or w = 1 one race is instantaneous and the model reduces to
Raab's independent race of the whole channels.

The CDF of the sum is obtained by discrete convolution on a lattice of
spacing ``resolution`` starting at 0. The probability mass of each lattice bin
is placed at the bin midpoint, so the sum of two midpoints falls exactly on a
lattice edge and the convolved CDF is read off at the edges.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .bounds import raab_cdf
from .channel import ChannelParams, ShareWeight, SupportGrid
from .config import RTShareConfig
from .distribution import evaluate_cdf
from .errors import InvalidParameterError

DEFAULT_RESOLUTION = RTShareConfig.relay_resolution


def _race_on(times: np.ndarray, audio: ChannelParams, visual: ChannelParams, fa: float, fv: float) -> np.ndarray | None:
    """CDF of min(A_stage, V_stage) at ``times``; None when the race is instantaneous."""
    if fa == 0.0 or fv == 0.0:
        return None
    a_stage = audio.scaled(fa)
    v_stage = visual.scaled(fv)
    return raab_cdf(
        evaluate_cdf(times, a_stage.mean, a_stage.shape),
        evaluate_cdf(times, v_stage.mean, v_stage.shape),
    )


def _lattice_masses(race: np.ndarray) -> np.ndarray:
    # race[0] is the CDF at t=0, which is 0 for a non-degenerate Wald stage
    return np.clip(np.diff(race), 0.0, None)


def relay_cdf(
    grid: SupportGrid | np.ndarray,
    audio: ChannelParams,
    visual: ChannelParams,
    share_a: ShareWeight | float,
    share_v: ShareWeight | float | None = None,
    resolution: float = DEFAULT_RESOLUTION,
) -> np.ndarray:
    """Predicted audio-visual CDF of the relay model on ``grid``.

    Args:
        grid: Strictly increasing RT values [ms].
        audio: Audio channel parameters.
        visual: Visual channel parameters.
        share_a: First-stage share of the audio channel.
        share_v: First-stage share of the visual channel; defaults to ``share_a``.
        resolution: Convolution lattice spacing [ms].

    Returns:
        Non-decreasing CDF aligned with ``grid``.
    """
    grid = SupportGrid.coerce(grid)
    share_a = ShareWeight.coerce(share_a)
    share_v = share_a if share_v is None else ShareWeight.coerce(share_v)
    if not (math.isfinite(resolution) and resolution > 0):
        raise InvalidParameterError(
            f"Relay lattice resolution must be positive, got {resolution}.",
            name="resolution",
            value=resolution,
        )

    first_instant = share_a.first == 0.0 or share_v.first == 0.0
    second_instant = share_a.second == 0.0 or share_v.second == 0.0
    if first_instant and second_instant:
        return np.where(grid.values >= 0.0, 1.0, 0.0)
    if first_instant:
        return np.maximum.accumulate(_race_on(grid.values, audio, visual, share_a.second, share_v.second))
    if second_instant:
        return np.maximum.accumulate(_race_on(grid.values, audio, visual, share_a.first, share_v.first))

    t_max = grid.max
    if t_max <= 0:
        return np.zeros(grid.size)
    n_bins = max(int(math.ceil(t_max / resolution)), 1)
    edges = np.arange(n_bins + 1) * resolution

    first_race = _race_on(edges, audio, visual, share_a.first, share_v.first)
    second_race = _race_on(edges, audio, visual, share_a.second, share_v.second)
    combined = np.convolve(_lattice_masses(first_race), _lattice_masses(second_race))[:n_bins]
    edge_cdf = np.concatenate(([0.0], np.cumsum(combined)))
    edge_cdf = np.clip(edge_cdf, 0.0, 1.0)
    return np.maximum.accumulate(np.interp(grid.values, edges, edge_cdf, left=0.0))


@dataclass(frozen=True)
class RelayModel:
    """Relay model bound to a grid and a channel pair.

    Grid and channels are read-only, so one instance can be shared by every
    task of a parallel weight sweep.
    """

    grid: SupportGrid
    audio: ChannelParams
    visual: ChannelParams
    resolution: float = DEFAULT_RESOLUTION

    def __post_init__(self) -> None:
        object.__setattr__(self, "grid", SupportGrid.coerce(self.grid))

    def evaluate(self, share: ShareWeight | float, share_v: ShareWeight | float | None = None) -> np.ndarray:
        """CDF with one share for both channels, or per-channel shares."""
        return relay_cdf(self.grid, self.audio, self.visual, share, share_v, resolution=self.resolution)

    def evaluate_stages(self, w_a1: float, w_a2: float, w_v1: float, w_v2: float) -> np.ndarray:
        """Four-weight form (first and second stage of each channel).

        The stage fractions of a channel must sum to one.
        """
        for label, first, second in (("audio", w_a1, w_a2), ("visual", w_v1, w_v2)):
            if not math.isclose(first + second, 1.0, rel_tol=0.0, abs_tol=1e-12):
                raise InvalidParameterError(
                    f"{label} stage shares must sum to 1, got {first} + {second} = {first + second}.\n"
                    f"The second stage receives the remainder of the first stage's share.",
                    name=f"w_{label[0]}2",
                    value=second,
                )
        return self.evaluate(w_a1, w_v1)
