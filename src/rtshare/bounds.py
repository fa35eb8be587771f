"""Classical redundant-signal bounds built from two unisensory channels."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .channel import ChannelParams, SupportGrid
from .distribution import channel_cdf
from .metrics import DEFAULT_TOLERANCE, validate_curve


def grice_cdf(audio_cdf: np.ndarray, visual_cdf: np.ndarray) -> np.ndarray:
    """Grice's lower bound: the faster single channel at every instant."""
    return np.maximum(audio_cdf, visual_cdf)


def miller_cdf(audio_cdf: np.ndarray, visual_cdf: np.ndarray) -> np.ndarray:
    """Miller's race-model inequality: Fa + Fv, capped at 1."""
    return np.minimum(audio_cdf + visual_cdf, 1.0)


def raab_cdf(audio_cdf: np.ndarray, visual_cdf: np.ndarray) -> np.ndarray:
    """Raab's independent race: P(min(A, V) <= t) = Fa + Fv - Fa*Fv."""
    return audio_cdf + visual_cdf - audio_cdf * visual_cdf


@dataclass(frozen=True)
class BoundCurves:
    """Unisensory curves and the three bounds derived from them.

    Attributes:
        grid: Support grid shared by every curve.
        audio: CDF of the audio channel.
        visual: CDF of the visual channel.
        grice: Lower bound, max(Fa, Fv).
        miller: Upper bound, min(1, Fa + Fv).
        raab: Independent race prediction, Fa + Fv - Fa*Fv.
    """

    grid: SupportGrid
    audio: np.ndarray
    visual: np.ndarray
    grice: np.ndarray
    miller: np.ndarray
    raab: np.ndarray

    def as_dict(self) -> dict[str, np.ndarray]:
        return {
            "audio": self.audio,
            "visual": self.visual,
            "grice": self.grice,
            "miller": self.miller,
            "raab": self.raab,
        }


def compute_bounds(
    grid: SupportGrid | np.ndarray,
    audio: ChannelParams,
    visual: ChannelParams,
    tol: float = DEFAULT_TOLERANCE,
) -> BoundCurves:
    """Evaluate both channels on ``grid`` and derive Grice, Miller and Raab curves.

    Parameters are validated when the ChannelParams are built; every derived
    curve is re-checked so that an inconsistent combination surfaces as an
    InvalidCurveError instead of being plotted.
    """
    grid = SupportGrid.coerce(grid)
    fa = channel_cdf(grid, audio)
    fv = channel_cdf(grid, visual)
    curves = {
        "audio": fa,
        "visual": fv,
        "grice": grice_cdf(fa, fv),
        "miller": miller_cdf(fa, fv),
        "raab": raab_cdf(fa, fv),
    }
    checked = {name: validate_curve(grid, curve, name=name, tol=tol) for name, curve in curves.items()}
    for curve in checked.values():
        curve.setflags(write=False)
    return BoundCurves(grid=grid, **checked)
