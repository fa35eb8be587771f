"""Value records for sensory channels, share weights and evaluation grids."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from .errors import DegenerateWeightError, DimensionMismatchError, InvalidParameterError


def require_positive(name: str, value: float, owner: str) -> None:
    if not math.isfinite(value) or value <= 0:
        raise InvalidParameterError(
            f"{owner}: {name} must be a finite, strictly positive number, got {value}.\n"
            f"Wald parameters set the scale and shape of a non-negative latency law.",
            name=name,
            value=value,
        )


@dataclass(frozen=True)
class ChannelParams:
    """Wald (inverse Gaussian) parameters of one sensory channel.

    Attributes:
        name: Channel label, "a" (audio) or "v" (visual) in the reference data.
        mean: Mean latency mu [ms].
        shape: Shape/rate parameter lambda; the latency variance is mean**3 / shape.
    """

    name: str
    mean: float
    shape: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "mean", float(self.mean))
        object.__setattr__(self, "shape", float(self.shape))
        require_positive("mean", self.mean, f"channel '{self.name}'")
        require_positive("shape", self.shape, f"channel '{self.name}'")

    @property
    def variance(self) -> float:
        return self.mean**3 / self.shape

    @property
    def sd(self) -> float:
        return math.sqrt(self.variance)

    def scaled(self, share: float, name: str | None = None) -> "ChannelParams":
        """Return the stage channel (mean*share, shape*share)."""
        if share <= 0:
            raise DegenerateWeightError(
                f"channel '{self.name}': a stage with share {share} has zero mean and variance.\n"
                f"Guard shares of exactly 0 or 1 before splitting a channel into stages.",
                name="share",
                value=share,
            )
        return ChannelParams(
            name=name or f"{self.name}*{share:g}",
            mean=self.mean * share,
            shape=self.shape * share,
        )


@dataclass(frozen=True)
class ShareWeight:
    """Fraction of a channel's latency assigned to the first processing stage.

    The second stage always receives ``1 - value`` so the two fractions of a
    channel sum to one by construction.
    """

    value: float

    def __post_init__(self) -> None:
        value = float(self.value)
        if not math.isfinite(value) or not (0.0 <= value <= 1.0):
            raise InvalidParameterError(
                f"RT-share must lie in [0, 1], got {self.value}.\n"
                f"The share is the fraction of latency spent in the first stage.",
                name="share",
                value=self.value,
            )
        object.__setattr__(self, "value", value)

    @property
    def first(self) -> float:
        return self.value

    @property
    def second(self) -> float:
        return 1.0 - self.value

    @property
    def is_degenerate(self) -> bool:
        return self.value == 0.0 or self.value == 1.0

    @classmethod
    def coerce(cls, share: "ShareWeight | float") -> "ShareWeight":
        return share if isinstance(share, ShareWeight) else cls(share)


@dataclass(frozen=True)
class StageDecomposition:
    """Stage means and SDs derived from a channel and an RT-share.

    Stage k is treated as its own Wald channel with parameters
    (mean * fraction_k, shape * fraction_k), so its SD is
    sqrt(stage_mean**3 / (shape * fraction_k)).
    """

    channel: ChannelParams
    share: ShareWeight

    def __post_init__(self) -> None:
        share = ShareWeight.coerce(self.share)
        object.__setattr__(self, "share", share)
        if share.is_degenerate:
            raise DegenerateWeightError(
                f"channel '{self.channel.name}': share {share.value} leaves one stage "
                f"with zero latency, so its SD is undefined.\n"
                f"Use a share strictly between 0 and 1 to decompose a channel.",
                name="share",
                value=share.value,
            )

    @property
    def first_stage(self) -> ChannelParams:
        return self.channel.scaled(self.share.first, name=f"{self.channel.name}1")

    @property
    def second_stage(self) -> ChannelParams:
        return self.channel.scaled(self.share.second, name=f"{self.channel.name}2")

    @property
    def first_stage_mean(self) -> float:
        return self.channel.mean * self.share.first

    @property
    def first_stage_sd(self) -> float:
        return math.sqrt(self.first_stage_mean**3 / (self.channel.shape * self.share.first))

    @property
    def second_stage_mean(self) -> float:
        return self.channel.mean * self.share.second

    @property
    def second_stage_sd(self) -> float:
        return math.sqrt(self.second_stage_mean**3 / (self.channel.shape * self.share.second))


@dataclass(frozen=True)
class SupportGrid:
    """Strictly increasing RT values [ms] on which curves are evaluated."""

    values: np.ndarray

    def __post_init__(self) -> None:
        values = np.array(self.values, dtype=float)
        if values.ndim != 1 or values.size == 0:
            raise InvalidParameterError(
                f"Support grid must be a non-empty 1-D sequence, got shape {values.shape}.",
                name="grid",
                value=values.shape,
            )
        if not np.all(np.isfinite(values)):
            raise InvalidParameterError(
                f"Support grid contains non-finite values "
                f"(NaN={int(np.sum(np.isnan(values)))}, Inf={int(np.sum(np.isinf(values)))}).",
                name="grid",
                value=None,
            )
        if values.size > 1 and np.any(np.diff(values) <= 0):
            first_bad = int(np.argmax(np.diff(values) <= 0))
            raise InvalidParameterError(
                f"Support grid must be strictly increasing.\n"
                f"Found grid[{first_bad}]={values[first_bad]:.6g} >= grid[{first_bad + 1}]"
                f"={values[first_bad + 1]:.6g}.",
                name="grid",
                value=float(values[first_bad + 1]),
            )
        values.setflags(write=False)
        object.__setattr__(self, "values", values)

    @classmethod
    def linspace(cls, start: float, stop: float, count: int) -> "SupportGrid":
        if count < 2 or not stop > start:
            raise InvalidParameterError(
                f"Grid range needs count >= 2 and max > min, "
                f"got min={start}, max={stop}, count={count}.",
                name="grid",
                value=(start, stop, count),
            )
        return cls(np.linspace(start, stop, count))

    @classmethod
    def coerce(cls, grid: "SupportGrid | Iterable[float] | np.ndarray") -> "SupportGrid":
        return grid if isinstance(grid, SupportGrid) else cls(np.asarray(grid, dtype=float))

    @property
    def size(self) -> int:
        return int(self.values.size)

    @property
    def max(self) -> float:
        return float(self.values[-1])

    def __len__(self) -> int:
        return self.size

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        return np.asarray(self.values, dtype=dtype)


CONDITIONS = ("A", "V", "AV")


@dataclass(slots=True)
class EmpiricalSample:
    """Digitized cumulative RT observations for the A, V and AV conditions.

    Each row pairs three RTs [ms] with one shared cumulative probability:
    rt_a[i], rt_v[i] and rt_av[i] are the times at which the respective
    empirical CDF reaches probability[i].
    """

    rt_a: np.ndarray
    rt_v: np.ndarray
    rt_av: np.ndarray
    probability: np.ndarray
    label: str = "empirical"

    def __post_init__(self) -> None:
        names = ["rt_a", "rt_v", "rt_av", "probability"]
        arrays = [np.asarray(getattr(self, name), dtype=float) for name in names]
        for name, arr in zip(names, arrays):
            if arr.ndim != 1 or arr.size == 0:
                raise InvalidParameterError(
                    f"{name} must be a non-empty 1-D array, got shape {arr.shape}.",
                    name=name,
                    value=arr.shape,
                )
            if not np.all(np.isfinite(arr)):
                raise InvalidParameterError(
                    f"{name} contains non-finite values.\n"
                    f"Drop incomplete rows before building an empirical sample.",
                    name=name,
                    value=None,
                )
        lengths = {arr.size for arr in arrays}
        if len(lengths) != 1:
            length_info = ", ".join(f"{name}={arr.size}" for name, arr in zip(names, arrays))
            raise DimensionMismatchError(
                f"All empirical columns must have the same length.\nGot: {length_info}",
                name="probability",
                value=length_info,
            )
        probability = arrays[-1]
        if np.any((probability < 0.0) | (probability > 1.0)):
            raise InvalidParameterError(
                f"Cumulative probabilities must lie in [0, 1], "
                f"got range [{probability.min():.4f}, {probability.max():.4f}].",
                name="probability",
                value=(float(probability.min()), float(probability.max())),
            )
        for name, arr in zip(names, arrays):
            setattr(self, name, arr)

    @property
    def n_rows(self) -> int:
        return int(self.probability.size)

    def condition(self, condition: str) -> tuple[np.ndarray, np.ndarray]:
        """Return (rt, probability) for one condition, sorted by RT."""
        key = condition.upper()
        columns = {"A": self.rt_a, "V": self.rt_v, "AV": self.rt_av}
        if key not in columns:
            raise InvalidParameterError(
                f"Unknown condition '{condition}', expected one of {CONDITIONS}.",
                name="condition",
                value=condition,
            )
        rt = columns[key]
        order = np.argsort(rt, kind="stable")
        return rt[order], self.probability[order]
