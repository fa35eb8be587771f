"""Reporting utilities for the RT-share pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np
from tabulate import tabulate

from .channel import ChannelParams, ShareWeight, StageDecomposition
from .optimizer import FitResult
from .sweep import SweepResult


@dataclass(frozen=True)
class StageSummary:
    channel: str
    first_stage_mean: float
    first_stage_sd: float
    second_stage_mean: float
    second_stage_sd: float


def summarize_stages(channels: Iterable[ChannelParams], share: ShareWeight | float) -> list[StageSummary]:
    summaries = []
    for channel in channels:
        stages = StageDecomposition(channel, ShareWeight.coerce(share))
        summaries.append(
            StageSummary(
                channel=channel.name,
                first_stage_mean=stages.first_stage_mean,
                first_stage_sd=stages.first_stage_sd,
                second_stage_mean=stages.second_stage_mean,
                second_stage_sd=stages.second_stage_sd,
            )
        )
    return summaries


def summarize_fit(fit: FitResult, stages: Iterable[StageSummary]) -> str:
    rows = [
        (
            stage.channel,
            f"{stage.first_stage_mean:.2f}",
            f"{stage.first_stage_sd:.2f}",
            f"{stage.second_stage_mean:.2f}",
            f"{stage.second_stage_sd:.2f}",
        )
        for stage in stages
    ]
    table = tabulate(
        rows,
        headers=[
            "Channel",
            "Stage 1 mean [ms]",
            "Stage 1 SD [ms]",
            "Stage 2 mean [ms]",
            "Stage 2 SD [ms]",
        ],
        tablefmt="github",
    )
    overall = f"Fitted RT-share: {fit.optimal_weight * 100:.2f}% (RMSE={fit.rmse:.4e})"
    return overall + "\n" + table


def summarize_sweep(sweep: SweepResult, max_rows: int = 11) -> str:
    n = sweep.weights.size
    indices = np.unique(np.linspace(0, n - 1, num=min(max_rows, n), dtype=int)) if n else []
    rows = [
        (
            f"{sweep.weights[i] * 100:.1f}",
            f"{sweep.rse[i]:.2f}",
            f"{sweep.violation[i]:.2f}",
        )
        for i in indices
    ]
    table = tabulate(
        rows,
        headers=["RT share [%]", "RSE [ms]", "Violation [ms]"],
        tablefmt="github",
    )
    reference = f"Raab race RSE: {sweep.raab_rse:.2f} ms"
    return table + "\n" + reference
