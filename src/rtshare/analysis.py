"""Analysis routines orchestrating the RT-share pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .bounds import BoundCurves, compute_bounds
from .channel import ChannelParams, EmpiricalSample, ShareWeight
from .config import RTShareConfig
from .optimizer import FitResult, fit_share
from .relay import relay_cdf
from .reporting import StageSummary, summarize_fit, summarize_stages, summarize_sweep
from .sweep import SweepResult, sweep_weights
from .synthetic_data import load_synthetic_dataset

AUDIO_COLOR = (0.85, 0.33, 0.10)
VISUAL_COLOR = (0.00, 0.45, 0.74)
AUDIOVISUAL_COLOR = (0.49, 0.18, 0.56)
MODEL_COLOR = (0.4, 0.4, 0.4)
SWEEP_LIGHT = np.array([228, 210, 231]) / 255.0
SWEEP_DARK = np.array([137, 41, 133]) / 255.0


def _get_verbosity() -> int:
    """Get verbosity level from environment: 0=quiet, 1=normal, 2=verbose."""
    return int(os.environ.get("RTSHARE_VERBOSITY", "1"))


@dataclass(slots=True)
class AnalysisArtifacts:
    config: RTShareConfig
    audio: ChannelParams
    visual: ChannelParams
    sample: EmpiricalSample
    bounds: BoundCurves
    fit: FitResult
    fitted_cdf: np.ndarray
    stages: List[StageSummary]
    sweep: SweepResult
    tables: str
    output_dir: Optional[Path]


class RTShareAnalysis:
    def __init__(self, config: RTShareConfig | None = None) -> None:
        self.config = config or RTShareConfig()

    def _plot_summary(
        self,
        sample: EmpiricalSample,
        sweep: SweepResult,
        fitted_cdf: np.ndarray,
        out_path: Path,
    ) -> None:
        grid = sweep.grid.values
        bounds = sweep.bounds
        weights_pct = sweep.weights * 100.0

        fig = plt.figure(figsize=(14.0, 4.0))
        layout = fig.add_gridspec(1, 4)
        ax_cdf = fig.add_subplot(layout[0, :2])
        ax_rse = fig.add_subplot(layout[0, 2])
        ax_vio = fig.add_subplot(layout[0, 3])

        ax_cdf.plot(grid, bounds.audio, color=AUDIO_COLOR, linewidth=1.5, label="A")
        ax_cdf.plot(grid, bounds.visual, color=VISUAL_COLOR, linewidth=1.5, label="V")
        n_weights = sweep.weights.size
        mix = np.linspace(0.0, 1.0, n_weights)[:, None] if n_weights else np.zeros((0, 1))
        colors = (1.0 - mix) * SWEEP_LIGHT + mix * SWEEP_DARK
        for idx in range(n_weights):
            ax_cdf.plot(grid, sweep.model_cdfs[:, idx], color=colors[idx], linewidth=1.0)
        ax_cdf.plot(grid, bounds.miller, "-", color=MODEL_COLOR, linewidth=1.5, label="Miller")
        ax_cdf.plot(grid, bounds.raab, "--", color=MODEL_COLOR, linewidth=1.5, label="Raab")
        ax_cdf.plot(grid, fitted_cdf, color=AUDIOVISUAL_COLOR, linewidth=2.0, label="Relay (fit)")
        for condition, color in (("A", AUDIO_COLOR), ("V", VISUAL_COLOR), ("AV", AUDIOVISUAL_COLOR)):
            rt, prob = sample.condition(condition)
            ax_cdf.plot(rt, prob, "o", color=color, markerfacecolor="white", markersize=4)
        ax_cdf.set_xlim(grid[0], grid[-1])
        ax_cdf.set_ylim(0.0, 1.0)
        ax_cdf.set_xlabel("Response Time (ms)")
        ax_cdf.set_ylabel("Cumulative Probability")
        ax_cdf.legend(frameon=False, fontsize=8)

        ax_rse.plot(weights_pct, sweep.rse, "k-", linewidth=1.5)
        ax_rse.axhline(sweep.raab_rse, linestyle="--", color=MODEL_COLOR, linewidth=1.5)
        ax_rse.plot([0.0], [sweep.raab_rse], "o", color=MODEL_COLOR, markerfacecolor="white")
        ax_rse.set_xlabel("RT Share (%)")
        ax_rse.set_ylabel("RSE (ms)")

        ax_vio.plot(weights_pct, sweep.violation, "k-", linewidth=1.5)
        ax_vio.axhline(0.0, linestyle="--", color=MODEL_COLOR, linewidth=1.5)
        ax_vio.plot([0.0], [0.0], "o", color=MODEL_COLOR, markerfacecolor="white")
        ax_vio.set_xlabel("RT Share (%)")
        ax_vio.set_ylabel("Violation (ms)")

        for ax in (ax_cdf, ax_rse, ax_vio):
            ax.spines["top"].set_visible(False)
            ax.spines["right"].set_visible(False)
            ax.tick_params(direction="out")

        plt.tight_layout()
        plt.savefig(out_path)
        plt.close(fig)

    @staticmethod
    def _sweep_frame(sweep: SweepResult) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "share": sweep.weights,
                "rse_ms": sweep.rse,
                "violation_ms": sweep.violation,
            }
        )

    @staticmethod
    def _curve_frame(sweep: SweepResult, fitted_cdf: np.ndarray) -> pd.DataFrame:
        frame = pd.DataFrame({"rt_ms": sweep.grid.values})
        for name, curve in sweep.bounds.as_dict().items():
            frame[name] = curve
        frame["relay_fit"] = fitted_cdf
        return frame

    def run(
        self,
        audio: ChannelParams | None = None,
        visual: ChannelParams | None = None,
        sample: EmpiricalSample | None = None,
        output_dir: str | Path | None = None,
        max_workers: int | None = None,
    ) -> AnalysisArtifacts:
        config = self.config
        inputs = {"audio": audio, "visual": visual, "sample": sample}
        missing = [name for name, value in inputs.items() if value is None]
        if len(missing) == len(inputs):
            synthetic = load_synthetic_dataset()
            audio, visual, sample = synthetic["audio"], synthetic["visual"], synthetic["sample"]
        elif missing:
            raise ValueError(
                f"Missing analysis input(s): {', '.join(missing)}.\n"
                f"Pass audio, visual and sample together, or none of them to use the synthetic dataset."
            )

        verbosity = _get_verbosity()

        if verbosity >= 1:
            print("Computing unisensory curves and bounds...")
        bounds = compute_bounds(config.grid, audio, visual, tol=config.curve_tolerance)

        if verbosity >= 1:
            print("Fitting RT-share to the AV data...")
        fit = fit_share(sample, audio, visual, config)

        share = ShareWeight(fit.optimal_weight)
        stages: List[StageSummary] = []
        if not share.is_degenerate:
            stages = summarize_stages((audio, visual), share)
        elif verbosity >= 1:
            print(f"Fitted share {share.value} is at a boundary; stage decomposition skipped.")

        if verbosity >= 1:
            print(f"Sweeping {config.sweep_points} RT-share values...")
        sweep = sweep_weights(audio, visual, config=config, bounds=bounds, max_workers=max_workers)

        fitted_cdf = relay_cdf(bounds.grid, audio, visual, share, resolution=config.relay_resolution)

        tables = summarize_fit(fit, stages) + "\n\n" + summarize_sweep(sweep)

        artifact_dir: Optional[Path] = None
        if output_dir is not None:
            artifact_dir = Path(output_dir)
            artifact_dir.mkdir(parents=True, exist_ok=True)
            if verbosity >= 1:
                print(f"Writing artifacts to {artifact_dir}...")
            self._plot_summary(sample, sweep, fitted_cdf, artifact_dir / "rtshare.png")
            self._sweep_frame(sweep).to_csv(artifact_dir / "sweep.csv", index=False)
            self._curve_frame(sweep, fitted_cdf).to_csv(artifact_dir / "curves.csv", index=False)
            report_lines = [
                f"Audio channel: mu={audio.mean:.4g}, lambda={audio.shape:.4g}",
                f"Visual channel: mu={visual.mean:.4g}, lambda={visual.shape:.4g}",
                f"Fitted RT-share: {fit.optimal_weight:.6f} (RMSE={fit.rmse:.6e}, "
                f"iters={fit.iterations}, bracket={fit.bracket})",
                f"Coarse scan best share: {fit.scan.best_share:.6f} (RMSE={fit.scan.best_rmse:.6e})",
                f"Raab race RSE: {sweep.raab_rse:.4f} ms",
                f"Peak sweep violation: {np.nanmax(sweep.violation):.4f} ms",
            ]
            (artifact_dir / "summary.txt").write_text("\n".join(report_lines) + "\n\n" + tables)

        return AnalysisArtifacts(
            config=config,
            audio=audio,
            visual=visual,
            sample=sample,
            bounds=bounds,
            fit=fit,
            fitted_cdf=fitted_cdf,
            stages=stages,
            sweep=sweep,
            tables=tables,
            output_dir=artifact_dir,
        )


def run_synthetic_pipeline(
    output_dir: str | Path | None = None,
    config: RTShareConfig | None = None,
) -> AnalysisArtifacts:
    analysis = RTShareAnalysis(config)
    return analysis.run(output_dir=output_dir)
