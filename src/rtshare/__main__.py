"""Command-line entry point for running the RT-share analysis."""

from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path

from .analysis import RTShareAnalysis
from .config import RTShareConfig
from .data_io import load_channel_params, load_empirical_sample
from .errors import FitFailureError, RTShareError


def format_duration(seconds: float) -> str:
    """Format duration in seconds to human-readable string."""
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes = int(seconds // 60)
    secs = seconds % 60
    return f"{minutes}m {secs:.1f}s"


def print_header(text: str, width: int = 70) -> None:
    """Print a formatted section header."""
    print("\n" + "=" * width)
    print(f"  {text}")
    print("=" * width)


def print_summary(artifacts, elapsed: float, verbose: bool) -> None:
    """Print analysis summary statistics."""
    print_header("Analysis Summary")

    print(f"\nRuntime: {format_duration(elapsed)}")
    if artifacts.output_dir is not None:
        print(f"Output Directory: {artifacts.output_dir}")

    print("\n--- RT-share Fit ---")
    print(f"  Optimal share:              {artifacts.fit.optimal_weight:.6f}")
    print(f"  RMSE:                       {artifacts.fit.rmse:.6e}")
    print(f"  Golden-section iterations:  {artifacts.fit.iterations}")

    print("\n--- Weight Sweep ---")
    sweep = artifacts.sweep
    print(f"  Weights swept:              {sweep.weights.size}")
    print(f"  Raab race RSE:              {sweep.raab_rse:.3f} ms")
    print(f"  RSE range:                  {sweep.rse.min():.3f} .. {sweep.rse.max():.3f} ms")
    print(f"  Peak violation:             {sweep.violation.max():.3f} ms")

    if verbose:
        print("\n--- Tables ---")
        print(artifacts.tables)


def build_config(args: argparse.Namespace) -> RTShareConfig:
    return RTShareConfig(
        grid_min=args.grid_min,
        grid_max=args.grid_max,
        grid_points=args.grid_points,
        sweep_points=args.sweep_points,
        max_workers=args.workers,
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Fit the relay-model RT-share and sweep race-model violations.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                       # Synthetic dataset
  %(prog)s --params params.csv --empirical av.csv
  %(prog)s --output-dir results/ --workers 4
  %(prog)s --quiet                               # Print only the fitted share
        """,
    )
    parser.add_argument("--params", type=Path, help="Parameter record with rows a, v and columns mu, lambda.")
    parser.add_argument("--empirical", type=Path, help="Digitized CDF table (rt_a, rt_v, rt_av, probability).")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("artifacts"),
        help="Directory where the figure, CSV tables and summary are written (default: artifacts).",
    )
    parser.add_argument("--grid-min", type=float, default=100.0, help="Lowest RT of the support grid [ms].")
    parser.add_argument("--grid-max", type=float, default=700.0, help="Highest RT of the support grid [ms].")
    parser.add_argument("--grid-points", type=int, default=100, help="Number of support grid points.")
    parser.add_argument("--sweep-points", type=int, default=100, help="Number of RT-share values swept.")
    parser.add_argument("--workers", type=int, default=None, help="Sweep threads (1 = sequential).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress all output except the result.")
    args = parser.parse_args(argv)

    if (args.params is None) != (args.empirical is None):
        parser.error("--params and --empirical must be given together.")

    if args.quiet:
        os.environ["RTSHARE_VERBOSITY"] = "0"
    elif args.verbose:
        os.environ["RTSHARE_VERBOSITY"] = "2"
    else:
        os.environ["RTSHARE_VERBOSITY"] = "1"

    if not args.quiet:
        print_header("RT-share Relay Analysis")
        source = "synthetic dataset" if args.params is None else f"{args.params}, {args.empirical}"
        print(f"\nInput: {source}")
        print(f"Output directory: {args.output_dir.resolve()}")

    start_time = time.time()

    try:
        config = build_config(args)
        audio = visual = sample = None
        if args.params is not None:
            params = load_channel_params(args.params)
            audio, visual = params["a"], params["v"]
            sample = load_empirical_sample(args.empirical)

        artifacts = RTShareAnalysis(config).run(
            audio=audio,
            visual=visual,
            sample=sample,
            output_dir=args.output_dir,
        )
        elapsed = time.time() - start_time

        if args.quiet:
            print(f"{artifacts.fit.optimal_weight:.6f}")
        else:
            print_summary(artifacts, elapsed, args.verbose)
            if not args.verbose:
                print("\n" + artifacts.tables)
            print_header("Analysis Complete")
            print(f"Results written to: {args.output_dir.resolve()}\n")

    except FileNotFoundError as e:
        print(f"\nError: File not found: {e}", file=sys.stderr)
        sys.exit(1)
    except FitFailureError as e:
        elapsed = time.time() - start_time
        print(
            f"\nError after {format_duration(elapsed)}:\n"
            f"RT-share fit did not converge: {e}",
            file=sys.stderr,
        )
        sys.exit(2)
    except (RTShareError, ValueError) as e:
        elapsed = time.time() - start_time
        print(
            f"\nError after {format_duration(elapsed)}:\n"
            f"Invalid input data: {e}",
            file=sys.stderr,
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
