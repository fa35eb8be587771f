"""Loaders for fitted channel parameters and digitized empirical CDFs."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from .channel import ChannelParams, EmpiricalSample

PARAM_COLUMNS = ["mu", "lambda"]
EMPIRICAL_COLUMNS = ["rt_a", "rt_v", "rt_av", "probability"]


def _check_file(path: Path, label: str) -> Path:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"{label} not found at: {path}\n"
            f"Please check the path or export the file from the fitting step."
        )
    if not path.is_file():
        raise ValueError(f"{label} path is not a file: {path}")
    if path.stat().st_size == 0:
        raise ValueError(f"{label} file is empty: {path}")
    return path


def _read_table(path: Path, header: int | None = 0) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix in (".xlsx", ".xls"):
        return pd.read_excel(path, header=header)
    if suffix == ".json":
        return pd.read_json(path, orient="index")
    return pd.read_csv(path, header=header)


def load_channel_params(path: str | Path) -> dict[str, ChannelParams]:
    """Load a parameter record with one row per condition.

    CSV/Excel files need a ``name`` column (``a``, ``v`` and optionally
    ``av``) plus ``mu`` and ``lambda``. JSON files map each name to an object
    with ``mu`` and ``lambda``.

    Returns:
        Mapping from lower-case condition name to ChannelParams.
    """
    path = _check_file(Path(path), "Parameter record")
    try:
        df = _read_table(path)
    except Exception as e:
        raise ValueError(
            f"Failed to read parameter record from {path}.\n"
            f"Error: {e}"
        ) from e

    if path.suffix.lower() == ".json":
        df = df.rename_axis("name").reset_index()
    df.columns = [str(col).strip().lower() for col in df.columns]
    missing = [col for col in ["name", *PARAM_COLUMNS] if col not in df.columns]
    if missing:
        raise ValueError(
            f"Parameter record {path} is missing column(s): {', '.join(missing)}.\n"
            f"Expected columns: name, mu, lambda."
        )

    params: dict[str, ChannelParams] = {}
    for _, row in df.iterrows():
        name = str(row["name"]).strip().lower()
        params[name] = ChannelParams(name=name, mean=float(row["mu"]), shape=float(row["lambda"]))
    for required in ("a", "v"):
        if required not in params:
            raise ValueError(
                f"Parameter record {path} has no row for channel '{required}'.\n"
                f"Both the audio ('a') and visual ('v') channels are required."
            )
    return params


def load_empirical_sample(path: str | Path, label: str | None = None) -> EmpiricalSample:
    """Load a digitized CDF table with columns (rt_a, rt_v, rt_av, probability).

    Files without those headers are read positionally, first four columns in
    that order. Rows with missing values are dropped.
    """
    path = _check_file(Path(path), "Empirical data")
    try:
        df = _read_table(path)
        df.columns = [str(col).strip().lower() for col in df.columns]
        if not set(EMPIRICAL_COLUMNS) <= set(df.columns):
            df = _read_table(path, header=None)
            if df.shape[1] < len(EMPIRICAL_COLUMNS):
                raise ValueError(
                    f"expected at least {len(EMPIRICAL_COLUMNS)} columns, found {df.shape[1]}"
                )
            df = df.iloc[:, : len(EMPIRICAL_COLUMNS)]
            df.columns = EMPIRICAL_COLUMNS
        df = df[EMPIRICAL_COLUMNS].apply(pd.to_numeric, errors="coerce").dropna()
    except Exception as e:
        raise ValueError(
            f"Failed to load empirical data from {path}.\n"
            f"Error: {e}\n"
            f"Expected columns: {', '.join(EMPIRICAL_COLUMNS)}."
        ) from e

    if df.empty:
        raise ValueError(f"Empirical data loaded but contains no complete rows: {path}")

    return EmpiricalSample(
        rt_a=df["rt_a"].to_numpy(dtype=float),
        rt_v=df["rt_v"].to_numpy(dtype=float),
        rt_av=df["rt_av"].to_numpy(dtype=float),
        probability=df["probability"].to_numpy(dtype=float),
        label=label or path.stem,
    )


def sample_to_frame(sample: EmpiricalSample) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "rt_a": sample.rt_a,
            "rt_v": sample.rt_v,
            "rt_av": sample.rt_av,
            "probability": sample.probability,
        }
    )


def params_to_frame(params: dict[str, ChannelParams]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "name": [p.name for p in params.values()],
            "mu": np.array([p.mean for p in params.values()]),
            "lambda": np.array([p.shape for p in params.values()]),
        }
    )
