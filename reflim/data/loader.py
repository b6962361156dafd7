"""Load measurement columns from tabular files and clean them for estimation."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import numpy as np
import pandas as pd

from reflim.exceptions import DataSourceError

SUPPORTED_SUFFIXES = {".csv", ".txt", ".parquet"}
CSV_SEPARATORS = (",", ";", "\t")


def clean_sample(values: Iterable) -> np.ndarray:
    """Coerce to float and drop missing/non-finite entries; order is preserved."""
    series = pd.to_numeric(pd.Series(list(values), dtype=object), errors="coerce")
    arr = series.to_numpy(dtype=float)
    return arr[np.isfinite(arr)]


def _detect_separator(path: Path) -> str:
    """Pick the separator from the header line; single-column files fall back to ','."""
    with path.open(encoding="utf-8-sig") as handle:
        header = handle.readline()
    counts = {sep: header.count(sep) for sep in CSV_SEPARATORS}
    best = max(counts, key=counts.get)
    return best if counts[best] > 0 else ","


def _read_table(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise DataSourceError(f"Unsupported file type '{suffix}'; expected one of {sorted(SUPPORTED_SUFFIXES)}")
    if suffix == ".parquet":
        try:
            return pd.read_parquet(path)
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise DataSourceError("pyarrow is required to read Parquet files (pip install reflim[parquet])") from exc
    return pd.read_csv(path, sep=_detect_separator(path), encoding="utf-8-sig")


def load_sample(path: Path | str, column: str) -> np.ndarray:
    path = Path(path)
    if not path.exists():
        raise DataSourceError(f"Data file not found: {path}")
    df = _read_table(path)
    if column not in df.columns:
        raise DataSourceError(f"Column '{column}' not found in {path.name}; available: {list(df.columns)}")
    return clean_sample(df[column])


__all__ = ["SUPPORTED_SUFFIXES", "clean_sample", "load_sample"]
