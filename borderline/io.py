"""
Borderline I/O Utilities

Reading trajectories / recurrence plots and atomic parquet writes.

Key Functions:
    read_trajectory(path) - Load an (N, m) trajectory from npy, csv or parquet
    read_recurrence_plot(path) - Load a precomputed recurrence plot
    write_parquet_atomic(df, path) - Write to temp file, rename (atomic)

CSV files may come with or without a header row. By default the first row
is taken as a header only if one of its fields is not a number, so
`np.savetxt(path, Y, delimiter=',')` output reads back complete.
"""

from pathlib import Path
from typing import Optional, Union

import numpy as np
import polars as pl
import polars.selectors as cs

from borderline.lines.diagonal import validate_recurrence_plot

SUPPORTED_SUFFIXES = ('.npy', '.csv', '.parquet')


def _is_number(value) -> bool:
    try:
        float(value)
    except (TypeError, ValueError):
        return False
    return True


def csv_has_header(path: Union[str, Path]) -> bool:
    """True if the first row of a CSV file holds a non-numeric field."""
    first = pl.read_csv(path, has_header=False, n_rows=1, infer_schema_length=0)
    if first.height == 0:
        return False
    return not all(_is_number(value) for value in first.row(0))


def _read_array(path: Union[str, Path], csv_header: Optional[bool] = None) -> np.ndarray:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == '.npy':
        return np.load(path, allow_pickle=False)
    if suffix == '.csv':
        if csv_header is None:
            csv_header = csv_has_header(path)
        df = pl.read_csv(path, has_header=csv_header)
    elif suffix == '.parquet':
        df = pl.read_parquet(path)
    else:
        raise ValueError(
            f"Unsupported file type {suffix!r}. Supported: {', '.join(SUPPORTED_SUFFIXES)}"
        )

    numeric = df.select(cs.numeric() | cs.boolean())
    if numeric.width == 0:
        raise ValueError(f"No numeric columns in {path}")
    return numeric.to_numpy()


def read_trajectory(path: Union[str, Path], csv_header: Optional[bool] = None) -> np.ndarray:
    """
    Read a trajectory: one row per time step, one column per coordinate.

    A 1-D .npy array is returned as-is (scalar time series). For CSV input,
    csv_header forces the first row to be read as a header (True) or as
    data (False); None detects it.

    Example:
        >>> Y = read_trajectory('roessler.parquet')
    """
    return np.asarray(_read_array(path, csv_header), dtype=float)


def read_recurrence_plot(path: Union[str, Path], csv_header: Optional[bool] = None) -> np.ndarray:
    """Read a precomputed recurrence plot and check it is square and binary."""
    return validate_recurrence_plot(_read_array(path, csv_header))


def write_parquet_atomic(
    df: pl.DataFrame,
    path: Union[str, Path],
    compression: str = "zstd",
) -> int:
    """
    Atomically write a DataFrame to a parquet file.

    Writes to a temporary file first, then renames to target path.
    This ensures the target file is never in a partial/corrupt state.

    Args:
        df: Polars DataFrame to write
        path: Target path for parquet file
        compression: Compression algorithm (zstd, snappy, lz4, etc.)

    Returns:
        Number of rows written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = path.with_suffix(".parquet.tmp")

    try:
        df.write_parquet(temp_path, compression=compression)
        temp_path.replace(path)
        return len(df)
    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise
