"""
CSV helpers shared by the factor and CUPS stores
"""
import csv
import os
import tempfile
from pathlib import Path
from typing import List, Optional

import pandas as pd

from logger_config import storage_logger


def read_csv_table(path, expected_columns: Optional[List[str]] = None) -> pd.DataFrame:
    """
    Read a small store CSV as text

    Every value is returned as a string, blank lines are skipped and rows with
    a wrong column count are dropped. A missing file yields an empty frame with
    ``expected_columns``.
    """
    path = Path(path)
    if not path.exists():
        return pd.DataFrame(columns=expected_columns or [])

    try:
        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines='warn',
            encoding='utf-8-sig',
        )
    except pd.errors.EmptyDataError:
        return pd.DataFrame(columns=expected_columns or [])

    df.columns = [str(c).strip() for c in df.columns]
    storage_logger.log_file_operation("read", str(path), True, path.stat().st_size)
    return df


def write_csv_atomic(df: pd.DataFrame, path) -> None:
    """
    Write a frame to CSV through a temporary file in the same directory

    The temporary file replaces the destination with ``os.replace``; where the
    rename fails the destination is overwritten directly.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, 'w', encoding='utf-8', newline='') as handle:
            df.to_csv(handle, index=False, quoting=csv.QUOTE_MINIMAL)
        try:
            os.replace(tmp_name, path)
        except OSError as e:
            storage_logger.warning("Atomic rename failed, overwriting in place", path=str(path), error=str(e))
            df.to_csv(path, index=False, quoting=csv.QUOTE_MINIMAL, encoding='utf-8')
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)

    storage_logger.log_file_operation("write", str(path), True, path.stat().st_size)
