"""
Atomic file-write utilities.

Outputs are first written to a temporary file in the destination directory
and then moved into place with ``os.replace()``, so an interrupted run
never leaves a half-written dataset file behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Callable, IO

import numpy as np
import pandas as pd


def _json_default(value: Any) -> Any:
    """Serialize the NumPy scalars and arrays that end up in result records."""
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return float(value)
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, np.ndarray):
        return value.tolist()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _atomic_write(path: str | os.PathLike, write: Callable[[IO[str]], None]) -> None:
    path = str(path)
    dir_path = os.path.dirname(path) or "."
    tmp_path: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", dir=dir_path, suffix=".tmp", delete=False, newline=""
        ) as tmp:
            tmp_path = tmp.name
            write(tmp)
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any failure
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def atomic_write_json(path: str | os.PathLike, data: Any, *, indent: int = 2) -> None:
    """Write *data* as JSON atomically via temp-file + rename.

    NumPy scalars and arrays are converted to their Python equivalents.

    Parameters
    ----------
    path:
        Destination file path.
    data:
        JSON-serializable object.
    indent:
        JSON indentation (default 2).
    """
    _atomic_write(path, lambda f: json.dump(data, f, indent=indent, default=_json_default))


def atomic_write_csv(path: str | os.PathLike, frame: pd.DataFrame, *, index: bool = True) -> None:
    """Write a DataFrame as CSV atomically via temp-file + rename."""
    _atomic_write(path, lambda f: frame.to_csv(f, index=index))
