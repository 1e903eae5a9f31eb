"""
Shared helpers for turning results into tables and saving them.
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

import matplotlib.pyplot as plt
import pandas as pd


def _as_row(item) -> dict:
    if is_dataclass(item):
        row = asdict(item)
    elif isinstance(item, dict):
        row = dict(item)
    else:
        raise TypeError(f"results_to_frame: cannot tabulate {type(item).__name__}")
    for key, value in row.items():
        if isinstance(value, tuple):
            row[key] = " ".join(str(v) for v in value)
        elif isinstance(value, Enum):
            row[key] = value.value
    return row


def results_to_frame(results: Iterable) -> pd.DataFrame:
    """
    One row per result record (dataclass or dict).

    Tuples such as (h, k, l) are flattened to "h k l" strings and enum members
    to their values, so the table prints and saves cleanly.
    """
    return pd.DataFrame([_as_row(r) for r in results])


def save_table(df: pd.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)


def save_json(payload: dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, ensure_ascii=False)


def save_fig(fig, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=300)
    plt.close(fig)
