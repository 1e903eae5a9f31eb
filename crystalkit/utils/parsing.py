"""
Lenient text parsing shared by all calculators.

User text goes straight from a text box or file into these helpers, so junk
tokens and malformed lines are dropped instead of raising.
"""

from __future__ import annotations

import re
from typing import Iterator

import numpy as np

_FIELD_SPLIT = re.compile(r"[\s,]+")
_INTEGER = re.compile(r"-?\d+")
_NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(token: str) -> float | None:
    """
    Leading numeric part of a token, e.g. "28.44°" -> 28.44, "1_0" -> 1.0.

    None when the token does not start with a number.
    """
    match = _NUMBER_PREFIX.match(token)
    if match is None:
        return None
    val = float(match.group())
    return val if np.isfinite(val) else None


def to_floats(tokens) -> list[float]:
    """Leading numbers of the tokens, skipping tokens that do not start with one."""
    values: list[float] = []
    for tok in tokens:
        val = parse_number(tok)
        if val is not None:
            values.append(val)
    return values


def split_fields(text: str) -> list[str]:
    """Split on commas and any whitespace, dropping empty tokens."""
    return [tok for tok in _FIELD_SPLIT.split(text.strip()) if tok]


def iter_records(text: str, min_fields: int) -> Iterator[list[float]]:
    """
    Yield numeric records, one per non-empty line.

    Lines with fewer than ``min_fields`` parsable numbers are skipped.
    """
    for line in text.splitlines():
        if not line.strip():
            continue
        values = to_floats(split_fields(line))
        if len(values) >= min_fields:
            yield values


def scan_integers(text: str) -> list[int]:
    """Every (optionally signed) integer found in the text, in order."""
    return [int(tok) for tok in _INTEGER.findall(text)]


def is_valid_two_theta(two_theta: float) -> bool:
    return 0 < two_theta < 180
