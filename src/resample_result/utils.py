import numbers
from typing import Any, Iterable, List

import numpy as np


# =============================================================================
# INTEGER COERCION -------------------------------------------------------------
# =============================================================================


def is_integer(value: Any) -> bool:
    """
    True if value represents an integer:
      - int (but not bool) -> True
      - float that is numerically an integer (e.g., 5.0, -3.0) -> True
      - str of a base-10 int (optional +/- and whitespace) -> True
      - otherwise -> False
    """
    # Avoid treating True/False as integers
    if isinstance(value, bool):
        return False

    # Native integers (and numpy integer types, etc.)
    if isinstance(value, numbers.Integral):
        return True

    # Floats: only True if they're exactly an integer value
    if isinstance(value, (float, np.floating)):
        return float(value).is_integer()

    # Strings: accept optional sign and whitespace; digits only
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return False
        if s[0] in "+-":
            s = s[1:]
        return s.isdigit()

    return False


def as_int_list(values: Any) -> List[int]:
    """Coerce a scalar or an iterable of integer-like values to a list of ints.

    Raises ValueError on the first value that is not integer-like.
    """
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        values = [values]

    out = []
    for v in values:
        if not is_integer(v):
            raise ValueError(f"Not an integer: {v!r}")
        out.append(int(v))
    return out


# =============================================================================
# WEIGHTED STATISTICS ----------------------------------------------------------
# =============================================================================


def weighted_mean_std(scores: np.ndarray, counts: np.ndarray) -> tuple[float, float]:
    """
    Weighted mean:
        wgt_mean = sum(score_i * count_i) / sum(count_i)
    Weighted variance:
        weighted_var = sum(count_i * (score_i - wgt_mean)**2) / sum(count_i)
    Weighted std:
        weighted_std = sqrt(weighted_var)
    Only iterations with count > 0 are included.
    """
    scores = np.asarray(scores, dtype=float)
    counts = np.asarray(counts, dtype=float)

    mask = counts > 0
    scores = scores[mask]
    counts = counts[mask]
    wgt_mean = (scores * counts).sum() / counts.sum() if counts.sum() > 0 else 0.0
    wgt_var = ((counts * (scores - wgt_mean) ** 2).sum() / counts.sum()) if counts.sum() > 0 else 0.0
    wgt_std = wgt_var**0.5
    return float(wgt_mean), float(wgt_std)
