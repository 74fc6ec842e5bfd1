"""
Backward derandomization of k-bounded matching statistics.

Converts the matching statistics of a query into run values: positive
values track confidence in an ongoing match, non-positive values count
backward through a region that looks random or gapped.
"""

import logging
from typing import Sequence, Union

import numpy as np

from ..core.errors import PreconditionViolation
from ..core.types import TranslateParams

logger = logging.getLogger(__name__)

MatchingStatistics = Union[Sequence[int], np.ndarray]


def ms_to_run(curr: int, nxt: int, next_run: int, threshold: int, k: int) -> int:
    """
    Run value at one position given its successor.

    Args:
        curr: Matching statistic at this position
        nxt: Matching statistic at the following position
        next_run: Run value already assigned to the following position
        threshold: Random match threshold
        k: k-mer length

    Returns:
        Run value for this position
    """
    if curr == k and nxt == k:
        return k
    elif curr == k and next_run == 1:
        return k
    elif curr == k and next_run < 0:
        return k
    elif curr < threshold:
        return next_run - 1
    elif curr > threshold and next_run <= 0:
        return curr
    elif curr > threshold and next_run == 1:
        return curr
    elif curr > threshold and next_run < curr:
        return curr
    else:
        return next_run - 1


def check_matching_statistics(ms: MatchingStatistics, k: int, min_length: int) -> np.ndarray:
    """Return ms as an int64 array after checking length and value range."""
    arr = np.asarray(ms, dtype=np.int64)
    if arr.ndim != 1:
        raise PreconditionViolation(f"Matching statistics must be one-dimensional, got shape {arr.shape}")
    if arr.size < min_length:
        raise PreconditionViolation(
            f"Need at least {min_length} matching statistics, got {arr.size}"
        )
    if arr.size and (arr.min() < 0 or arr.max() > k):
        raise PreconditionViolation(
            f"Matching statistics must lie in [0, {k}], "
            f"got values in [{arr.min()}, {arr.max()}]"
        )
    return arr


def derandomize_ms(ms: MatchingStatistics, params: TranslateParams) -> np.ndarray:
    """
    Translate matching statistics into run values with a backward pass.

    The last run value is the last statistic. Positions n-2 down to 1
    are derived from their successor. Position 0 has no derived value
    and stays 0.

    Args:
        ms: Matching statistics, each in [0, k], at least 2 long
        params: k and threshold

    Returns:
        int64 array of run values, same length as ms
    """
    arr = check_matching_statistics(ms, params.k, min_length=2)
    values = arr.tolist()
    n = len(values)

    runs = [0] * n
    runs[n - 1] = values[n - 1]
    for i in range(n - 2, 0, -1):
        runs[i] = ms_to_run(values[i], values[i + 1], runs[i + 1], params.threshold, params.k)

    logger.debug(f"Derandomized {n} positions (k={params.k}, threshold={params.threshold})")
    return np.array(runs, dtype=np.int64)


__all__ = [
    'ms_to_run',
    'derandomize_ms',
    'check_matching_statistics',
]
