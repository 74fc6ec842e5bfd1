"""
Forward decoding of run values into alignment symbols.

The decoder reads a three-position window over the run values and
writes into a mutable symbol buffer. Some rules write ahead of or
behind the cursor, and gap fills move the cursor by more than one.
"""

import logging
from typing import List

import numpy as np

from ..core.errors import PreconditionViolation
from ..core.types import AlignmentSymbol, TranslateParams
from .derandomize import MatchingStatistics, check_matching_statistics

logger = logging.getLogger(__name__)

MIN_DECODE_LENGTH = 5

M = AlignmentSymbol.MATCH
R = AlignmentSymbol.RANDOM_BOUNDARY
I = AlignmentSymbol.INSERTION
GAP = AlignmentSymbol.GAP
X = AlignmentSymbol.UNDETERMINED


def measure_gap(runs: List[int], pos: int) -> int:
    """Count negative run values directly before pos, stopping at position 1."""
    next_gap = pos
    gap_len = 0
    while next_gap > 1 and runs[next_gap - 1] < 0:
        gap_len += 1
        next_gap -= 1
    return gap_len


def run_to_aln(
    runs: List[int],
    curr_ms: int,
    params: TranslateParams,
    res: List[AlignmentSymbol],
    pos: int
) -> int:
    """
    Decode the window centred on pos into res.

    Args:
        runs: Run values for the whole query
        curr_ms: Matching statistic at pos
        params: k, threshold and gap length cutoff
        res: Symbol buffer, modified in place
        pos: Cursor position

    Returns:
        Position of the next cursor
    """
    k = params.k
    threshold = params.threshold

    prev = runs[pos - 1]
    curr = runs[pos]
    nxt = runs[pos + 1]

    if curr == k and nxt == k:
        res[pos] = M
    elif curr > threshold and 0 < nxt < threshold:
        res[pos] = R
        res[pos + 1] = R
    elif nxt == 1 and curr == curr_ms:
        res[pos] = M
    elif curr > threshold:
        res[pos] = M
    elif curr == nxt - 1 and curr > 0:
        res[pos] = M
    elif curr == 0 and nxt == 1 and prev > 0:
        res[pos] = X
        res[pos - 1] = M
    elif curr == 0 and nxt == 1 and prev == -1:
        gap_len = measure_gap(runs, pos)
        fill = GAP if gap_len > params.gap_length_cutoff else I
        end = min(pos + gap_len, len(runs))
        for j in range(pos, end):
            res[j] = fill
        return max(end, pos + 1)
    else:
        res[pos] = X

    return pos + 1


def translate_runs(
    ms: MatchingStatistics,
    runs: MatchingStatistics,
    params: TranslateParams
) -> List[AlignmentSymbol]:
    """
    Decode run values into one alignment symbol per query position.

    The first three positions and the last one are never visited by
    the cursor and stay UNDETERMINED unless a neighbouring rule writes
    into them.

    Args:
        ms: Matching statistics of the query
        runs: Run values from derandomize_ms
        params: k, threshold and gap length cutoff

    Returns:
        List of AlignmentSymbol, same length as ms
    """
    ms_arr = check_matching_statistics(ms, params.k, min_length=MIN_DECODE_LENGTH)
    runs_arr = np.asarray(runs, dtype=np.int64)
    if runs_arr.shape != ms_arr.shape:
        raise PreconditionViolation(
            f"Run values ({runs_arr.size}) and matching statistics ({ms_arr.size}) differ in length"
        )

    ms_values = ms_arr.tolist()
    run_values = runs_arr.tolist()
    n = len(run_values)

    aln = [X] * n
    pos = 3
    while pos < n - 1:
        pos = run_to_aln(run_values, ms_values[pos], params, aln, pos)

    logger.debug(f"Decoded {n} positions into alignment symbols")
    return aln


__all__ = [
    'MIN_DECODE_LENGTH',
    'measure_gap',
    'run_to_aln',
    'translate_runs',
]
