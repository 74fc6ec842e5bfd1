"""
Per-query alignment: matching statistics in, alignment runs out.
"""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from ..algorithms.threshold import random_match_threshold
from ..algorithms.derandomize import MatchingStatistics, derandomize_ms
from ..algorithms.translate import translate_runs
from ..algorithms.run_lengths import run_lengths
from .types import (
    AlignmentRun,
    AlignmentSymbol,
    DEFAULT_GAP_LENGTH_CUTOFF,
    TranslateParams,
)

@dataclass
class QueryAlignment:
    threshold: int
    runs: List[AlignmentRun]
    symbols: Optional[List[AlignmentSymbol]] = None
    run_values: Optional[np.ndarray] = None

def align_matching_statistics(
    ms: MatchingStatistics,
    k: int,
    n_kmers: int,
    alphabet_size: int,
    max_error_prob: float,
    gap_length_cutoff: int = DEFAULT_GAP_LENGTH_CUTOFF,
    threshold: Optional[int] = None,
    keep_symbols: bool = False
) -> QueryAlignment:
    """
    Run threshold estimation, derandomization, decoding and compression.

    Args:
        ms: Matching statistics of one query
        k: k-mer length of the index
        n_kmers: Number of k-mers in the index
        alphabet_size: Size of the sequence alphabet
        max_error_prob: Tolerated random match probability
        gap_length_cutoff: Gap lengths above this are GAP, else INSERTION
        threshold: Precomputed threshold for this index, skips estimation
        keep_symbols: Also return the symbol track and run values

    Returns:
        QueryAlignment with the runs and, optionally, the intermediates
    """
    if threshold is None:
        threshold = random_match_threshold(k, n_kmers, alphabet_size, max_error_prob)

    params = TranslateParams(k=k, threshold=threshold, gap_length_cutoff=gap_length_cutoff)
    runs = derandomize_ms(ms, params)
    symbols = translate_runs(ms, runs, params)
    encodings = run_lengths(symbols)

    if keep_symbols:
        return QueryAlignment(threshold, encodings, symbols, runs)
    return QueryAlignment(threshold, encodings)

__all__ = [
    'QueryAlignment',
    'align_matching_statistics',
]
