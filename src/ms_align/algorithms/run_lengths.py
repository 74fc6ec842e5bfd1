"""
Run-length compression of alignment symbols.
"""

from typing import List, Sequence

from ..core.types import AlignmentRun, SymbolLike, as_symbol


def run_lengths(aln: Sequence[SymbolLike]) -> List[AlignmentRun]:
    """
    Compress a symbol track into alignment runs.

    A run is a maximal stretch of symbols other than GAP and
    UNDETERMINED. MATCH and RANDOM_BOUNDARY count as matches, every
    other aligned symbol as a mismatch.

    Args:
        aln: AlignmentSymbol members or their one-character codes

    Returns:
        Runs in 1-based inclusive coordinates, sorted by start
    """
    symbols = [as_symbol(s) for s in aln]
    n = len(symbols)
    encodings = []

    i = 0
    match_start = False
    while i < n:
        match_start = symbols[i].is_aligned and not match_start
        if match_start:
            start = i
            matches = 0
            while i < n and symbols[i].is_aligned:
                matches += symbols[i].is_match
                i += 1
            encodings.append(AlignmentRun(start + 1, i, matches, i - start - matches))
            match_start = False
        else:
            i += 1

    return encodings


__all__ = [
    'run_lengths',
]
