"""
k-mer index over reference sequences with k-bounded matching statistics.

Every k-mer of the references is stored reversed and packed two bits
per base into an int64 code, left-aligned so that the codes of all
k-mers sharing a suffix form one contiguous range of the sorted code
array. Membership of any string of length <= k then reduces to a
binary search. Windows shorter than k at the ends of reference
fragments are kept separately as (length, code) prefixes.
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Set, Tuple, Union

import numpy as np

from ..algorithms.threshold import random_match_threshold

logger = logging.getLogger(__name__)

INDEX_FORMAT_VERSION = 1
MAX_K = 31      # 2 bits per base in a signed 64-bit code
ALPHABET_SIZE = 4

BASE_CODES = {'A': 0, 'C': 1, 'G': 2, 'T': 3}
COMPLEMENT = str.maketrans('ACGT', 'TGCA')
FRAGMENT_RE = re.compile(r'[ACGT]+')

# Byte -> 2-bit code lookup, 255 marks bases outside ACGT
_LOOKUP = np.full(256, 255, dtype=np.uint8)
for _base, _code in BASE_CODES.items():
    _LOOKUP[ord(_base)] = _code

# ================================================================
# PARAMETERS
# ================================================================
@dataclass
class IndexParams:
    k: int = 31
    add_revcomp: bool = False

    def validate(self):
        if not 2 <= self.k <= MAX_K:
            raise ValueError(f"k must be in [2, {MAX_K}], got {self.k}")

# ================================================================
# ENCODING HELPERS
# ================================================================
def encode_bases(seq: str) -> np.ndarray:
    """Map a sequence to 2-bit codes, 255 for anything outside ACGT."""
    raw = np.frombuffer(seq.encode('ascii', errors='replace'), dtype=np.uint8)
    return _LOOKUP[raw]


def reverse_complement(seq: str) -> str:
    return seq.translate(COMPLEMENT)[::-1]


def _reversed_window_codes(rev: np.ndarray, k: int) -> np.ndarray:
    """Codes of all full k-windows of an already reversed fragment."""
    n_windows = rev.size - k + 1
    codes = np.zeros(n_windows, dtype=np.int64)
    for t in range(k):
        shift = 2 * (k - 1 - t)
        codes += rev[t:t + n_windows].astype(np.int64) << shift
    return codes


def _tail_prefixes(rev: np.ndarray, k: int) -> Set[Tuple[int, int]]:
    """(length, code) for every prefix of the windows shorter than k."""
    prefixes = set()
    first_tail = max(0, rev.size - k + 1)
    for j in range(first_tail, rev.size):
        code = 0
        for depth, base in enumerate(rev[j:].tolist(), start=1):
            code |= base << (2 * (k - depth))
            prefixes.add((depth, code))
    return prefixes

# ================================================================
# INDEX
# ================================================================
class KmerIndex:
    """Queryable k-mer index returning k-bounded matching statistics."""

    def __init__(
        self,
        k: int,
        kmers: np.ndarray,
        tail_prefixes: Set[Tuple[int, int]],
        add_revcomp: bool = False
    ):
        self.k = k
        self.kmers = kmers
        self.tail_prefixes = tail_prefixes
        self.add_revcomp = add_revcomp

    @property
    def n_kmers(self) -> int:
        """Number of distinct k-mers in the index."""
        return int(self.kmers.size)

    @property
    def alphabet_size(self) -> int:
        return ALPHABET_SIZE

    def __repr__(self):
        return f"KmerIndex(k={self.k}, n_kmers={self.n_kmers}, add_revcomp={self.add_revcomp})"

    @classmethod
    def build(cls, sequences: Iterable[str], params: Optional[IndexParams] = None) -> 'KmerIndex':
        """
        Build an index from normalized reference sequences.

        Sequences are split at characters outside ACGT; no k-mer spans
        such a character.

        Args:
            sequences: Uppercase reference sequences
            params: k and reverse complement handling

        Returns:
            KmerIndex
        """
        params = params or IndexParams()
        params.validate()
        k = params.k

        chunks = []
        tails = set()
        n_fragments = 0
        for seq in sequences:
            strands = [seq, reverse_complement(seq)] if params.add_revcomp else [seq]
            for strand in strands:
                for fragment in FRAGMENT_RE.findall(strand):
                    n_fragments += 1
                    rev = encode_bases(fragment[::-1])
                    if rev.size >= k:
                        chunks.append(_reversed_window_codes(rev, k))
                    tails |= _tail_prefixes(rev, k)

        if chunks:
            kmers = np.unique(np.concatenate(chunks))
        else:
            kmers = np.zeros(0, dtype=np.int64)

        logger.info(f"Indexed {kmers.size} distinct {k}-mers from {n_fragments} fragment(s)")
        return cls(k, kmers, tails, params.add_revcomp)

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------
    def _occurs(self, code: int, length: int) -> bool:
        shift = 2 * (self.k - length)
        prefix = (code >> shift) << shift
        if (length, prefix) in self.tail_prefixes:
            return True
        lo = np.searchsorted(self.kmers, prefix, side='left')
        hi = np.searchsorted(self.kmers, prefix + (1 << shift), side='left')
        return bool(hi > lo)

    def matching_statistics(self, query: str) -> np.ndarray:
        """
        k-bounded matching statistics of a query.

        Entry i is the length, capped at k, of the longest suffix of
        query[:i+1] that occurs in the references. Characters outside
        ACGT get 0 and break any ongoing match.

        Args:
            query: Normalized query sequence

        Returns:
            int64 array with one value per query position
        """
        k = self.k
        bases = encode_bases(query)
        n = bases.size
        ms = np.zeros(n, dtype=np.int64)
        if n == 0:
            return ms

        valid = bases != 255
        values = np.where(valid, bases, 0).astype(np.int64)

        # Reversed window code ending at each position
        codes = np.zeros(n, dtype=np.int64)
        for j in range(min(k, n)):
            codes[j:] += values[:n - j] << (2 * (k - 1 - j))

        codes_list = codes.tolist()
        valid_list = valid.tolist()
        prev = 0
        streak = 0
        for i in range(n):
            if not valid_list[i]:
                streak = 0
                prev = 0
                continue
            streak += 1
            length = min(prev + 1, k, streak)
            while length > 0 and not self._occurs(codes_list[i], length):
                length -= 1
            ms[i] = length
            prev = length

        return ms

    def threshold(self, max_error_prob: float) -> int:
        """Random match threshold for this index."""
        return random_match_threshold(self.k, self.n_kmers, self.alphabet_size, max_error_prob)

    # ------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------
    def save(self, path: Union[str, Path]) -> str:
        """
        Save the index with np.savez_compressed.

        Returns:
            Path of the written file (numpy appends .npz when missing)
        """
        path = str(path)
        if not path.endswith('.npz'):
            path += '.npz'
        Path(path).parent.mkdir(parents=True, exist_ok=True)

        if self.tail_prefixes:
            tail_arr = np.array(sorted(self.tail_prefixes), dtype=np.int64)
        else:
            tail_arr = np.zeros((0, 2), dtype=np.int64)

        np.savez_compressed(
            path,
            meta=json.dumps({
                "format_version": INDEX_FORMAT_VERSION,
                "k": int(self.k),
                "add_revcomp": bool(self.add_revcomp),
                "n_kmers": self.n_kmers,
            }),
            kmers=self.kmers,
            tails=tail_arr,
        )
        logger.info(f"Saved index to {path}")
        return path

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'KmerIndex':
        """Load an index written by save()."""
        path = str(path)
        if not path.endswith('.npz') and not Path(path).exists():
            path += '.npz'

        with np.load(path) as data:
            meta = json.loads(str(data['meta'].tolist()))
            if meta.get('format_version') != INDEX_FORMAT_VERSION:
                raise ValueError(
                    f"Unsupported index format {meta.get('format_version')} in {path}"
                )
            kmers = data['kmers'].astype(np.int64)
            tails = {(int(length), int(code)) for length, code in data['tails'].tolist()}

        logger.info(f"Loaded index from {path} (k={meta['k']}, n_kmers={kmers.size})")
        return cls(meta['k'], kmers, tails, meta['add_revcomp'])


__all__ = [
    'IndexParams',
    'KmerIndex',
    'encode_bases',
    'reverse_complement',
    'ALPHABET_SIZE',
    'MAX_K',
]
