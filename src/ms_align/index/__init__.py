"""
Reference k-mer index producing k-bounded matching statistics.
"""

from .kmer_index import (
    IndexParams,
    KmerIndex,
    encode_bases,
    reverse_complement,
    ALPHABET_SIZE,
    MAX_K
)

__all__ = [
    'IndexParams',
    'KmerIndex',
    'encode_bases',
    'reverse_complement',
    'ALPHABET_SIZE',
    'MAX_K',
]
