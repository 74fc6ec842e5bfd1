"""
Random match threshold estimation.

The longest run of chance matches against an index of n_kmers
k-mers is modelled as the maximum of n_kmers independent trials,
each extending with probability 1/alphabet_size. The threshold is
the shortest run length whose cumulative probability of arising by
chance stays below the tolerated error.
"""

import math


def log_rm_max_cdf(t: int, alphabet_size: int, n_kmers: int) -> float:
    """
    Log of the probability that no chance run exceeds length t.

    Args:
        t: Candidate run length
        alphabet_size: Size of the sequence alphabet (4 for DNA)
        n_kmers: Number of k-mers in the index

    Returns:
        n_kmers * log1p(-(1/alphabet_size)^(t+1))
    """
    return n_kmers * math.log1p(-math.pow(1.0 / alphabet_size, t + 1))


def random_match_threshold(
    k: int,
    n_kmers: int,
    alphabet_size: int,
    max_error_prob: float
) -> int:
    """
    Smallest run length unlikely to be a random match.

    Args:
        k: k-mer length of the index
        n_kmers: Number of k-mers in the index
        alphabet_size: Size of the sequence alphabet
        max_error_prob: Tolerated probability that a run at or above
            the threshold arose by chance, in (0, 1)

    Returns:
        Threshold in [1, k]. Returns k when no shorter candidate
        passes, including the degenerate case k < 2.
    """
    if not 0.0 < max_error_prob < 1.0:
        raise ValueError(f"max_error_prob must be in (0, 1), got {max_error_prob}")

    bound = math.log1p(-max_error_prob)
    for i in range(1, k):
        if log_rm_max_cdf(i, alphabet_size, n_kmers) > bound:
            return i
    return k


# Name used at the pipeline boundary
estimate_threshold = random_match_threshold

__all__ = [
    'log_rm_max_cdf',
    'random_match_threshold',
    'estimate_threshold',
]
