"""
Core types and the per-query alignment entry point.
"""

from .errors import (
    AlignmentError,
    PreconditionViolation
)

from .types import (
    AlignmentSymbol,
    AlignmentRun,
    TranslateParams,
    DEFAULT_GAP_LENGTH_CUTOFF,
    symbols_from_string,
    symbols_to_string
)

from .alignment import (
    QueryAlignment,
    align_matching_statistics
)

__all__ = [
    # Errors
    'AlignmentError',
    'PreconditionViolation',

    # Types
    'AlignmentSymbol',
    'AlignmentRun',
    'TranslateParams',
    'DEFAULT_GAP_LENGTH_CUTOFF',
    'symbols_from_string',
    'symbols_to_string',

    # Per-query alignment
    'QueryAlignment',
    'align_matching_statistics',
]
