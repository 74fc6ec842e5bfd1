"""
ms-align: local alignment of queries against reference k-mer indexes
from k-bounded matching statistics.
"""

# Version info - keep at top
__version__ = "0.1.0"
__description__ = "Local alignment runs from k-bounded matching statistics"

# core first: core.alignment imports from algorithms
from .core import *
from .algorithms import *
from .index import *

from .pipeline.main_pipeline import (
    MappingResult,
    MappingSettings,
    map_queries,
    map_query,
)

__all__ = [
    '__version__',

    # Types and errors
    'AlignmentError',
    'PreconditionViolation',
    'AlignmentSymbol',
    'AlignmentRun',
    'TranslateParams',
    'QueryAlignment',
    'align_matching_statistics',

    # Algorithms
    'random_match_threshold',
    'log_rm_max_cdf',
    'derandomize_ms',
    'translate_runs',
    'run_lengths',

    # Index
    'KmerIndex',
    'IndexParams',

    # Pipeline
    'MappingResult',
    'MappingSettings',
    'map_query',
    'map_queries',
]
