from .threshold import *
from .derandomize import *
from .translate import *
from .run_lengths import *

__all__ = [
    # Threshold estimation
    'log_rm_max_cdf',
    'random_match_threshold',
    'estimate_threshold',

    # Derandomization
    'ms_to_run',
    'derandomize_ms',
    'check_matching_statistics',

    # Decoding
    'MIN_DECODE_LENGTH',
    'measure_gap',
    'run_to_aln',
    'translate_runs',

    # Run-length compression
    'run_lengths',
]
