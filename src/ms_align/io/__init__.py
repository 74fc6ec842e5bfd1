from .fasta_reader import (
    normalize_sequence,
    read_sequences,
    validate_fasta_file,
    get_fasta_stats
)

from .results_writer import (
    write_runs_tsv,
    save_run_report,
    write_symbol_tracks
)

__all__ = [
    # Sequence reader functions
    'normalize_sequence',
    'read_sequences',
    'validate_fasta_file',
    'get_fasta_stats',

    # Results writer functions
    'write_runs_tsv',
    'save_run_report',
    'write_symbol_tracks',
]
