"""
Input and configuration validation.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from ..index.kmer_index import MAX_K

def validate_inputs(
    sequence_files: Iterable[str],
    config: Dict,
    allow_empty_records: bool = False
) -> Tuple[bool, List[str]]:
    """
    Validate sequence files and the output location.

    Args:
        sequence_files: Reference or query files
        config: Pipeline configuration
        allow_empty_records: Passed on to validate_fasta_file

    Returns:
        Tuple of (is_valid, error_messages)
    """
    errors = []

    from ..io.fasta_reader import validate_fasta_file

    for i, path in enumerate(sequence_files, start=1):
        valid, msg = validate_fasta_file(str(path), allow_empty_records)
        if not valid:
            errors.append(f"Sequence file {i}: {msg}")

    output_dir = config.get('io', {}).get('output_dir', 'Results')
    try:
        Path(output_dir).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        errors.append(f"Cannot create output directory {output_dir}: {e}")

    return len(errors) == 0, errors

def validate_configuration(config: Dict) -> Tuple[bool, List[str]]:
    """
    Validate pipeline configuration.

    Args:
        config: Pipeline configuration

    Returns:
        Tuple of (is_valid, error_messages)
    """
    errors = []

    required_sections = ['index', 'translate', 'performance', 'io']
    for section in required_sections:
        if section not in config:
            errors.append(f"Missing required section: {section}")

    index = config.get('index', {})
    k = index.get('k')
    if not isinstance(k, int) or isinstance(k, bool) or not 2 <= k <= MAX_K:
        errors.append(f"index.k must be an integer in [2, {MAX_K}], got {k!r}")

    translate = config.get('translate', {})
    prob = translate.get('max_error_prob')
    if not isinstance(prob, (int, float)) or isinstance(prob, bool) or not 0 < prob < 1:
        errors.append(f"translate.max_error_prob must be in (0, 1), got {prob!r}")

    cutoff = translate.get('gap_length_cutoff')
    if not isinstance(cutoff, int) or isinstance(cutoff, bool) or cutoff < 0:
        errors.append(f"translate.gap_length_cutoff must be a non-negative integer, got {cutoff!r}")

    workers = config.get('performance', {}).get('num_workers', 1)
    if workers != 'auto' and (not isinstance(workers, int) or isinstance(workers, bool) or workers < 1):
        errors.append(f"performance.num_workers must be 'auto' or a positive integer, got {workers!r}")

    return len(errors) == 0, errors

__all__ = [
    'validate_inputs',
    'validate_configuration',
]
