"""
Sequence reading for references and queries.
"""

import gzip
import os
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from Bio import SeqIO

FORMAT_BY_EXTENSION = {
    '.fasta': 'fasta', '.fa': 'fasta', '.fna': 'fasta', '.fas': 'fasta',
    '.fastq': 'fastq', '.fq': 'fastq',
}

def normalize_sequence(seq: str) -> str:
    """Uppercase a sequence and map U to T. Other characters pass through."""
    return seq.upper().replace('U', 'T')

def detect_format(filepath: str) -> str:
    """Guess fasta/fastq from the file name, ignoring a trailing .gz."""
    name = filepath[:-3] if filepath.endswith('.gz') else filepath
    ext = os.path.splitext(name)[1].lower()
    return FORMAT_BY_EXTENSION.get(ext, 'fasta')

@contextmanager
def open_sequence_file(filepath: str):
    """Open a plain or gzip-compressed sequence file in text mode."""
    if filepath.endswith('.gz'):
        handle = gzip.open(filepath, 'rt')
    else:
        handle = open(filepath, 'r')
    try:
        yield handle
    finally:
        handle.close()

def read_sequences(filepath: str, fmt: Optional[str] = None) -> Iterator[Tuple[str, str]]:
    """
    Yield normalized sequences from a FASTA or FASTQ file.

    Args:
        filepath: Path to the sequence file, optionally gzip-compressed
        fmt: 'fasta' or 'fastq'; guessed from the extension when omitted

    Yields:
        Tuples of (record_id, normalized_sequence)
    """
    fmt = fmt or detect_format(filepath)
    with open_sequence_file(filepath) as handle:
        for record in SeqIO.parse(handle, fmt):
            yield record.id, normalize_sequence(str(record.seq))

def validate_fasta_file(filepath: str, allow_empty_records: bool = False) -> Tuple[bool, str]:
    """
    Validate if a file is a readable sequence file.

    Args:
        filepath: Path to the FASTA/FASTQ file
        allow_empty_records: Accept records without sequence. Query files
            use this; the mapping step reports such records on their own.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not os.path.exists(filepath):
        return False, f"File does not exist: {filepath}"

    if not os.path.isfile(filepath):
        return False, f"Not a file: {filepath}"

    if os.path.getsize(filepath) == 0:
        return False, f"File is empty: {filepath}"

    fmt = detect_format(filepath)
    marker = '>' if fmt == 'fasta' else '@'
    try:
        with open_sequence_file(filepath) as f:
            first_line = f.readline().strip()
            if not first_line.startswith(marker):
                return False, f"File does not start with '{marker}' character: {filepath}"
    except (UnicodeDecodeError, OSError):
        return False, f"File is not a valid text file: {filepath}"

    try:
        n_records = 0
        for i, (record_id, seq) in enumerate(read_sequences(filepath, fmt)):
            if len(seq) == 0 and not allow_empty_records:
                return False, f"Sequence {i+1} ({record_id}) is empty in file: {filepath}"
            n_records += 1

        if n_records == 0:
            return False, f"No sequences found in file: {filepath}"

        return True, f"Valid {fmt.upper()} file with {n_records} sequence(s)"

    except Exception as e:
        return False, f"Error parsing {fmt.upper()} file: {str(e)}"

def get_fasta_stats(filepath: str) -> dict:
    """
    Get statistics about a sequence file.

    Args:
        filepath: Path to FASTA/FASTQ file

    Returns:
        Dictionary with file statistics
    """
    stats = {
        'filepath': filepath,
        'filename': os.path.basename(filepath),
        'size_bytes': os.path.getsize(filepath),
        'num_sequences': 0,
        'total_length': 0,
        'min_length': 0,
        'max_length': 0,
        'avg_length': 0,
        'acgt_fraction': 0,
    }

    lengths = []
    acgt = 0
    for _, seq in read_sequences(filepath):
        lengths.append(len(seq))
        acgt += sum(seq.count(base) for base in 'ACGT')

    if lengths:
        stats['num_sequences'] = len(lengths)
        stats['total_length'] = sum(lengths)
        stats['min_length'] = min(lengths)
        stats['max_length'] = max(lengths)
        stats['avg_length'] = stats['total_length'] / len(lengths)
        stats['acgt_fraction'] = acgt / stats['total_length'] if stats['total_length'] else 0

    return stats

__all__ = [
    'normalize_sequence',
    'detect_format',
    'open_sequence_file',
    'read_sequences',
    'validate_fasta_file',
    'get_fasta_stats',
]
