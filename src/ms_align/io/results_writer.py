"""
Results writing utilities for the mapping pipeline.
"""

import contextlib
import csv
import json
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

TSV_HEADER = [
    'query', 'strand', 'q.start', 'q.end', 'length',
    'matches', 'mismatches', 'identity',
]

def _result_row(result) -> List:
    return [
        result.query_id,
        result.strand,
        result.start,
        result.end,
        result.length,
        result.match_count,
        result.mismatch_count,
        f"{result.identity:.4f}",
    ]

def write_runs_tsv(path: Optional[str], results: Iterable) -> int:
    """
    Write mapping results as a tab-separated table.

    Args:
        path: Output file, or None for stdout
        results: MappingResult records

    Returns:
        Number of rows written
    """
    if path is None:
        target = contextlib.nullcontext(sys.stdout)
    else:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        target = open(path, 'w', newline='')

    rows = 0
    with target as f:
        writer = csv.writer(f, delimiter='\t', lineterminator='\n')
        writer.writerow(TSV_HEADER)
        for result in results:
            writer.writerow(_result_row(result))
            rows += 1
    return rows

def save_run_report(
    path: str,
    metadata: Dict[str, Any],
    results: List,
    failures: List[Tuple[str, str]],
    config: Optional[Dict[str, Any]] = None
) -> str:
    """
    Save a JSON report of one mapping run.

    Args:
        path: Output JSON file
        metadata: Index and input description
        results: MappingResult records
        failures: (query_id, error message) for queries that failed
        config: Optional configuration dictionary

    Returns:
        Path of the written report
    """
    queries = {result.query_id for result in results}
    report = {
        'metadata': dict(metadata, timestamp=datetime.now().isoformat()),
        'summary': {
            'queries_with_runs': len(queries),
            'total_runs': len(results),
            'aligned_bases': sum(result.length for result in results),
            'matched_bases': sum(result.match_count for result in results),
            'failed_queries': len(failures),
        },
        'runs': [asdict(result) for result in results],
        'failures': [{'query': query_id, 'error': error} for query_id, error in failures],
    }

    if config:
        report['configuration'] = {
            k: v for k, v in config.items()
            if k not in ['_source'] and not k.startswith('__')
        }

    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(report, f, indent=2)
    return str(path)

def write_symbol_tracks(path: str, tracks: Iterable[Tuple[str, str, str]]) -> str:
    """
    Write decoded symbol tracks for inspection.

    Args:
        path: Output file
        tracks: (query_id, strand, symbol string) triples
    """
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        for query_id, strand, symbols in tracks:
            f.write(f">{query_id} {strand}\n{symbols}\n")
    return str(path)

__all__ = [
    'TSV_HEADER',
    'write_runs_tsv',
    'save_run_report',
    'write_symbol_tracks',
]
