"""
Index building and query mapping pipeline.
"""

import logging
from dataclasses import dataclass, field
from multiprocessing import Pool, cpu_count
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..config.config_loader import load_config
from ..core.alignment import align_matching_statistics
from ..core.errors import AlignmentError
from ..core.types import AlignmentRun, symbols_to_string
from ..index.kmer_index import IndexParams, KmerIndex, reverse_complement

LOGGER_NAME = 'ms_align'

# ================================================================
# SETUP
# ================================================================
def parse_num_workers(num_workers_spec) -> int:
    """Parse num_workers specification."""
    if num_workers_spec == 'auto':
        return max(1, cpu_count() - 1)
    elif isinstance(num_workers_spec, str) and num_workers_spec.isdigit():
        return max(1, int(num_workers_spec))
    elif isinstance(num_workers_spec, int):
        return max(1, num_workers_spec)
    else:
        return 1

def setup_logging(config: Dict[str, Any]) -> logging.Logger:
    """Setup logging configuration."""
    log_dir = Path(config['io']['logs_dir'])
    log_dir.mkdir(parents=True, exist_ok=True)

    log_level_str = config['debug'].get('log_level', 'INFO')
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Remove existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # File handler
    fh = logging.FileHandler(log_dir / 'pipeline.log')
    fh.setLevel(log_level)

    # Console handler
    ch = logging.StreamHandler()
    ch.setLevel(log_level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    fh.setFormatter(formatter)
    ch.setFormatter(formatter)

    logger.addHandler(fh)
    logger.addHandler(ch)

    return logger

# ================================================================
# PER-QUERY MAPPING
# ================================================================
@dataclass
class MappingSettings:
    threshold: int
    max_error_prob: float
    gap_length_cutoff: int = 29
    both_strands: bool = False
    keep_symbols: bool = False

    @classmethod
    def from_config(cls, config: Dict[str, Any], index: KmerIndex) -> 'MappingSettings':
        """Settings for one index; the threshold is computed here, once."""
        translate = config.get('translate', {})
        max_error_prob = translate.get('max_error_prob', 1e-7)
        return cls(
            threshold=index.threshold(max_error_prob),
            max_error_prob=max_error_prob,
            gap_length_cutoff=translate.get('gap_length_cutoff', 29),
            both_strands=config.get('mapping', {}).get('both_strands', False),
            keep_symbols=config.get('debug', {}).get('save_symbols', False),
        )

@dataclass
class MappingResult:
    query_id: str
    strand: str
    start: int          # 1-based, inclusive, forward query coordinates
    end: int
    length: int
    match_count: int
    mismatch_count: int
    identity: float

    @classmethod
    def from_run(cls, query_id: str, strand: str, run: AlignmentRun, query_length: int) -> 'MappingResult':
        if strand == '-':
            start, end = query_length - run.end + 1, query_length - run.start + 1
        else:
            start, end = run.start, run.end
        return cls(
            query_id=query_id,
            strand=strand,
            start=start,
            end=end,
            length=run.length,
            match_count=run.match_count,
            mismatch_count=run.mismatch_count,
            identity=run.match_count / run.length,
        )

@dataclass
class QueryOutcome:
    query_id: str
    results: List[MappingResult] = field(default_factory=list)
    tracks: List[Tuple[str, str, str]] = field(default_factory=list)
    error: Optional[str] = None

def map_query(
    index: KmerIndex,
    record_id: str,
    sequence: str,
    settings: MappingSettings
) -> QueryOutcome:
    """
    Align one query against the index.

    Args:
        index: Reference index
        record_id: Query identifier
        sequence: Normalized query sequence
        settings: Threshold and decoding settings

    Returns:
        QueryOutcome with the runs of every mapped strand
    """
    outcome = QueryOutcome(record_id)
    strands = [('+', sequence)]
    if settings.both_strands:
        strands.append(('-', reverse_complement(sequence)))

    for strand, seq in strands:
        ms = index.matching_statistics(seq)
        aln = align_matching_statistics(
            ms,
            k=index.k,
            n_kmers=index.n_kmers,
            alphabet_size=index.alphabet_size,
            max_error_prob=settings.max_error_prob,
            gap_length_cutoff=settings.gap_length_cutoff,
            threshold=settings.threshold,
            keep_symbols=settings.keep_symbols,
        )
        runs = sorted(
            (MappingResult.from_run(record_id, strand, run, len(seq)) for run in aln.runs),
            key=lambda r: r.start
        )
        outcome.results.extend(runs)
        if settings.keep_symbols:
            track = symbols_to_string(aln.symbols)
            if strand == '-':
                track = track[::-1]
            outcome.tracks.append((record_id, strand, track))

    return outcome

# Worker state, set once per process by the pool initializer
_WORKER_INDEX = None
_WORKER_SETTINGS = None

def _init_worker(index: KmerIndex, settings: MappingSettings):
    global _WORKER_INDEX, _WORKER_SETTINGS
    _WORKER_INDEX = index
    _WORKER_SETTINGS = settings

def _map_record_safe(record: Tuple[str, str]) -> QueryOutcome:
    """Map one record; a failure is reported on the outcome and never raised."""
    record_id, sequence = record
    logger = logging.getLogger(LOGGER_NAME)
    try:
        return map_query(_WORKER_INDEX, record_id, sequence, _WORKER_SETTINGS)
    except AlignmentError as e:
        logger.error(f"Query {record_id} skipped: {e}")
        return QueryOutcome(record_id, error=str(e))
    except Exception as e:
        logger.error(f"Query {record_id} failed: {e}", exc_info=True)
        return QueryOutcome(record_id, error=f"{type(e).__name__}: {e}")

def map_queries(
    index: KmerIndex,
    records: Iterable[Tuple[str, str]],
    settings: MappingSettings,
    num_workers: int = 1
) -> Tuple[List[MappingResult], List[Tuple[str, str, str]], List[Tuple[str, str]]]:
    """
    Map every query record, optionally across worker processes.

    Args:
        index: Reference index
        records: (record_id, sequence) pairs
        settings: Threshold and decoding settings shared by all queries
        num_workers: Worker processes; 1 maps in this process

    Returns:
        Tuple of (results, symbol tracks, failures) in input order
    """
    if num_workers > 1:
        with Pool(processes=num_workers, initializer=_init_worker, initargs=(index, settings)) as pool:
            outcomes = pool.map(_map_record_safe, list(records), chunksize=1)
    else:
        _init_worker(index, settings)
        outcomes = [_map_record_safe(record) for record in records]

    results = []
    tracks = []
    failures = []
    for outcome in outcomes:
        results.extend(outcome.results)
        tracks.extend(outcome.tracks)
        if outcome.error is not None:
            failures.append((outcome.query_id, outcome.error))

    return results, tracks, failures

# ================================================================
# COMMANDS
# ================================================================
def run_build(config: Dict[str, Any], logger: logging.Logger) -> int:
    """
    Build an index from the configured reference files and save it.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    from ..io.fasta_reader import read_sequences

    reference_files = config['io'].get('reference_files') or []
    index_path = config['io'].get('index_path')
    if not reference_files or not index_path:
        logger.error("Building an index needs io.reference_files and io.index_path")
        return 1

    if config['validation']['validate_inputs']:
        from ..diagnostics.validation import validate_inputs
        is_valid, errors = validate_inputs(reference_files, config)
        if not is_valid:
            for error in errors:
                logger.error(f"Validation error: {error}")
            return 1

    params = IndexParams(
        k=config['index']['k'],
        add_revcomp=config['index'].get('add_revcomp', False),
    )

    try:
        def sequences():
            for path in reference_files:
                logger.info(f"Reading references from {path}")
                for _, seq in read_sequences(path):
                    yield seq

        index = KmerIndex.build(sequences(), params)
        saved = index.save(index_path)
    except Exception as e:
        logger.error(f"Index construction failed: {e}", exc_info=True)
        return 1

    logger.info(f"Index with {index.n_kmers} {index.k}-mers written to {saved}")
    return 0

def run_map(config: Dict[str, Any], logger: logging.Logger) -> int:
    """
    Map the configured query files against a saved index.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    from ..diagnostics.performance import PerformanceMonitor
    from ..io.fasta_reader import read_sequences
    from ..io.results_writer import save_run_report, write_runs_tsv, write_symbol_tracks

    query_files = config['io'].get('query_files') or []
    index_path = config['io'].get('index_path')
    if not query_files or not index_path:
        logger.error("Mapping needs io.query_files and io.index_path")
        return 1

    if config['validation']['validate_inputs']:
        from ..diagnostics.validation import validate_inputs
        # Empty query records are reported per query by map_queries
        is_valid, errors = validate_inputs(query_files, config, allow_empty_records=True)
        if not is_valid:
            for error in errors:
                logger.error(f"Validation error: {error}")
            return 1

    perf_monitor = PerformanceMonitor()
    perf_monitor.start()

    try:
        index = KmerIndex.load(index_path)
        settings = MappingSettings.from_config(config, index)
        logger.info(
            f"Random match threshold {settings.threshold} "
            f"(k={index.k}, n_kmers={index.n_kmers}, max_error_prob={settings.max_error_prob})"
        )

        num_workers = parse_num_workers(config['performance'].get('num_workers', 1))
        if not config['performance'].get('use_multiprocessing', True):
            num_workers = 1

        records = []
        for path in query_files:
            records.extend(read_sequences(path))
        logger.info(f"Mapping {len(records)} queries with {num_workers} worker(s)")

        results, tracks, failures = map_queries(index, records, settings, num_workers)
        perf_monitor.count('queries', len(records))
        perf_monitor.count('query_bases', sum(len(seq) for _, seq in records))
        perf_monitor.count('runs', len(results))
        perf_monitor.count('failed_queries', len(failures))

        if config['debug'].get('verbose', False):
            per_query = {}
            for result in results:
                per_query[result.query_id] = per_query.get(result.query_id, 0) + 1
            for record_id, _ in records:
                logger.info(f"{record_id}: {per_query.get(record_id, 0)} run(s)")

        output_file = config['io'].get('output_file')
        rows = write_runs_tsv(output_file, results)
        if output_file:
            logger.info(f"Wrote {rows} alignment runs to {output_file}")

        output_dir = Path(config['io']['output_dir'])
        report_path = save_run_report(
            str(output_dir / 'run_report.json'),
            metadata={
                'index': str(index_path),
                'query_files': [str(p) for p in query_files],
                'k': index.k,
                'n_kmers': index.n_kmers,
                'threshold': settings.threshold,
            },
            results=results,
            failures=failures,
            config=config,
        )
        logger.info(f"Run report saved to {report_path}")

        if settings.keep_symbols:
            write_symbol_tracks(str(output_dir / 'symbols.txt'), tracks)

    except Exception as e:
        logger.error(f"Mapping failed with error: {e}", exc_info=True)
        return 1
    finally:
        perf_monitor.stop()

    report = perf_monitor.get_report()
    logger.info(f"Total time: {report['total_time_seconds']:.2f}s")
    logger.info(f"Peak memory: {report['peak_memory_mb']:.1f} MB")
    perf_monitor.save_report(Path(config['io']['logs_dir']) / 'performance_report.json')

    if failures:
        logger.warning(f"{len(failures)} of {len(records)} queries could not be aligned")
    return 0

def main(
    config_path: Optional[str] = None,
    overrides: Optional[Dict] = None,
    command: str = 'map'
) -> int:
    """Pipeline entry point."""
    from ..diagnostics.validation import validate_configuration

    try:
        config = load_config(config_path, overrides)
    except Exception as e:
        logging.getLogger(LOGGER_NAME).error(f"Could not load configuration: {e}")
        return 1

    logger = setup_logging(config)
    logger.info(f"Configuration loaded from {config.get('_source', 'default')}")

    is_valid, errors = validate_configuration(config)
    if not is_valid:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1

    if command == 'build':
        return run_build(config, logger)
    elif command == 'map':
        return run_map(config, logger)

    logger.error(f"Unknown command: {command}")
    return 1

__all__ = [
    'MappingSettings',
    'MappingResult',
    'QueryOutcome',
    'parse_num_workers',
    'setup_logging',
    'map_query',
    'map_queries',
    'run_build',
    'run_map',
    'main',
]
