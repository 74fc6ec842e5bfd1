"""
Integration tests for the mapping pipeline.
"""
import csv
import json

import numpy as np
import pytest

from ms_align.index.kmer_index import IndexParams, KmerIndex, reverse_complement
from ms_align.pipeline.main_pipeline import (
    MappingSettings,
    MappingResult,
    map_queries,
    map_query,
    main as pipeline_main,
    parse_num_workers,
)
from ms_align.scripts.run_pipeline import main as cli_main

def random_dna(length, alphabet="ACGT", seed=0):
    rng = np.random.RandomState(seed)
    return ''.join(rng.choice(list(alphabet), size=length))

def create_test_fasta(filename, records):
    """Create a test FASTA file."""
    with open(filename, 'w') as f:
        for record_id, sequence in records:
            f.write(f">{record_id}\n")
            # Write in lines of 80 characters
            for i in range(0, len(sequence), 80):
                f.write(sequence[i:i+80] + "\n")

REFERENCE = random_dna(2000, seed=11)
# A/C only, so that its reverse complement shares no base with it
AC_REFERENCE = random_dna(2000, "AC", seed=12)

def settings_for(index, **kwargs):
    return MappingSettings(threshold=index.threshold(1e-7), max_error_prob=1e-7, **kwargs)

@pytest.fixture(scope="module")
def index():
    return KmerIndex.build([REFERENCE], IndexParams(k=31))

@pytest.fixture(scope="module")
def ac_index():
    return KmerIndex.build([AC_REFERENCE], IndexParams(k=31))

# ================================================================
# Per-query mapping
# ================================================================
def test_contained_query_maps_as_one_run(index):
    outcome = map_query(index, "q1", REFERENCE[300:500], settings_for(index))
    assert outcome.error is None
    assert outcome.results == [
        MappingResult("q1", "+", 4, 199, 196, 196, 0, 1.0)
    ]

def test_disjoint_query_has_no_runs(ac_index):
    outcome = map_query(ac_index, "q2", random_dna(120, "GT", seed=3), settings_for(ac_index))
    assert outcome.results == []

def test_reverse_strand_coordinates(ac_index):
    query = reverse_complement(AC_REFERENCE[500:700])
    outcome = map_query(ac_index, "rc", query, settings_for(ac_index, both_strands=True))
    assert [(r.strand, r.start, r.end, r.mismatch_count) for r in outcome.results] == [
        ("-", 2, 197, 0)
    ]

def test_symbol_tracks_are_kept_on_request(index):
    settings = settings_for(index, keep_symbols=True)
    outcome = map_query(index, "q1", REFERENCE[300:400], settings)
    assert outcome.tracks == [("q1", "+", "   " + "M" * 96 + " ")]

def test_map_queries_isolates_failures(index):
    records = [
        ("good", REFERENCE[100:300]),
        ("short", "ACG"),
        ("empty", ""),
        ("good2", REFERENCE[1000:1100]),
    ]
    results, tracks, failures = map_queries(index, records, settings_for(index))
    assert [r.query_id for r in results] == ["good", "good2"]
    assert [query_id for query_id, _ in failures] == ["short", "empty"]
    assert tracks == []

def test_map_queries_with_worker_pool(index):
    records = [(f"q{i}", REFERENCE[i * 100:i * 100 + 150]) for i in range(6)]
    serial, _, _ = map_queries(index, records, settings_for(index), num_workers=1)
    parallel, _, failures = map_queries(index, records, settings_for(index), num_workers=2)
    assert failures == []
    assert parallel == serial
    assert [r.query_id for r in parallel] == [f"q{i}" for i in range(6)]

def test_parse_num_workers():
    assert parse_num_workers(3) == 3
    assert parse_num_workers("2") == 2
    assert parse_num_workers(0) == 1
    assert parse_num_workers("auto") >= 1
    assert parse_num_workers(None) == 1

# ================================================================
# End-to-end
# ================================================================
def _common_overrides(tmp_path):
    return {
        'io': {
            'output_dir': str(tmp_path / 'Results'),
            'logs_dir': str(tmp_path / 'Logs'),
        }
    }

def test_pipeline_build_and_map(tmp_path):
    ref_fa = tmp_path / "ref.fa"
    query_fa = tmp_path / "queries.fa"
    create_test_fasta(ref_fa, [("chr1", REFERENCE[:1000]), ("chr2", REFERENCE[1000:])])
    create_test_fasta(query_fa, [
        ("hit", REFERENCE[1200:1400]),
        ("miss", "ACG"),
    ])

    overrides = _common_overrides(tmp_path)
    overrides['io'].update({
        'reference_files': [str(ref_fa)],
        'index_path': str(tmp_path / "ref.npz"),
    })
    assert pipeline_main(overrides=overrides, command='build') == 0
    assert (tmp_path / "ref.npz").exists()

    overrides = _common_overrides(tmp_path)
    overrides['io'].update({
        'query_files': [str(query_fa)],
        'index_path': str(tmp_path / "ref.npz"),
        'output_file': str(tmp_path / "runs.tsv"),
    })
    overrides['performance'] = {'use_multiprocessing': False}
    overrides['debug'] = {'save_symbols': True}
    assert pipeline_main(overrides=overrides, command='map') == 0

    with open(tmp_path / "runs.tsv") as f:
        rows = list(csv.reader(f, delimiter='\t'))
    assert rows[0] == ['query', 'strand', 'q.start', 'q.end', 'length', 'matches', 'mismatches', 'identity']
    assert rows[1:] == [['hit', '+', '4', '199', '196', '196', '0', '1.0000']]

    with open(tmp_path / "Results" / "run_report.json") as f:
        report = json.load(f)
    assert report['summary']['total_runs'] == 1
    assert report['summary']['failed_queries'] == 1
    assert report['failures'][0]['query'] == 'miss'
    assert report['metadata']['threshold'] == 17

    assert (tmp_path / "Results" / "symbols.txt").exists()
    assert (tmp_path / "Logs" / "pipeline.log").exists()
    assert (tmp_path / "Logs" / "performance_report.json").exists()

def test_cli_build_and_map(tmp_path):
    ref_fa = tmp_path / "ref.fa"
    query_fq = tmp_path / "reads.fq"
    create_test_fasta(ref_fa, [("ref", AC_REFERENCE)])
    with open(query_fq, 'w') as f:
        read = reverse_complement(AC_REFERENCE[500:700])
        f.write(f"@read1\n{read}\n+\n{'I' * len(read)}\n")

    logs = ['--logs-dir', str(tmp_path / 'Logs'), '--output-dir', str(tmp_path / 'Results')]
    assert cli_main(['build', '-r', str(ref_fa), '-o', str(tmp_path / 'ac')] + logs) == 0
    assert cli_main([
        'map', '-i', str(tmp_path / 'ac.npz'), '-q', str(query_fq),
        '-o', str(tmp_path / 'runs.tsv'), '--both-strands', '--no-multiprocessing',
    ] + logs) == 0

    with open(tmp_path / 'runs.tsv') as f:
        rows = list(csv.reader(f, delimiter='\t'))
    assert rows[1:] == [['read1', '-', '2', '197', '196', '196', '0', '1.0000']]

def test_pipeline_rejects_missing_inputs(tmp_path):
    overrides = _common_overrides(tmp_path)
    overrides['io'].update({
        'query_files': [str(tmp_path / "missing.fa")],
        'index_path': str(tmp_path / "ref.npz"),
    })
    assert pipeline_main(overrides=overrides, command='map') == 1

def test_pipeline_rejects_invalid_configuration(tmp_path):
    overrides = _common_overrides(tmp_path)
    overrides['translate'] = {'max_error_prob': 1.5}
    assert pipeline_main(overrides=overrides, command='map') == 1

def test_cli_version(capsys):
    assert cli_main(['--version']) == 0
    assert 'ms-align' in capsys.readouterr().out

def test_empty_query_record_does_not_stop_the_batch(tmp_path):
    """An empty record is a per-query failure, the records around it still map."""
    ref_fa = tmp_path / "ref.fa"
    query_fa = tmp_path / "queries.fa"
    create_test_fasta(ref_fa, [("ref", REFERENCE)])
    create_test_fasta(query_fa, [
        ("hit", REFERENCE[200:400]),
        ("empty", ""),
        ("hit2", REFERENCE[1500:1600]),
    ])

    overrides = _common_overrides(tmp_path)
    overrides['io'].update({'reference_files': [str(ref_fa)], 'index_path': str(tmp_path / "ref.npz")})
    assert pipeline_main(overrides=overrides, command='build') == 0

    overrides = _common_overrides(tmp_path)
    overrides['io'].update({
        'query_files': [str(query_fa)],
        'index_path': str(tmp_path / "ref.npz"),
        'output_file': str(tmp_path / "runs.tsv"),
    })
    assert pipeline_main(overrides=overrides, command='map') == 0

    with open(tmp_path / "runs.tsv") as f:
        rows = list(csv.reader(f, delimiter='\t'))
    assert [row[:4] for row in rows[1:]] == [['hit', '+', '4', '199'], ['hit2', '+', '4', '99']]

    with open(tmp_path / "Results" / "run_report.json") as f:
        report = json.load(f)
    assert [failure['query'] for failure in report['failures']] == ['empty']

    with open(tmp_path / "Logs" / "performance_report.json") as f:
        counters = json.load(f)['counters']
    assert counters['queries'] == 3
    assert counters['runs'] == 2
    assert counters['failed_queries'] == 1

def test_empty_reference_record_is_rejected(tmp_path):
    ref_fa = tmp_path / "ref.fa"
    create_test_fasta(ref_fa, [("chr1", REFERENCE), ("blank", "")])
    overrides = _common_overrides(tmp_path)
    overrides['io'].update({'reference_files': [str(ref_fa)], 'index_path': str(tmp_path / "ref.npz")})
    assert pipeline_main(overrides=overrides, command='build') == 1
    assert not (tmp_path / "ref.npz").exists()

# ================================================================
# Unrelated random queries
# ================================================================
def test_long_random_query_has_no_runs(index):
    """A random query long enough for its countdown to exceed the gap cutoff."""
    settings = settings_for(index, keep_symbols=True)
    for seed in range(100, 105):
        query = random_dna(300, seed=seed)
        assert index.matching_statistics(query).max() < settings.threshold
        outcome = map_query(index, f"rand{seed}", query, settings)
        assert outcome.results == []
        assert set(outcome.tracks[0][2]) <= {' ', '-'}

def test_short_random_query_reports_insertion_run(index):
    """
    Below the gap cutoff the countdown is filled with insertions: a short
    unrelated query ends in a run with no matches.
    """
    settings = settings_for(index, keep_symbols=True)
    n = 20
    checked = 0
    for seed in range(200, 220):
        query = random_dna(n, seed=seed)
        ms = index.matching_statistics(query)
        last = int(ms[-1])
        # fill reaches the end of the query only for small final statistics
        if last > 8:
            continue
        assert ms.max() < settings.threshold
        outcome = map_query(index, f"rand{seed}", query, settings)
        assert outcome.results == [
            MappingResult(f"rand{seed}", "+", n - last, n, last + 1, 0, last + 1, 0.0)
        ]
        assert outcome.tracks[0][2] == " " * (n - last - 1) + "I" * (last + 1)
        checked += 1
    assert checked > 0
