from ms_align.algorithms.run_lengths import run_lengths
from ms_align.algorithms.translate import translate_runs
from ms_align.core.types import AlignmentRun, AlignmentSymbol, TranslateParams, symbols_from_string

from tests.reference_vectors import (
    K, THRESHOLD, MS_512, RUNS_512, DECODED_512_RUNS, TRACK_512, TRACK_512_RUNS
)

def test_run_lengths_reference_track():
    """Compression of a 512 position track with four runs."""
    runs = run_lengths(symbols_from_string(TRACK_512))
    assert [run.as_tuple() for run in runs] == TRACK_512_RUNS

def test_run_lengths_accepts_characters():
    assert run_lengths(TRACK_512) == run_lengths(symbols_from_string(TRACK_512))

def test_run_lengths_counts_mismatches():
    runs = run_lengths("  MMIMR--MM ")
    assert runs == [
        AlignmentRun(3, 7, 4, 1),
        AlignmentRun(10, 11, 2, 0),
    ]
    assert runs[0].length == 5

def test_run_lengths_run_reaching_the_end():
    runs = run_lengths("--MMM")
    assert runs == [AlignmentRun(3, 5, 3, 0)]

def test_run_lengths_without_runs():
    assert run_lengths([]) == []
    assert run_lengths("     ") == []
    assert run_lengths("--- --") == []

def test_run_lengths_undetermined_splits_runs():
    runs = run_lengths("MM MM")
    assert [run.as_tuple() for run in runs] == [(1, 2, 2, 0), (4, 5, 2, 0)]

def test_run_lengths_of_decoded_reference():
    params = TranslateParams(k=K, threshold=THRESHOLD)
    symbols = translate_runs(MS_512, RUNS_512, params)
    assert [run.as_tuple() for run in run_lengths(symbols)] == DECODED_512_RUNS

def test_symbol_properties():
    assert AlignmentSymbol.MATCH.is_match
    assert AlignmentSymbol.RANDOM_BOUNDARY.is_match
    assert AlignmentSymbol.INSERTION.is_aligned
    assert not AlignmentSymbol.INSERTION.is_match
    assert not AlignmentSymbol.GAP.is_aligned
    assert not AlignmentSymbol.UNDETERMINED.is_aligned
    assert str(AlignmentSymbol.GAP) == '-'
