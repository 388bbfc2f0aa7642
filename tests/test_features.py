import pytest

from taixiu.core.features import Run, extract_features, run_lengths, shannon_entropy, transitions


def test_empty_history_gives_zeroed_features():
    f = extract_features([])
    assert f.runs == () and f.max_run == 0
    assert f.mean_total == 0.0 and f.std_total == 0.0 and f.entropy == 0.0


def test_runs_and_frequency(make_history):
    f = extract_features(make_history("TTXXXT"))
    assert f.runs == (Run('T', 2), Run('X', 3), Run('T', 1))
    assert f.max_run == 3
    assert f.freq == {'T': 3, 'X': 3}
    assert f.entropy == pytest.approx(1.0)


def test_totals_mean_and_population_std(make_history):
    f = extract_features(make_history("TX"))
    assert f.mean_total == pytest.approx(8.5)
    assert f.std_total == pytest.approx(2.5)


def test_helpers():
    assert run_lengths([]) == []
    assert transitions("TXTT") == 2
    assert shannon_entropy("TTTT") == 0.0
