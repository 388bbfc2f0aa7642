import pytest

from taixiu.analytics.predictors import bridge, freq_rebalance
from taixiu.core.models import OutcomeRecord
from taixiu.session import PredictionSession


def test_empty_session_prediction():
    pred = PredictionSession().get_prediction()
    assert pred.category == 'T'
    assert pred.confidence == 0.55
    assert pred.target_session is None


def test_load_initial_records_pending_prediction(make_history):
    s = PredictionSession()
    pred = s.load_initial(make_history("T" * 20))
    assert pred.target_session == 21
    assert s.stats.entries[21].actual is None
    assert s.get_stats()['active_patterns'] == 1
    assert bridge(s.history) == 'X'
    assert freq_rebalance(s.history) == 'X'

    s.push_record(OutcomeRecord.from_dice(21, 1, 2, 3))
    stats = s.get_stats()
    assert stats['total_predictions'] == 1
    assert s.stats.entries[21].actual == 'X'
    assert s.get_prediction().target_session == 22


def test_alternating_feed_breaks_last_symbol(make_history):
    s = PredictionSession()
    for r in make_history("TX" * 20):
        s.push_record(r)
    assert s.history[-1].category == 'X'
    assert bridge(s.history) == 'T'
    pred = s.get_prediction()
    assert pred.category == 'T'
    assert pred.target_session == 41
    assert pred.opinions['bridge-predictor'] == 'T'
    stats = s.get_stats()
    assert stats['total_predictions'] == 39
    assert stats['active_patterns'] == 40


def test_no_weight_update_before_three_records(make_history):
    s = PredictionSession()
    for r in make_history("TTX"):
        s.push_record(r)
    assert all(w == pytest.approx(1 / 9) for w in s.weights().values())


def test_weights_stay_normalized(make_history):
    s = PredictionSession(min_weight=0.01)
    s.load_initial(make_history("TTXTXXXTTXTTTXXTXTXX" * 3))
    for r in make_history("TXXTTX", start=61):
        s.push_record(r)
        w = s.weights()
        assert sum(w.values()) == pytest.approx(1.0)
        assert min(w.values()) >= 0.01 - 1e-12


@pytest.mark.parametrize("n", [0, 1, 5, 13, 26, 37, 52])
def test_prediction_always_in_bounds(make_history, n):
    s = PredictionSession()
    s.load_initial(make_history(("TTXTX" * 11)[:n]))
    pred = s.get_prediction()
    assert pred.category in ('T', 'X')
    assert 0.55 <= pred.confidence <= 0.98


def test_history_is_read_only_view(make_history):
    s = PredictionSession()
    s.load_initial(make_history("TX"))
    assert isinstance(s.history, tuple)
    assert s.last_session == 2


def test_dispose(make_history):
    s = PredictionSession()
    s.load_initial(make_history("TX"))
    s.dispose()
    assert s.history == ()
    with pytest.raises(RuntimeError):
        s.push_record(OutcomeRecord.from_dice(3, 1, 2, 3))
