from taixiu.analytics import predictors
from taixiu.analytics.patterns import PatternEngine
from taixiu.analytics.predictors import (
    ALL_PREDICTORS,
    adaptive_pattern,
    advanced_pattern,
    basic_pattern,
    bridge,
    deep_analysis,
    freq_rebalance,
    meta_ensemble,
    neo_pattern,
    similarity,
)


def test_freq_rebalance(make_history):
    assert freq_rebalance(make_history("T" * 19)) is None
    assert freq_rebalance(make_history("T" * 20)) == 'X'
    assert freq_rebalance(make_history("T" * 14 + "X" * 6)) == 'X'
    # overall balanced, but 10 of the last 15 are X
    assert freq_rebalance(make_history("T" * 12 + "X" * 10)) == 'T'
    assert freq_rebalance(make_history("TX" * 10)) is None


def test_bridge(make_history):
    assert bridge(make_history("T" * 20)) == 'X'
    assert bridge(make_history("XXX" + "T" * 6)) == 'X'
    assert bridge(make_history("TTX")) is None
    # stable short runs: follow the current run
    assert bridge(make_history("TTXXXTTXXTT")) == 'T'
    # alternation: break against the last symbol
    assert bridge(make_history("TX" * 20)) == 'T'


def test_basic_pattern(make_history):
    assert basic_pattern(make_history("TXTXTX")) is None
    assert basic_pattern(make_history("T" * 14 + "TXTXTX")) == 'T'
    assert basic_pattern(make_history("TX" * 8 + "TTTT")) == 'T'
    assert basic_pattern(make_history("X" * 12 + "TTXXTTXX")) == 'T'
    # a double 3-3 block does not fit the 6-symbol window and stays silent
    assert basic_pattern(make_history("TX" * 4 + "TTTXXXTTTXXX")) is None


def test_deep_analysis(make_history):
    assert deep_analysis(make_history("T" * 49)) is None
    high = make_history("T" * 50, dice={"T": (5, 5, 5)})
    assert deep_analysis(high) == 'X'
    low = make_history("X" * 50, dice={"X": (1, 1, 1)})
    assert deep_analysis(low) == 'T'
    # near-random split: break the last symbol
    assert deep_analysis(make_history("TX" * 25)) == 'T'


def test_neo_pattern(make_history):
    assert neo_pattern(make_history("TX" * 12)) is None
    assert neo_pattern(make_history("TX" * 15)) == 'T'


def test_advanced_pattern(make_history):
    assert advanced_pattern(make_history("TX" * 14)) is None
    # tail "xxttxx" matches branch_2, which leans strongly to X
    assert advanced_pattern(make_history("TX" * 12 + "XXTTXX")) == 'X'
    # only symmetric motifs match an alternating tail
    assert advanced_pattern(make_history("TX" * 15)) is None


def test_adaptive_pattern(make_history):
    assert adaptive_pattern(make_history("TX" * 17)) is None
    volatile = "T" * 15 + "XTXTXTXTXTXTXTX" + "TTTXT"
    assert adaptive_pattern(make_history(volatile)) == 'X'
    assert adaptive_pattern(make_history("T" * 35)) is None


def test_meta_ensemble(make_history):
    assert meta_ensemble(make_history("TX" * 22)) is None
    assert meta_ensemble(make_history("TX" * 25)) == 'T'
    # split vote without a clear recent imbalance
    assert meta_ensemble(make_history("T" * 45)) is None


def test_shared_engine_is_optional(make_history):
    h = make_history("TX" * 12 + "XXTTXX")
    assert advanced_pattern(h, PatternEngine()) == advanced_pattern(h)


def test_similarity():
    assert similarity("TTX", "TTX") == 1.0
    assert similarity("TTX", "TXX") == 2 / 3
    assert similarity("TT", "TTX") == 0.0


def test_all_predictors_abstain_on_short_history(make_history):
    h = make_history("TX")
    assert all(p.predict(h) is None for p in ALL_PREDICTORS)
    assert len({p.id for p in ALL_PREDICTORS}) == 9


def test_deep_analysis_cycle_rule(make_history):
    # 2:1 split keeps entropy under 0.95; every earlier TXTTXTTX window is followed by T
    assert deep_analysis(make_history("TTX" * 20)) == 'T'


def test_deep_analysis_breaks_recent_majority(make_history):
    # near-random overall, but 7 of the last 10 are T
    assert deep_analysis(make_history("TX" * 20 + "TTTTTTTXXX")) == 'X'


def test_neo_pattern_uses_confident_motif(make_history):
    # 'flip' matches a T run but leans X with confidence 0.75
    engine = PatternEngine({"flip": ("tt", "xx", "xxx", "xxxx")})
    h = make_history("T" * 30)
    assert neo_pattern(h) == 'T'
    assert neo_pattern(h, engine) == 'X'
    assert engine.most_confident() == "flip"


def test_adaptive_pattern_motif_fallback(make_history):
    h = make_history("TX" * 18)
    assert adaptive_pattern(h) is None
    engine = PatternEngine({"flip": ("tx", "tt", "xx", "xxx", "xxxx")})
    assert adaptive_pattern(h, engine) == 'X'


def test_meta_ensemble_close_vote_uses_last_eight(make_history, monkeypatch):
    members = (
        (lambda history, engine=None: 'T', 0.8),
        (lambda history, engine=None: 'X', 0.85),
    )
    monkeypatch.setattr(predictors, "META_MEMBERS", members)
    assert meta_ensemble(make_history("X" * 40 + "TTTTTTTX")) == 'X'
    assert meta_ensemble(make_history("T" * 40 + "XXXXXXXT")) == 'T'
    assert meta_ensemble(make_history("T" * 40 + "TXTXTXTX")) is None
