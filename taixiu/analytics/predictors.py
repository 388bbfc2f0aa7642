# Thư viện thuật toán soi cầu: mỗi hàm nhận lịch sử (và bộ nhận diện mẫu cầu)
# rồi trả về "T", "X" hoặc None (không có ý kiến).
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence
import re

import numpy as np

from taixiu.analytics.catalog import BASIC_PATTERNS
from taixiu.analytics.markov import MarkovEngine
from taixiu.analytics.patterns import PatternEngine
from taixiu.core.features import extract_features, run_lengths, transitions
from taixiu.core.models import Label, OutcomeRecord, TAI, XIU, labels, opposite, tx_string

History = Sequence[OutcomeRecord]
PredictFn = Callable[[History, Optional[PatternEngine]], Optional[Label]]

MARKOV_ORDER = 3

_ALT_6 = re.compile(r"(?:tx){3}|(?:xt){3}")
_BLOCK_22 = re.compile(r"(?:ttxx){2}|(?:xxtt){2}")
_BLOCK_33 = re.compile(r"(?:tttxxx){2}|(?:xxxttt){2}")


def similarity(a: Sequence[str], b: Sequence[str]) -> float:
    """Fraction of positions at which two equal-length windows agree."""
    if len(a) != len(b) or not a:
        return 0.0
    return sum(1 for p, q in zip(a, b) if p == q) / len(a)


def freq_rebalance(history: History, engine: Optional[PatternEngine] = None) -> Optional[Label]:
    seq = labels(history)
    n = len(seq)
    if n < 20:
        return None
    t_ratio = seq.count(TAI) / n
    x_ratio = seq.count(XIU) / n
    if t_ratio > 0.6 and t_ratio - x_ratio > 0.15:
        return XIU
    if x_ratio > 0.6 and x_ratio - t_ratio > 0.15:
        return TAI
    recent = seq[-15:]
    if recent.count(TAI) >= 10:
        return XIU
    if recent.count(XIU) >= 10:
        return TAI
    return None


def markov(history: History, engine: Optional[PatternEngine] = None) -> Optional[Label]:
    seq = labels(history)
    if len(seq) < MARKOV_ORDER + 10:
        return None
    n_t, n_x = MarkovEngine(MARKOV_ORDER).build_from(seq).counts()
    n = n_t + n_x
    if n < 5:
        return None
    if abs(n_t - n_x) / n > 0.7:
        return TAI if n_t > n_x else XIU
    return None


def neo_pattern(history: History, engine: Optional[PatternEngine] = None) -> Optional[Label]:
    seq = labels(history)
    n = len(seq)
    if n < 25:
        return None
    engine = engine or PatternEngine()
    engine.detect_patterns(tx_string(history))
    best = engine.most_confident()
    if best and engine.confidence_of(best) > 0.7:
        return engine.predict_next(best)

    best_pred = None
    max_similarity = -1.0
    for size in (3, 4, 5, 6):
        if n < size * 2:
            continue
        target = seq[-size:]
        votes = {TAI: 0.0, XIU: 0.0}
        total = 0.0
        for i in range(n - size):
            score = similarity(seq[i:i + size], target)
            if score >= 0.8:
                votes[seq[i + size]] += score
                total += score
        if total > 0 and votes[TAI] != votes[XIU] and total > max_similarity:
            max_similarity = total
            best_pred = TAI if votes[TAI] > votes[XIU] else XIU
    return best_pred


def deep_analysis(history: History, engine: Optional[PatternEngine] = None) -> Optional[Label]:
    if len(history) < 50:
        return None
    f = extract_features(history)
    tx = f.tx

    recent_avg = float(np.mean([r.total for r in history[-20:]]))
    if recent_avg > 12.5 and f.mean_total > 12:
        return XIU
    if recent_avg < 8.5 and f.mean_total < 9:
        return TAI

    if f.entropy > 0.95:
        last10 = tx[-10:]
        if last10.count(TAI) >= 6:
            return XIU
        if last10.count(XIU) >= 6:
            return TAI
        return opposite(tx[-1])

    for size in (8, 12):
        if len(tx) < size * 2:
            continue
        target = tx[-size:]
        t_after = x_after = 0
        for i in range(len(tx) - size):
            if tx[i:i + size] == target:
                if tx[i + size] == TAI:
                    t_after += 1
                else:
                    x_after += 1
        if t_after + x_after >= 4:
            ratio = t_after / (t_after + x_after)
            if ratio >= 0.75:
                return TAI
            if ratio <= 0.25:
                return XIU
    return None


def bridge(history: History, engine: Optional[PatternEngine] = None) -> Optional[Label]:
    seq = labels(history)
    runs = run_lengths(seq)
    if not runs:
        return None
    last = runs[-1]
    # bẻ cầu: a long run breaks regardless of how many runs precede it
    if last.length >= 6:
        return opposite(last.label)
    if len(runs) < 3:
        return None
    # theo cầu
    if 2 <= last.length <= 5 and len(runs) >= 4:
        if all(2 <= r.length <= 5 for r in runs[-4:]):
            return last.label
    last15 = seq[-15:]
    if len(last15) >= 10 and transitions(last15) >= 10:
        return opposite(last15[-1])
    return None


def basic_pattern(history: History, engine: Optional[PatternEngine] = None) -> Optional[Label]:
    if len(history) < 20:
        return None
    tx = tx_string(history)
    last10 = tx[-10:]
    if _ALT_6.fullmatch(last10[-6:]):
        return XIU if last10[-1] == "t" else TAI
    if last10[-4:] == "tttt":
        return TAI
    if last10[-4:] == "xxxx":
        return XIU
    if _BLOCK_22.fullmatch(last10[-8:]):
        return XIU if last10[-2:] == "tt" else TAI
    # two 3-3 periods span 12 symbols, so a 6-symbol tail never completes one
    if _BLOCK_33.fullmatch(last10[-6:]):
        return XIU if last10[-3:] == "ttt" else TAI
    return None


def advanced_pattern(history: History, engine: Optional[PatternEngine] = None) -> Optional[Label]:
    if len(history) < 30:
        return None
    engine = engine or PatternEngine()
    detected = engine.detect_patterns(tx_string(history))
    candidates = [name for name in detected if name not in BASIC_PATTERNS]
    if not candidates:
        return None
    best = max(candidates, key=engine.confidence_of)
    if engine.confidence_of(best) > 0.65:
        return engine.predict_next(best)
    return None


def adaptive_pattern(history: History, engine: Optional[PatternEngine] = None) -> Optional[Label]:
    if len(history) < 35:
        return None
    seq = labels(history)
    change_rate = transitions(seq[-20:]) / 19
    if change_rate <= 0.75:
        return None
    last5 = seq[-5:]
    if last5.count(TAI) >= 4:
        return XIU
    if last5.count(XIU) >= 4:
        return TAI
    engine = engine or PatternEngine()
    engine.detect_patterns(tx_string(history))
    best = engine.most_confident()
    if best and engine.confidence_of(best) > 0.6:
        return engine.predict_next(best)
    return None


META_MEMBERS: tuple[tuple[PredictFn, float], ...] = (
    (freq_rebalance, 0.8),
    (markov, 0.85),
    (neo_pattern, 0.95),
    (deep_analysis, 0.9),
    (bridge, 0.9),
    (basic_pattern, 0.8),
    (advanced_pattern, 0.85),
)


def meta_ensemble(history: History, engine: Optional[PatternEngine] = None) -> Optional[Label]:
    if len(history) < 45:
        return None
    engine = engine or PatternEngine()
    t_score = x_score = 0.0
    for fn, w in META_MEMBERS:
        pred = fn(history, engine)
        if pred == TAI:
            t_score += w
        elif pred == XIU:
            x_score += w
    total = t_score + x_score
    if total == 0:
        return None
    t_ratio = t_score / total
    x_ratio = x_score / total
    if t_ratio > 0.65:
        return TAI
    if x_ratio > 0.65:
        return XIU
    if abs(t_ratio - x_ratio) < 0.15:
        recent = labels(history[-8:])
        t_recent = recent.count(TAI)
        x_recent = recent.count(XIU)
        if t_recent > x_recent * 1.5:
            return XIU
        if x_recent > t_recent * 1.5:
            return TAI
    return None


@dataclass(frozen=True)
class Predictor:
    id: str
    fn: PredictFn

    def predict(self, history: History, engine: Optional[PatternEngine] = None) -> Optional[Label]:
        return self.fn(history, engine)


ALL_PREDICTORS: tuple[Predictor, ...] = (
    Predictor("freq-rebalance", freq_rebalance),
    Predictor("markov-3", markov),
    Predictor("neo-pattern", neo_pattern),
    Predictor("deep-analysis", deep_analysis),
    Predictor("bridge-predictor", bridge),
    Predictor("basic-pattern", basic_pattern),
    Predictor("advanced-pattern", advanced_pattern),
    Predictor("adaptive-pattern", adaptive_pattern),
    Predictor("meta-ensemble", meta_ensemble),
)
