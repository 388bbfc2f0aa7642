from dataclasses import dataclass
from typing import Mapping, Optional

from taixiu.analytics.catalog import PATTERN_CATALOG
from taixiu.core.models import Label, TAI, XIU


@dataclass(frozen=True)
class PatternMatch:
    variant: str
    length: int
    position: int


class PatternEngine:
    """
    Nhận diện mẫu cầu ở đuôi chuỗi t/x.

    Each call to detect_patterns() opens a new evaluation context: stored
    confidences are cleared and every detected motif is scored, so
    most_confident() only ever names a motif that matches the current tail.
    """

    LAST_SYMBOL_WEIGHT = 1.5
    RATIO_WEIGHT = 2.0

    def __init__(self, catalog: Mapping[str, tuple[str, ...]] = PATTERN_CATALOG):
        self.patterns = {name: tuple(v) for name, v in catalog.items()}
        self.weights = {name: 1.0 for name in self.patterns}
        self.confidence = {name: 0.0 for name in self.patterns}
        self.detected: dict[str, list[PatternMatch]] = {}

    def detect_patterns(self, tx: str) -> dict[str, list[PatternMatch]]:
        s = tx.lower()
        found: dict[str, list[PatternMatch]] = {}
        for name, variants in self.patterns.items():
            for v in variants:
                if s.endswith(v):
                    found[name] = [PatternMatch(v, len(v), len(s) - len(v))]
                    break
        # sorted() is stable: equal lengths keep catalog order
        ordered = sorted(found.items(), key=lambda kv: max(m.length for m in kv[1]), reverse=True)
        self.detected = dict(ordered)
        self.confidence = {name: 0.0 for name in self.patterns}
        for name in self.detected:
            self.predict_next(name)
        return self.detected

    def scores(self, name: str) -> tuple[float, float]:
        w = self.weights[name]
        t_score = x_score = 0.0
        for v in self.patterns[name]:
            if len(v) < 2:
                continue
            if v[-1] == "t":
                t_score += w * self.LAST_SYMBOL_WEIGHT
            elif v[-1] == "x":
                x_score += w * self.LAST_SYMBOL_WEIGHT
            t_ratio = v.count("t") / len(v)
            x_ratio = v.count("x") / len(v)
            if t_ratio > x_ratio:
                t_score += w * (t_ratio - x_ratio) * self.RATIO_WEIGHT
            else:
                x_score += w * (x_ratio - t_ratio) * self.RATIO_WEIGHT
        return t_score, x_score

    def predict_next(self, name: Optional[str]) -> Optional[Label]:
        if not name or name not in self.detected:
            return None
        t_score, x_score = self.scores(name)
        total = t_score + x_score
        self.confidence[name] = max(t_score, x_score) / total if total > 0 else 0.0
        if t_score == 0 and x_score == 0:
            return None
        return TAI if t_score > x_score else XIU

    def most_confident(self) -> Optional[str]:
        best, best_conf = None, 0.0
        for name, conf in self.confidence.items():
            if conf > best_conf:
                best, best_conf = name, conf
        return best

    def confidence_of(self, name: Optional[str]) -> float:
        return self.confidence.get(name, 0.0) if name else 0.0
