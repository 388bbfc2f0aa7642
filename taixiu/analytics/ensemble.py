from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Sequence
import logging

from taixiu.analytics.patterns import PatternEngine
from taixiu.analytics.predictors import ALL_PREDICTORS, Predictor, freq_rebalance
from taixiu.core.models import Label, OutcomeRecord, TAI

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Prediction:
    target_session: Optional[int]
    category: Label
    confidence: float
    opinions: Dict[str, Label] = field(default_factory=dict)
    fallback: bool = False

    @property
    def label(self) -> str:
        return "tài" if self.category == TAI else "xỉu"


class AdaptiveEnsemble:
    """
    Bỏ phiếu có trọng số giữa các thuật toán, trọng số học online.

    - fit_initial(): chấm điểm từng thuật toán trên cửa sổ lịch sử gần nhất.
    - update_with_outcome(): thưởng/phạt nhân (1.05 / 0.95) rồi làm mượt EMA.
    - predict(): cộng trọng số theo cửa được chọn, độ tin cậy bị kẹp trong
      [confidence_floor, confidence_ceiling].

    Weights always sum to 1 and never drop below min_weight.

    Args:
        ema_alpha: share of the reward/penalty target blended in per update
            (0.1 moves 10% toward the target, keeps 90%).
        min_weight: floor for every weight; keeps a predictor from being
            locked out after a losing streak.
        history_window: number of most recent records fit_initial() replays.
        confidence_floor / confidence_ceiling: clamp for the winning share;
            the floor is also the fixed confidence of the fallback answer.
    """

    REWARD = 1.05
    PENALTY = 0.95
    WARMUP = 10
    MIN_FIT = 20

    def __init__(
        self,
        predictors: Iterable[Predictor] = ALL_PREDICTORS,
        engine: Optional[PatternEngine] = None,
        *,
        ema_alpha: float = 0.1,
        min_weight: float = 0.001,
        history_window: int = 300,
        confidence_floor: float = 0.55,
        confidence_ceiling: float = 0.98,
    ):
        self.predictors = tuple(predictors)
        if not self.predictors:
            raise ValueError("ensemble needs at least one predictor")
        if not 0.0 < ema_alpha <= 1.0:
            raise ValueError(f"ema_alpha must be in (0, 1], got {ema_alpha}")
        if min_weight < 0 or min_weight * len(self.predictors) >= 1.0:
            raise ValueError(f"min_weight {min_weight} too large for {len(self.predictors)} predictors")
        if not 0.0 <= confidence_floor <= confidence_ceiling <= 1.0:
            raise ValueError("confidence bounds must satisfy 0 <= floor <= ceiling <= 1")
        if history_window < 1:
            raise ValueError("history_window must be positive")
        self.engine = engine or PatternEngine()
        self.ema_alpha = ema_alpha
        self.min_weight = min_weight
        self.history_window = history_window
        self.confidence_floor = confidence_floor
        self.confidence_ceiling = confidence_ceiling
        self.w: Dict[str, float] = self._normalize({p.id: 1.0 for p in self.predictors})

    # ---------------- weights ----------------
    def _normalize(self, raw: Dict[str, float]) -> Dict[str, float]:
        """Scale to sum 1; pin anything under the floor and rescale the rest."""
        total = sum(raw.values())
        if total <= 0:
            raw = {k: 1.0 for k in raw}
            total = float(len(raw))
        w = {k: v / total for k, v in raw.items()}
        pinned: set[str] = set()
        while True:
            low = {k for k, v in w.items() if k not in pinned and v < self.min_weight}
            if not low:
                break
            pinned |= low
            free = [k for k in w if k not in pinned]
            if not free:
                break
            budget = 1.0 - self.min_weight * len(pinned)
            free_total = sum(raw[k] for k in free)
            for k in pinned:
                w[k] = self.min_weight
            for k in free:
                w[k] = budget * (raw[k] / free_total if free_total > 0 else 1.0 / len(free))
        return w

    def weights(self) -> Dict[str, float]:
        return dict(self.w)

    def opinions(self, history: Sequence[OutcomeRecord]) -> Dict[str, Optional[Label]]:
        return {p.id: p.predict(history, self.engine) for p in self.predictors}

    # ---------------- learning ----------------
    def fit_initial(self, history: Sequence[OutcomeRecord]) -> None:
        window = list(history[-self.history_window:])
        if len(window) < self.MIN_FIT:
            return
        scores = {p.id: 0 for p in self.predictors}
        for i in range(self.WARMUP, len(window)):
            prefix = window[:i]
            actual = window[i].category
            for p in self.predictors:
                if p.predict(prefix, self.engine) == actual:
                    scores[p.id] += 1
        self.w = self._normalize({k: s + 1.0 for k, s in scores.items()})
        logger.info(f"Initial fit over {len(window)} records: {scores}")

    def update_with_outcome(self, prefix: Sequence[OutcomeRecord], actual: Label) -> None:
        for p in self.predictors:
            pred = p.predict(prefix, self.engine)
            cur = self.w.get(p.id, self.min_weight)
            target = cur * (self.REWARD if pred == actual else self.PENALTY)
            blended = self.ema_alpha * target + (1 - self.ema_alpha) * cur
            self.w[p.id] = max(self.min_weight, blended)
        self.w = self._normalize(self.w)
        logger.debug(f"Weights after outcome {actual}: {self.w}")

    # ---------------- voting ----------------
    def predict(self, history: Sequence[OutcomeRecord], target_session: Optional[int] = None) -> Prediction:
        opinions: Dict[str, Label] = {}
        votes: Dict[Label, float] = {}
        for p in self.predictors:
            pred = p.predict(history, self.engine)
            if pred is None:
                continue
            opinions[p.id] = pred
            votes[pred] = votes.get(pred, 0.0) + self.w.get(p.id, 0.0)

        if not votes:
            fallback = freq_rebalance(history) or TAI
            return Prediction(target_session, fallback, self.confidence_floor, opinions, fallback=True)

        best = max(votes, key=votes.get)
        total = sum(votes.values())
        share = votes[best] / total if total > 0 else self.confidence_floor
        confidence = min(self.confidence_ceiling, max(self.confidence_floor, share))
        return Prediction(target_session, best, confidence, opinions)
