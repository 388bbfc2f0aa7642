from __future__ import annotations

from typing import Iterable, Optional
import logging

from taixiu.analytics.ensemble import AdaptiveEnsemble, Prediction
from taixiu.analytics.patterns import PatternEngine
from taixiu.analytics.predictors import ALL_PREDICTORS, Predictor
from taixiu.analytics.stats import StatsManager
from taixiu.core.models import OutcomeRecord

logger = logging.getLogger(__name__)


class PredictionSession:
    """
    Owns the history and everything learned from it.

    Lifecycle: construct, load_initial() once with the first batch,
    push_record() for every later record in ascending session order,
    dispose() when done. Other components only ever see tuple views of
    the history.
    """

    REPLAY_START = 10
    MIN_UPDATE_PREFIX = 3

    def __init__(self, predictors: Iterable[Predictor] = ALL_PREDICTORS, **ensemble_opts):
        self._history: list[OutcomeRecord] = []
        self.engine = PatternEngine()
        self.ensemble = AdaptiveEnsemble(predictors, self.engine, **ensemble_opts)
        self.stats = StatsManager()
        self.current: Optional[Prediction] = None
        self.disposed = False

    @property
    def history(self) -> tuple[OutcomeRecord, ...]:
        return tuple(self._history)

    @property
    def last_session(self) -> Optional[int]:
        return self._history[-1].session if self._history else None

    def _check_open(self):
        if self.disposed:
            raise RuntimeError("session has been disposed")

    def _predict(self) -> Prediction:
        target = self.last_session + 1 if self._history else None
        return self.ensemble.predict(self.history, target)

    def _replay(self):
        for i in range(self.REPLAY_START, len(self._history)):
            self.ensemble.update_with_outcome(tuple(self._history[:i]), self._history[i].category)

    def load_initial(self, records: Iterable[OutcomeRecord]) -> Prediction:
        self._check_open()
        self._history = list(records)
        self.ensemble.fit_initial(self.history)
        self._replay()
        self.current = self._predict()
        if self.current.target_session is not None:
            self.stats.record_prediction(self.current.target_session, self.current.category)
        logger.info(
            f"Loaded {len(self._history)} records, next session {self.current.target_session}: "
            f"{self.current.category} ({self.current.confidence:.2f})"
        )
        return self.current

    def push_record(self, record: OutcomeRecord) -> Prediction:
        self._check_open()
        self.stats.record_outcome(record.session, record.category)
        prefix = self.history
        self._history.append(record)
        if len(prefix) >= self.MIN_UPDATE_PREFIX:
            self.ensemble.update_with_outcome(prefix, record.category)
        self.current = self._predict()
        self.stats.record_prediction(record.session + 1, self.current.category)
        logger.debug(
            f"Session {record.session} -> {record.category}; next {record.session + 1}: "
            f"{self.current.category} ({self.current.confidence:.2f})"
        )
        return self.current

    def get_prediction(self) -> Prediction:
        if self.current is None:
            self.current = self._predict()
        return self.current

    def get_stats(self) -> dict:
        return self.stats.get_stats()

    def weights(self) -> dict:
        return self.ensemble.weights()

    def dispose(self):
        self._history.clear()
        self.current = None
        self.disposed = True
