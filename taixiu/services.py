from typing import Iterable, Optional
import logging

from taixiu.config import Settings
from taixiu.core.models import OutcomeRecord
from taixiu.session import PredictionSession
from taixiu.sources.upstream import fetch_with_retry, parse_lines

logger = logging.getLogger(__name__)


class Feed:
    """
    Bridges the upstream feed and one PredictionSession.

    Drops records that are not newer than the latest seen session, so the
    session itself only ever sees strictly ascending sessions.
    """

    def __init__(self, settings: Settings, session: Optional[PredictionSession] = None):
        self.settings = settings
        self.session = session or PredictionSession(**settings.session_options())
        self.current_session_id: Optional[int] = self.session.last_session

    def sync(self, records: Iterable[OutcomeRecord]) -> int:
        records = sorted(records, key=lambda r: r.session)
        if not records:
            return 0
        if self.current_session_id is None:
            self.session.load_initial(records)
            self.current_session_id = records[-1].session
            return len(records)
        new = [r for r in records if r.session > self.current_session_id]
        for r in new:
            self.session.push_record(r)
            self.current_session_id = r.session
        if new:
            logger.info(f"Ingested {len(new)} new records, latest session {self.current_session_id}")
        return len(new)

    def fetch(self) -> list[OutcomeRecord]:
        s = self.settings
        data = fetch_with_retry(s.upstream_url, retries=s.fetch_retries, delay=s.fetch_delay, timeout=s.fetch_timeout)
        return parse_lines(data)

    def poll_once(self) -> int:
        return self.sync(self.fetch())


def record_to_dict(r: OutcomeRecord) -> dict:
    return {
        'session': r.session,
        'dice': list(r.dice),
        'total': r.total,
        'result': r.result,
        'tx_label': r.category.lower(),
    }


def get_current(feed: Feed) -> dict:
    history = feed.session.history
    pred = feed.session.get_prediction()
    if not history:
        return {
            'previous_session': None,
            'dice': None,
            'total': None,
            'result': 'waiting',
            'current_session': None,
            'prediction': None,
            'confidence': '0%',
        }
    last = history[-1]
    return {
        'previous_session': last.session,
        'dice': list(last.dice),
        'total': last.total,
        'result': last.result,
        'current_session': last.session + 1,
        'prediction': pred.label,
        'confidence': f"{pred.confidence * 100:.0f}%",
    }


def get_history(feed: Feed, limit: int = 50) -> list[dict]:
    rows = feed.session.history[-limit:] if limit > 0 else ()
    return [record_to_dict(r) for r in reversed(rows)]


def get_stats(feed: Feed) -> dict:
    out = feed.session.get_stats()
    out['weights'] = feed.session.weights()
    return out


def get_ledger(feed: Feed, limit: int = 50) -> list[dict]:
    def to_dict(e):
        return {
            'target_session': e.target_session,
            'predicted': e.predicted,
            'actual': e.actual,
            'correct': e.correct,
            'ts': e.created_at.isoformat(),
            'resolved_ts': e.resolved_at.isoformat() if e.resolved_at else None,
        }
    return [to_dict(e) for e in feed.session.stats.recent(limit)]
