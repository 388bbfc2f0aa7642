from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
import logging

from taixiu.core.models import Label

logger = logging.getLogger(__name__)


@dataclass
class LedgerEntry:
    target_session: int
    predicted: Label
    actual: Optional[Label] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    resolved_at: Optional[datetime] = None

    @property
    def resolved(self) -> bool:
        return self.actual is not None

    @property
    def correct(self) -> Optional[bool]:
        if self.actual is None:
            return None
        return self.predicted == self.actual


class StatsManager:
    """Sổ ghi dự đoán theo phiên; mỗi phiên chỉ được đối chiếu kết quả một lần."""

    def __init__(self):
        self.total_predictions = 0
        self.total_wins = 0
        self.total_losses = 0
        self.entries: dict[int, LedgerEntry] = {}

    def record_prediction(self, session: int, predicted: Label) -> LedgerEntry:
        existing = self.entries.get(session)
        if existing is not None and existing.resolved:
            return existing
        entry = LedgerEntry(target_session=session, predicted=predicted)
        self.entries[session] = entry
        return entry

    def record_outcome(self, session: int, actual: Label) -> bool:
        entry = self.entries.get(session)
        if entry is None or entry.resolved:
            return False
        entry.actual = actual
        entry.resolved_at = datetime.now(timezone.utc)
        if entry.predicted == actual:
            self.total_wins += 1
        else:
            self.total_losses += 1
        self.total_predictions += 1
        logger.debug(f"Session {session}: predicted {entry.predicted}, actual {actual}")
        return True

    def win_rate(self) -> float:
        if not self.total_predictions:
            return 0.0
        return self.total_wins / self.total_predictions * 100

    def get_stats(self) -> dict:
        return {
            'total_predictions': self.total_predictions,
            'total_wins': self.total_wins,
            'total_losses': self.total_losses,
            'win_rate': f"{self.win_rate():.2f}%",
            'active_patterns': len(self.entries),
        }

    def recent(self, limit: int = 50) -> list[LedgerEntry]:
        rows = sorted(self.entries.values(), key=lambda e: e.target_session, reverse=True)
        return rows[:limit]
