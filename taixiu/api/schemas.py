from pydantic import BaseModel, Field
from typing import Optional


class IngestIn(BaseModel):
    session: int = Field(ge=0)
    d1: int = Field(ge=1, le=6)
    d2: int = Field(ge=1, le=6)
    d3: int = Field(ge=1, le=6)
    side: Optional[int] = Field(default=None, ge=0, le=1)


class PredictOut(BaseModel):
    previous_session: int | None
    dice: list[int] | None
    total: int | None
    result: str
    current_session: int | None
    prediction: str | None
    confidence: str


class RecordItem(BaseModel):
    session: int
    dice: list[int]
    total: int
    result: str
    tx_label: str


class StatsOut(BaseModel):
    total_predictions: int
    total_wins: int
    total_losses: int
    win_rate: str
    active_patterns: int
    weights: dict[str, float]


class LedgerItem(BaseModel):
    target_session: int
    predicted: str
    actual: str | None
    correct: bool | None
    ts: str
    resolved_ts: str | None
