from typing import Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

Label = str  # "T" (Tài) | "X" (Xỉu)

TAI = "T"
XIU = "X"
TAI_THRESHOLD = 11


def opposite(label: Label) -> Label:
    return XIU if label == TAI else TAI


def tx_string(history: Sequence["OutcomeRecord"]) -> str:
    """Lowercased symbol string of a history, e.g. 'ttxt'."""
    return "".join(r.category for r in history).lower()


def labels(history: Sequence["OutcomeRecord"]) -> list[Label]:
    return [r.category for r in history]


class OutcomeRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    session: int = Field(ge=0)
    d1: int = Field(ge=1, le=6)
    d2: int = Field(ge=1, le=6)
    d3: int = Field(ge=1, le=6)
    total: int = Field(ge=3, le=18)
    category: Literal["T", "X"]

    @classmethod
    def from_dice(cls, session: int, d1: int, d2: int, d3: int, side: Optional[int] = None) -> "OutcomeRecord":
        # side: 0 = TAI, 1 = XIU; anything else falls back to the total threshold
        total = d1 + d2 + d3
        if side == 0:
            category = TAI
        elif side == 1:
            category = XIU
        else:
            category = TAI if total >= TAI_THRESHOLD else XIU
        return cls(session=session, d1=d1, d2=d2, d3=d3, total=total, category=category)

    @property
    def dice(self) -> tuple[int, int, int]:
        return (self.d1, self.d2, self.d3)

    @property
    def result(self) -> str:
        return "tai" if self.category == TAI else "xiu"
