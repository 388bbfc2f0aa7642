from collections import Counter
from dataclasses import dataclass, field
from typing import NamedTuple, Sequence
import math

import numpy as np

from taixiu.core.models import Label, OutcomeRecord, labels

# Structural features of a T/X sequence (no predictive meaning on their own).


class Run(NamedTuple):
    label: Label
    length: int


@dataclass(frozen=True)
class SequenceFeatures:
    tx: str = ""
    freq: dict = field(default_factory=dict)
    runs: tuple = ()
    max_run: int = 0
    mean_total: float = 0.0
    std_total: float = 0.0
    entropy: float = 0.0


def run_lengths(seq: Sequence[Label]) -> list[Run]:
    out: list[Run] = []
    if not seq:
        return out
    cur = seq[0]
    n = 1
    for lab in seq[1:]:
        if lab == cur:
            n += 1
            continue
        out.append(Run(cur, n))
        cur, n = lab, 1
    out.append(Run(cur, n))
    return out


def transitions(seq: Sequence[Label]) -> int:
    """Number of adjacent positions where the label changes."""
    return sum(1 for a, b in zip(seq, seq[1:]) if a != b)


def shannon_entropy(seq: Sequence[Label]) -> float:
    if not seq:
        return 0.0
    n = len(seq)
    h = 0.0
    for c in Counter(seq).values():
        p = c / n
        h -= p * math.log2(p)
    return h


def extract_features(history: Sequence[OutcomeRecord]) -> SequenceFeatures:
    if not history:
        return SequenceFeatures()
    seq = labels(history)
    totals = np.array([r.total for r in history], dtype=float)
    runs = run_lengths(seq)
    return SequenceFeatures(
        tx="".join(seq),
        freq=dict(Counter(seq)),
        runs=tuple(runs),
        max_run=max(r.length for r in runs),
        mean_total=float(totals.mean()),
        std_total=float(totals.std()),  # population std (ddof=0)
        entropy=shannon_entropy(seq),
    )
