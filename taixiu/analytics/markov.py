from collections import defaultdict, deque
from typing import Iterable


class MarkovEngine:
    """Order-k transition counts: context of k labels -> next label."""

    def __init__(self, order: int = 3):
        self.k = order
        self.buf = deque(maxlen=order)  # 'T'/'X'
        self.C = defaultdict(lambda: {'T': 0, 'X': 0})

    def reset(self):
        self.buf.clear()
        self.C.clear()

    def push(self, y: str):
        if len(self.buf) == self.k:
            self.C[''.join(self.buf)][y] += 1
        self.buf.append(y)

    def build_from(self, labels: Iterable[str]) -> "MarkovEngine":
        self.reset()
        for y in labels:
            self.push(y)
        return self

    def context(self) -> str:
        return ''.join(self.buf)

    def counts(self, ctx: str | None = None) -> tuple[int, int]:
        ctx = self.context() if ctx is None else ctx
        row = self.C.get(ctx)
        if not row:
            return 0, 0
        return row['T'], row['X']
