import pytest

from taixiu.core.models import OutcomeRecord

DICE = {"T": (4, 4, 3), "X": (1, 2, 3)}


def build(tx, start=1, dice=None):
    dice = {**DICE, **(dice or {})}
    return [OutcomeRecord.from_dice(start + i, *dice[c]) for i, c in enumerate(tx.upper())]


@pytest.fixture
def make_history():
    """Records for a T/X string; T rolls 11, X rolls 6 unless overridden."""
    return build
