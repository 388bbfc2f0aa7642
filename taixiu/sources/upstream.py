"""
Upstream result feed.

The upstream service returns a JSON list of recent rounds, newest first:

    [{"SessionId": 123, "FirstDice": 1, "SecondDice": 4, "ThirdDice": 6,
      "DiceSum": 11, "BetSide": 0}, ...]

BetSide 0 means TAI and 1 means XIU; when it is missing the label comes from
the dice total.
"""

from typing import Any, Optional
import logging
import time

import requests
from pydantic import ValidationError

from taixiu.core.models import OutcomeRecord

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class UpstreamError(Exception):
    """Raised when the upstream feed cannot be fetched after all retries."""


def parse_item(item: dict) -> Optional[OutcomeRecord]:
    try:
        d1, d2, d3 = int(item["FirstDice"]), int(item["SecondDice"]), int(item["ThirdDice"])
        rec = OutcomeRecord.from_dice(int(item["SessionId"]), d1, d2, d3, side=item.get("BetSide"))
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        logger.warning(f"Skipping malformed upstream item {item!r}: {e}")
        return None
    dice_sum = item.get("DiceSum")
    if dice_sum is not None and dice_sum != rec.total:
        logger.warning(f"Skipping item {rec.session}: DiceSum {dice_sum} != dice total {rec.total}")
        return None
    return rec


def parse_lines(data: Any) -> list[OutcomeRecord]:
    if not isinstance(data, list):
        return []
    by_session: dict[int, OutcomeRecord] = {}
    for item in data:
        if not isinstance(item, dict):
            logger.warning(f"Skipping non-object upstream item: {item!r}")
            continue
        rec = parse_item(item)
        if rec is not None:
            by_session.setdefault(rec.session, rec)
    return [by_session[s] for s in sorted(by_session)]


def fetch_with_retry(url: str, retries: int = 3, delay: float = 2.0, timeout: float = 10.0) -> Any:
    last_error: Optional[Exception] = None
    for attempt in range(1, retries + 1):
        try:
            r = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
            r.raise_for_status()
            return r.json()
        except (requests.RequestException, ValueError) as e:
            last_error = e
            logger.warning(f"Fetch attempt {attempt}/{retries} failed: {e}")
            if attempt < retries:
                time.sleep(delay)
    raise UpstreamError(f"failed to fetch {url} after {retries} attempts") from last_error
