"""Behavioral-pattern detectors.

Each detector is a pure, single-pass function over a trade list sorted
newest first, as returned by ``DataStore.get_trades(newest_first=True)``.
Detectors never raise for "no findings"; an empty result is valid.
"""

from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional

from tradejournal.models import BehaviorFinding, Trade

# Revenge trading: a loss followed quickly by a larger position
REVENGE_MAX_GAP_MINUTES = 15
REVENGE_MIN_VOLUME_RATIO = 1.3

# Overtrading: more than this many trades inside the window
OVERTRADING_MAX_TRADES = 10
OVERTRADING_WINDOW = timedelta(hours=2)
OVERTRADING_EVIDENCE_SIZE = 10

# Lot-size escalation over the three most recent trades
ESCALATION_MIN_RATIO = 1.5
ESCALATION_DEFAULT_VOLUME = 0.01

REVENGE_RECOMMENDATION = (
    "Take a 30-minute break after losses. Revenge trading detected with "
    "increased lot sizes after losses."
)
OVERTRADING_RECOMMENDATION = (
    "You've taken too many trades in a short period. Stick to your trading "
    "plan with max 5 trades per session."
)
ESCALATION_RECOMMENDATION = (
    "Lot size is increasing progressively. Return to your standard risk per "
    "trade (1-2%)."
)


class Escalation(NamedTuple):
    """Lot-size escalation over the three most recent trades."""

    trades: list[Trade]
    ratio: float


def _as_utc(moment: datetime) -> datetime:
    # naive timestamps are read as UTC, matching the data store
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _minutes_between(a: Trade, b: Trade) -> float:
    return abs((_as_utc(a.created_at) - _as_utc(b.created_at)).total_seconds()) / 60


def detect_revenge_trading(trades: list[Trade]) -> list[Trade]:
    """Flag losses followed within 15 minutes by a trade over 1.3x the size.

    The trade following a loss is the next newer one, which sits just
    before it in the newest-first list. Both trades of every qualifying
    pair are flagged, loss first. A trade taking part in two pairs
    appears twice; callers that need unique trades must de-duplicate
    themselves.

    Args:
        trades: Trades ordered newest first.

    Returns:
        Flagged trades in detection order.
    """
    flagged: list[Trade] = []

    for following, current in zip(trades, trades[1:]):
        if current.outcome != "loss":
            continue
        gap = _minutes_between(current, following)
        ratio = (following.volume or 0) / (current.volume or 1)
        if gap < REVENGE_MAX_GAP_MINUTES and ratio > REVENGE_MIN_VOLUME_RATIO:
            flagged.extend([current, following])

    return flagged


def detect_overtrading(trades: list[Trade], now: datetime) -> tuple[bool, list[int]]:
    """Check for more than 10 trades in the two hours before ``now``.

    Args:
        trades: Trades ordered newest first.
        now: Current time. Naive values are read as UTC.

    Returns:
        Tuple of (flagged, evidence trade IDs). Evidence is the first
        10 trades of the input when flagged, otherwise empty.
    """
    cutoff = _as_utc(now) - OVERTRADING_WINDOW
    recent_count = sum(1 for t in trades if _as_utc(t.created_at) > cutoff)

    if recent_count > OVERTRADING_MAX_TRADES:
        evidence = [t.id for t in trades[:OVERTRADING_EVIDENCE_SIZE] if t.id is not None]
        return True, evidence
    return False, []


def detect_lot_size_escalation(trades: list[Trade]) -> Optional[Escalation]:
    """Check whether the last three trades grew strictly and by over 1.5x.

    Args:
        trades: Trades ordered newest first.

    Returns:
        Escalation with the three trades and newest/oldest volume ratio,
        or None.
    """
    if len(trades) < 3:
        return None

    last_three = trades[:3]
    volumes = [t.volume or ESCALATION_DEFAULT_VOLUME for t in last_three]

    is_escalating = volumes[0] > volumes[1] > volumes[2]
    ratio = volumes[0] / volumes[2]

    if is_escalating and ratio > ESCALATION_MIN_RATIO:
        return Escalation(trades=last_three, ratio=ratio)
    return None


def detect_behaviors(trades: list[Trade], now: datetime) -> list[BehaviorFinding]:
    """Run all detectors and build findings.

    Args:
        trades: Trades ordered newest first.
        now: Current time for the overtrading window.

    Returns:
        Findings in detector order: revenge trading, overtrading,
        lot-size escalation.
    """
    findings: list[BehaviorFinding] = []

    revenge = detect_revenge_trading(trades)
    if revenge:
        findings.append(BehaviorFinding(
            behavior_type="revenge_trading",
            severity="high",
            trade_sequence=[t.id for t in revenge if t.id is not None],
            ai_recommendation=REVENGE_RECOMMENDATION,
        ))

    overtrading, evidence = detect_overtrading(trades, now)
    if overtrading:
        findings.append(BehaviorFinding(
            behavior_type="overtrading",
            severity="medium",
            trade_sequence=evidence,
            ai_recommendation=OVERTRADING_RECOMMENDATION,
        ))

    escalation = detect_lot_size_escalation(trades)
    if escalation:
        findings.append(BehaviorFinding(
            behavior_type="lot_size_escalation",
            severity="high",
            trade_sequence=[t.id for t in escalation.trades if t.id is not None],
            ai_recommendation=ESCALATION_RECOMMENDATION,
        ))

    return findings
