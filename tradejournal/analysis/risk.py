"""Pre-trade risk assessment.

Classifies the risk of trading right now from today's check-in and
recent losses. The result is advisory: it is recomputed on every view,
never stored, and falls back to ``medium`` when data cannot be read.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Optional

from pydantic import ValidationError

from tradejournal.db.store import DataStore
from tradejournal.errors import DataStoreError
from tradejournal.models import DailyCheckIn, HistoricalPerformance, RiskAssessment, Trade

logger = logging.getLogger(__name__)

RECENT_LOSS_WINDOW = timedelta(hours=2)
SIMILAR_DAYS_LOOKBACK = timedelta(days=30)
SIMILARITY_TOLERANCE = 1

RISK_MESSAGES = {
    "no_checkin": (
        "No mental state check-in today. Complete your daily check-in for "
        "personalized guidance."
    ),
    "high": (
        "HIGH RISK CONDITIONS DETECTED. Consider skipping live trading today "
        "or reducing position size by 50%."
    ),
    "medium": (
        "Suboptimal trading conditions. Consider reducing position size or "
        "being extra cautious with entries."
    ),
    "low": (
        "Good trading conditions. Your mental state aligns with your "
        "historically better performance."
    ),
    "degraded": (
        "Could not load your recent data. Treat conditions as medium risk and "
        "try again later."
    ),
}


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def classify_risk(checkin: Optional[DailyCheckIn], recent_losses: int) -> str:
    """Classify pre-trade risk.

    No check-in is ``medium``. Otherwise a poor mental state and recent
    losses together are ``high``, either one alone is ``medium``, and
    neither is ``low``.
    """
    if checkin is None:
        return "medium"

    poor_mental_state = checkin.is_poor_mental_state
    has_recent_losses = recent_losses > 0

    if poor_mental_state and has_recent_losses:
        return "high"
    if poor_mental_state or has_recent_losses:
        return "medium"
    return "low"


def summarize_performance(trades: list[Trade]) -> Optional[HistoricalPerformance]:
    """Win rate and average P&L of a trade sample, or None if empty."""
    if not trades:
        return None
    wins = sum(1 for t in trades if t.outcome == "win")
    total_pnl = sum(t.profit_loss or 0 for t in trades)
    return HistoricalPerformance(
        win_rate=_round_half_up(wins / len(trades) * 100),
        avg_pnl=_round_half_up(total_pnl / len(trades)),
        sample_size=len(trades),
    )


def similar_day_performance(
    store: DataStore, checkin: DailyCheckIn, now: datetime
) -> Optional[HistoricalPerformance]:
    """Performance on recent days whose check-in resembles ``checkin``.

    Similar days are those in the last 30 days within one point of the
    check-in on confidence, sleep hours and stress.
    """
    since = (now - SIMILAR_DAYS_LOOKBACK).date()
    similar = store.get_similar_checkins(checkin, since, tolerance=SIMILARITY_TOLERANCE)
    if not similar:
        return None
    trades = store.get_trades_on_dates(checkin.user_id, [c.check_in_date for c in similar])
    return summarize_performance(trades)


def _message(level: str, checkin: Optional[DailyCheckIn]) -> str:
    if checkin is None:
        return RISK_MESSAGES["no_checkin"]
    return RISK_MESSAGES[level]


def assess_pre_trade_risk(store: DataStore, user_id: str, now: datetime) -> RiskAssessment:
    """Assess the risk of trading at ``now``.

    Args:
        store: Data store to read check-ins and trades from.
        user_id: Owner identifier.
        now: Current time; its date selects today's check-in.

    Returns:
        RiskAssessment. Read failures give a degraded ``medium`` result
        instead of raising.
    """
    try:
        checkin = store.get_checkin(user_id, now.date())
        recent_losses = len(store.get_trades(
            user_id, since=now - RECENT_LOSS_WINDOW, outcome="loss"
        ))
        historical = similar_day_performance(store, checkin, now) if checkin else None
    except (DataStoreError, ValidationError) as e:
        logger.warning("Pre-trade risk data unavailable for %s: %s", user_id, e)
        return RiskAssessment(
            risk_level="medium",
            has_checkin=False,
            degraded=True,
            message=RISK_MESSAGES["degraded"],
        )

    level = classify_risk(checkin, recent_losses)
    return RiskAssessment(
        risk_level=level,
        has_checkin=checkin is not None,
        recent_losses=recent_losses,
        poor_mental_state=bool(checkin and checkin.is_poor_mental_state),
        today=checkin,
        historical=historical,
        message=_message(level, checkin),
    )
