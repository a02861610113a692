"""Behavior detection, pattern aggregation and risk assessment."""

from tradejournal.analysis.behavior import (
    detect_behaviors,
    detect_lot_size_escalation,
    detect_overtrading,
    detect_revenge_trading,
)
from tradejournal.analysis.correlation import correlate_checkins
from tradejournal.analysis.patterns import (
    aggregate_by_day,
    aggregate_by_pair,
    aggregate_by_session,
    generate_basic_patterns,
    session_for_hour,
)
from tradejournal.analysis.risk import assess_pre_trade_risk, classify_risk

__all__ = [
    # Behavior detectors
    "detect_behaviors",
    "detect_revenge_trading",
    "detect_overtrading",
    "detect_lot_size_escalation",
    # Aggregators
    "aggregate_by_pair",
    "aggregate_by_day",
    "aggregate_by_session",
    "generate_basic_patterns",
    "session_for_hour",
    # Risk and correlation
    "assess_pre_trade_risk",
    "classify_risk",
    "correlate_checkins",
]
