"""Data models for the trade journal."""

from tradejournal.models.trade import Trade
from tradejournal.models.checkin import DailyCheckIn
from tradejournal.models.behavior import BehaviorFinding
from tradejournal.models.pattern import TradePattern
from tradejournal.models.risk import HistoricalPerformance, RiskAssessment

__all__ = [
    "Trade",
    "DailyCheckIn",
    "BehaviorFinding",
    "TradePattern",
    "HistoricalPerformance",
    "RiskAssessment",
]
