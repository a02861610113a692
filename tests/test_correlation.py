"""Tests for mental-state correlation.

**Feature: trade-journal**
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from tradejournal.analysis.correlation import correlate_checkins, match_checkins_to_trades
from tradejournal.models import DailyCheckIn, Trade

DAY_ONE = date(2026, 3, 2)
DAY_TWO = date(2026, 3, 3)
DAY_THREE = date(2026, 3, 4)


def make_checkin(day: date, confidence: int, sleep_hours: float, stress: int) -> DailyCheckIn:
    return DailyCheckIn(
        user_id="trader-1",
        check_in_date=day,
        confidence=confidence,
        stress=stress,
        sleep_hours=sleep_hours,
    )


def make_trade(day: date, outcome: str, profit_loss: float, hour: int = 10) -> Trade:
    return Trade(
        user_id="trader-1",
        pair="EURUSD",
        direction="buy",
        entry_price=1.08,
        outcome=outcome,
        profit_loss=profit_loss,
        created_at=datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc),
    )


class TestCheckinMatching:
    """
    **Feature: trade-journal, Property 20: Check-in Matching**

    *For any* check-in, its day's trades give the win rate and P&L for
    that day; days without trades are skipped.
    """

    def test_matches_by_calendar_day(self):
        """Each check-in is paired with trades from the same date."""
        checkins = [make_checkin(DAY_ONE, 8, 8, 2), make_checkin(DAY_TWO, 3, 5, 8)]
        trades = [
            make_trade(DAY_ONE, "win", 20),
            make_trade(DAY_ONE, "loss", -5, hour=14),
            make_trade(DAY_THREE, "win", 40),
        ]

        matched = match_checkins_to_trades(checkins, trades)

        assert len(matched) == 1
        assert matched[0]["checkin"].check_in_date == DAY_ONE
        assert matched[0]["win_rate"] == 50.0
        assert matched[0]["total_pnl"] == 15
        assert matched[0]["trade_count"] == 2

    def test_day_uses_stored_offset(self):
        """A trade late in the evening at UTC-5 belongs to that local day."""
        checkins = [make_checkin(DAY_ONE, 7, 7, 3)]
        late = Trade(
            user_id="trader-1",
            pair="EURUSD",
            direction="buy",
            entry_price=1.08,
            outcome="win",
            profit_loss=5,
            created_at=datetime(2026, 3, 2, 22, 0, tzinfo=timezone(timedelta(hours=-5))),
        )

        assert len(match_checkins_to_trades(checkins, [late])) == 1


class TestCheckinCorrelation:
    """
    **Feature: trade-journal, Property 21: Band Averages**

    *For any* matched days, each band reports the mean daily win rate of
    its days, or None when it has none.
    """

    def test_no_matches_returns_none(self):
        """Without a check-in day that has trades there is nothing to report."""
        assert correlate_checkins([make_checkin(DAY_ONE, 7, 7, 3)], []) is None

    def test_band_averages(self):
        """Days are grouped by confidence, sleep and stress bands."""
        checkins = [
            make_checkin(DAY_ONE, 8, 8, 2),
            make_checkin(DAY_TWO, 9, 7.5, 3),
            make_checkin(DAY_THREE, 2, 5, 8),
        ]
        trades = [
            make_trade(DAY_ONE, "win", 10),
            make_trade(DAY_TWO, "win", 10),
            make_trade(DAY_TWO, "loss", -10, hour=12),
            make_trade(DAY_THREE, "loss", -30),
        ]

        result = correlate_checkins(checkins, trades)

        assert result["matched_days"] == 3
        assert result["confidence"]["high"] == pytest.approx(75.0)
        assert result["confidence"]["medium"] is None
        assert result["confidence"]["low"] == 0.0
        assert result["sleep"]["good"] == pytest.approx(75.0)
        assert result["sleep"]["poor"] == 0.0
        assert result["stress"]["low"] == pytest.approx(75.0)
        assert result["stress"]["high"] == 0.0
