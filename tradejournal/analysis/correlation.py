"""Mental-state correlation between daily check-ins and trading results."""

from collections import defaultdict
from datetime import date
from typing import Optional

from tradejournal.models import DailyCheckIn, Trade


def _average(values: list[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def match_checkins_to_trades(
    checkins: list[DailyCheckIn], trades: list[Trade]
) -> list[dict]:
    """Pair each check-in with that day's trades.

    Days are taken from the stored trade timestamp without timezone
    conversion. Check-ins with no trades that day are skipped.

    Returns:
        One dict per matched day with the check-in, win_rate,
        total_pnl and trade_count.
    """
    by_date: dict[date, list[Trade]] = defaultdict(list)
    for trade in trades:
        by_date[trade.created_at.date()].append(trade)

    matched = []
    for checkin in checkins:
        day_trades = by_date.get(checkin.check_in_date, [])
        if not day_trades:
            continue
        wins = sum(1 for t in day_trades if t.outcome == "win")
        matched.append({
            "checkin": checkin,
            "win_rate": wins / len(day_trades) * 100,
            "total_pnl": sum(t.profit_loss or 0 for t in day_trades),
            "trade_count": len(day_trades),
        })
    return matched


def correlate_checkins(
    checkins: list[DailyCheckIn], trades: list[Trade]
) -> Optional[dict]:
    """Average daily win rate per confidence, sleep and stress band.

    Bands: confidence high >=7, medium 4-6, low <4; sleep good >=7h,
    poor <6h; stress low <=4, high >=7. A band without matched days is
    None.

    Returns:
        Nested dict of band averages, or None when no check-in day had
        trades.
    """
    matched = match_checkins_to_trades(checkins, trades)
    if not matched:
        return None

    def band(predicate) -> Optional[float]:
        return _average([m["win_rate"] for m in matched if predicate(m["checkin"])])

    return {
        "matched_days": len(matched),
        "confidence": {
            "high": band(lambda c: c.confidence >= 7),
            "medium": band(lambda c: 4 <= c.confidence < 7),
            "low": band(lambda c: c.confidence < 4),
        },
        "sleep": {
            "good": band(lambda c: c.sleep_hours >= 7),
            "poor": band(lambda c: c.sleep_hours < 6),
        },
        "stress": {
            "low": band(lambda c: c.stress <= 4),
            "high": band(lambda c: c.stress >= 7),
        },
    }
