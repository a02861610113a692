"""Win-rate aggregation by pair, weekday and trading session.

The three tables built here, plus the raw trade sample, are what the
pattern summarizer sees. When the summarizer is unavailable or returns
nothing usable, ``generate_basic_patterns`` derives patterns locally.
"""

import json
import logging
import re
from datetime import timezone
from typing import NamedTuple, Optional

from pydantic import ValidationError

from tradejournal.errors import MalformedSummaryError
from tradejournal.models import Trade, TradePattern

logger = logging.getLogger(__name__)

MIN_PATTERN_TRADES = 5
PATTERN_WINDOW_DAYS = 90
MAX_STORED_PATTERNS = 5
PROMPT_SAMPLE_SIZE = 50

SESSION_LONDON = "London"
SESSION_NEW_YORK = "New York"
SESSION_ASIAN = "Asian"


class PairStats(NamedTuple):
    pair: str
    win_rate: float
    total_trades: int
    total_pnl: float


class DayStats(NamedTuple):
    day: str
    win_rate: float
    total_trades: int


class SessionStats(NamedTuple):
    session: str
    win_rate: float
    total_trades: int


def win_rate_percent(wins: int, total: int) -> float:
    """Win rate as a percentage rounded to one decimal; 0 for no trades."""
    if total <= 0:
        return 0.0
    return round(wins / total * 100, 1)


def session_for_hour(hour: int) -> str:
    """Map a UTC hour to a trading session.

    London (07-16) is checked before New York (13-22), so the
    13:00-15:59 overlap counts as London.
    """
    if 7 <= hour < 16:
        return SESSION_LONDON
    if 13 <= hour < 22:
        return SESSION_NEW_YORK
    return SESSION_ASIAN


def _utc_hour(trade: Trade) -> int:
    # naive timestamps are taken to be UTC already
    moment = trade.created_at
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.hour


def _tally(trades: list[Trade], key) -> dict[str, list[int]]:
    """Count [total, wins] per bucket, keeping first-seen bucket order."""
    buckets: dict[str, list[int]] = {}
    for trade in trades:
        counts = buckets.setdefault(key(trade), [0, 0])
        counts[0] += 1
        if trade.outcome == "win":
            counts[1] += 1
    return buckets


def aggregate_by_pair(trades: list[Trade]) -> list[PairStats]:
    """Win rate, trade count and total P&L per pair (case-sensitive)."""
    totals: dict[str, list] = {}
    for trade in trades:
        stats = totals.setdefault(trade.pair, [0, 0, 0.0])
        stats[0] += 1
        if trade.outcome == "win":
            stats[1] += 1
        stats[2] += trade.profit_loss or 0

    return [
        PairStats(
            pair=pair,
            win_rate=win_rate_percent(wins, total),
            total_trades=total,
            total_pnl=round(pnl, 2),
        )
        for pair, (total, wins, pnl) in totals.items()
    ]


def aggregate_by_day(trades: list[Trade]) -> list[DayStats]:
    """Win rate and trade count per weekday name.

    The weekday comes from the stored timestamp as-is; no timezone
    normalization is applied.
    """
    buckets = _tally(trades, lambda t: t.created_at.strftime("%A"))
    return [
        DayStats(day=day, win_rate=win_rate_percent(wins, total), total_trades=total)
        for day, (total, wins) in buckets.items()
    ]


def aggregate_by_session(trades: list[Trade]) -> list[SessionStats]:
    """Win rate and trade count per session derived from the UTC hour."""
    buckets = _tally(trades, lambda t: session_for_hour(_utc_hour(t)))
    return [
        SessionStats(session=session, win_rate=win_rate_percent(wins, total), total_trades=total)
        for session, (total, wins) in buckets.items()
    ]


def build_pattern_prompt(
    trades: list[Trade],
    pairs: list[PairStats],
    days: list[DayStats],
    sessions: list[SessionStats],
) -> str:
    """Build the summarizer prompt from the aggregate tables and a trade sample."""
    sample = [
        {
            "pair": t.pair,
            "direction": t.direction,
            "outcome": t.outcome,
            "profit_loss": t.profit_loss,
            "created_at": t.created_at.isoformat(),
        }
        for t in trades[-PROMPT_SAMPLE_SIZE:]
    ]
    return (
        f"Analyze {len(trades)} trades:\n"
        f"PAIRS: {json.dumps([p._asdict() for p in pairs])}\n"
        f"TIME: {json.dumps([d._asdict() for d in days])}\n"
        f"SESSIONS: {json.dumps([s._asdict() for s in sessions])}\n"
        f"RECENT TRADES: {json.dumps(sample)}\n\n"
        "Return exactly 5 patterns as JSON array:\n"
        '[{"pattern_type":"pair_based|time_based|session_based","description":"...",'
        '"win_rate":number,"sample_size":number,"confidence_score":number,'
        '"recommendations":"..."}]'
    )


def parse_summarized_patterns(text: str) -> list[TradePattern]:
    """Extract patterns from summarizer output.

    Takes the first JSON array in the text and keeps the first five
    items that fit the TradePattern shape. Numbers are taken as given;
    only their types are checked.

    Raises:
        MalformedSummaryError: No JSON array could be parsed.
    """
    match = re.search(r"\[[\s\S]*\]", text or "")
    if not match:
        raise MalformedSummaryError("Summarizer response contains no JSON array")
    try:
        items = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise MalformedSummaryError(f"Summarizer JSON is invalid: {e}") from e
    if not isinstance(items, list):
        raise MalformedSummaryError("Summarizer JSON is not an array")

    patterns = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            patterns.append(TradePattern(
                pattern_type=item.get("pattern_type"),
                description=item.get("description"),
                win_rate=item.get("win_rate"),
                sample_size=item.get("sample_size"),
                confidence_score=item.get("confidence_score"),
                recommendations=item.get("recommendations") or "",
            ))
        except ValidationError as e:
            logger.debug("Dropping malformed pattern %r: %s", item, e)
    return patterns[:MAX_STORED_PATTERNS]


def _best(rows: list) -> Optional[NamedTuple]:
    # max() keeps the first of equal rows
    return max(rows, key=lambda r: r.win_rate) if rows else None


def _confidence(sample_size: int) -> float:
    return float(min(sample_size * 10, 80))


def generate_basic_patterns(
    pairs: list[PairStats],
    days: list[DayStats],
    sessions: list[SessionStats],
) -> list[TradePattern]:
    """Offline patterns: the best bucket of each aggregate table."""
    patterns = []

    best_pair = _best(pairs)
    if best_pair:
        patterns.append(TradePattern(
            pattern_type="pair_based",
            description=f"Best performance on {best_pair.pair}",
            win_rate=best_pair.win_rate,
            sample_size=best_pair.total_trades,
            confidence_score=_confidence(best_pair.total_trades),
            recommendations=f"Focus on {best_pair.pair} setups",
        ))

    best_day = _best(days)
    if best_day:
        patterns.append(TradePattern(
            pattern_type="time_based",
            description=f"Best results on {best_day.day}",
            win_rate=best_day.win_rate,
            sample_size=best_day.total_trades,
            confidence_score=_confidence(best_day.total_trades),
            recommendations=f"Consider trading more on {best_day.day}",
        ))

    best_session = _best(sessions)
    if best_session:
        patterns.append(TradePattern(
            pattern_type="session_based",
            description=f"Strongest in {best_session.session} session",
            win_rate=best_session.win_rate,
            sample_size=best_session.total_trades,
            confidence_score=_confidence(best_session.total_trades),
            recommendations=f"Focus on {best_session.session} session",
        ))

    return patterns
