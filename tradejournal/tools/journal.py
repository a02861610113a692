"""Journal tools: trade logging and daily check-ins.

These tools write to and read from the SQLite journal and return plain
dictionaries with an ``error`` key, None on success.
"""

from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from tradejournal.config import DEFAULT_DB_PATH, local_now
from tradejournal.db.store import DataStore
from tradejournal.errors import DataStoreError
from tradejournal.models import DailyCheckIn, Trade


def _get_data_store(db_path: Optional[Path] = None) -> DataStore:
    """Get a DataStore instance.

    Args:
        db_path: Optional path to database. Uses default if not provided.

    Returns:
        DataStore instance.
    """
    return DataStore(db_path or DEFAULT_DB_PATH)


def _validation_message(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'trade'}: {err['msg']}"
        for err in error.errors()
    )


def trade_to_dict(trade: Trade) -> dict:
    """Serialize a trade for JSON output."""
    return trade.model_dump(mode="json")


def log_trade(
    user_id: str,
    pair: str,
    direction: str,
    entry_price: float,
    exit_price: Optional[float] = None,
    stop_loss: Optional[float] = None,
    take_profit: Optional[float] = None,
    volume: Optional[float] = None,
    profit_loss: Optional[float] = None,
    outcome: str = "open",
    emotion_before: Optional[str] = None,
    emotion_after: Optional[str] = None,
    session: Optional[str] = None,
    notes: Optional[str] = None,
    broker_ticket: Optional[str] = None,
    created_at: Optional[datetime] = None,
    db_path: Optional[Path] = None,
) -> dict:
    """Log a trade to the journal.

    A trade carrying a broker ticket already in the journal updates the
    existing entry (broker sync reconciliation).

    Returns:
        Dictionary containing:
        - id: ID of the stored trade (None on error)
        - trade: The stored trade
        - error: Error message if logging failed (None if successful)
    """
    try:
        trade = Trade(
            user_id=user_id,
            pair=pair.strip().upper(),
            direction=direction,
            entry_price=entry_price,
            exit_price=exit_price,
            stop_loss=stop_loss,
            take_profit=take_profit,
            volume=volume,
            profit_loss=profit_loss,
            outcome=outcome,
            emotion_before=emotion_before,
            emotion_after=emotion_after,
            session=session,
            notes=notes,
            broker_ticket=broker_ticket,
            created_at=created_at or local_now(),
        )
    except ValidationError as e:
        return {"id": None, "trade": None, "error": _validation_message(e)}

    try:
        trade_id = _get_data_store(db_path).log_trade(trade)
    except DataStoreError as e:
        return {"id": None, "trade": None, "error": f"Could not save trade: {e}"}

    return {
        "id": trade_id,
        "trade": trade_to_dict(trade.model_copy(update={"id": trade_id})),
        "error": None,
    }


def get_trades(
    user_id: str,
    days: Optional[int] = None,
    pair: Optional[str] = None,
    now: Optional[datetime] = None,
    db_path: Optional[Path] = None,
) -> dict:
    """Get journaled trades, newest first.

    Args:
        user_id: Owner identifier.
        days: Only trades from the last N days. All trades if None.
        pair: Optional pair filter.
        now: Current time override.
        db_path: Optional path to database file.

    Returns:
        Dictionary containing:
        - trades: List of trade dictionaries
        - count: Number of trades
        - total_pnl: Sum of realized P&L
        - error: Error message if query failed (None if successful)
    """
    since = (now or local_now()) - timedelta(days=days) if days else None
    try:
        trades = _get_data_store(db_path).get_trades(
            user_id, since=since, pair=pair, newest_first=True
        )
    except DataStoreError as e:
        return {"trades": [], "count": 0, "total_pnl": 0.0, "error": str(e)}

    return {
        "trades": [trade_to_dict(t) for t in trades],
        "count": len(trades),
        "total_pnl": round(sum(t.profit_loss or 0 for t in trades), 2),
        "error": None,
    }


def delete_last_trade(user_id: str, db_path: Optional[Path] = None) -> dict:
    """Delete the most recently created trade.

    Returns:
        Dictionary containing:
        - deleted: The deleted trade, or None if there was nothing to delete
        - error: Error message if deletion failed (None if successful)
    """
    try:
        trade = _get_data_store(db_path).delete_last_trade(user_id)
    except DataStoreError as e:
        return {"deleted": None, "error": str(e)}
    return {"deleted": trade_to_dict(trade) if trade else None, "error": None}


def save_checkin(
    user_id: str,
    confidence: int,
    stress: int,
    sleep_hours: float,
    mood: str = "neutral",
    focus_level: int = 5,
    note: Optional[str] = None,
    day: Optional[date] = None,
    db_path: Optional[Path] = None,
) -> dict:
    """Record the daily mental-state check-in, replacing any earlier one that day.

    Returns:
        Dictionary containing:
        - checkin: The stored check-in (None on error)
        - error: Error message if saving failed (None if successful)
    """
    try:
        checkin = DailyCheckIn(
            user_id=user_id,
            check_in_date=day or local_now().date(),
            mood=mood,
            confidence=confidence,
            stress=stress,
            sleep_hours=sleep_hours,
            focus_level=focus_level,
            note=note,
        )
    except ValidationError as e:
        return {"checkin": None, "error": _validation_message(e)}

    try:
        _get_data_store(db_path).save_checkin(checkin)
    except DataStoreError as e:
        return {"checkin": None, "error": f"Could not save check-in: {e}"}

    return {"checkin": checkin.model_dump(mode="json"), "error": None}
