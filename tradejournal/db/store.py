"""SQLite data store for the trade journal."""

import json
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, Optional

from tradejournal.errors import DataStoreError
from tradejournal.models import (
    BehaviorFinding,
    DailyCheckIn,
    Trade,
    TradePattern,
)

TRADE_COLUMNS = (
    "id, user_id, pair, direction, entry_price, exit_price, stop_loss, take_profit, "
    "volume, profit_loss, outcome, emotion_before, emotion_after, session, notes, "
    "broker_ticket, created_at"
)

CHECKIN_COLUMNS = (
    "user_id, check_in_date, mood, confidence, stress, sleep_hours, focus_level, note"
)


def _epoch(moment: datetime) -> float:
    """Seconds since the epoch; naive timestamps are read as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()


def _row_to_trade(row: sqlite3.Row) -> Trade:
    return Trade(
        id=row["id"],
        user_id=row["user_id"],
        pair=row["pair"],
        direction=row["direction"],
        entry_price=row["entry_price"],
        exit_price=row["exit_price"],
        stop_loss=row["stop_loss"],
        take_profit=row["take_profit"],
        volume=row["volume"],
        profit_loss=row["profit_loss"],
        outcome=row["outcome"],
        emotion_before=row["emotion_before"],
        emotion_after=row["emotion_after"],
        session=row["session"],
        notes=row["notes"],
        broker_ticket=row["broker_ticket"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _row_to_checkin(row: sqlite3.Row) -> DailyCheckIn:
    return DailyCheckIn(
        user_id=row["user_id"],
        check_in_date=date.fromisoformat(row["check_in_date"]),
        mood=row["mood"],
        confidence=row["confidence"],
        stress=row["stress"],
        sleep_hours=row["sleep_hours"],
        focus_level=row["focus_level"],
        note=row["note"],
    )


class DataStore:
    """SQLite-based data store for trades, check-ins and analysis results."""

    REQUIRED_TABLES = [
        "trades",
        "daily_checkins",
        "trading_behaviors",
        "trade_patterns",
    ]

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DataStoreError(f"Cannot create database directory {self.db_path.parent}: {e}") from e

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor, commit on success and always close.

        sqlite errors are re-raised as DataStoreError.
        """
        try:
            conn = self._get_connection()
        except sqlite3.Error as e:
            raise DataStoreError(f"Cannot open database {self.db_path}: {e}") from e
        try:
            yield conn.cursor()
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise DataStoreError(str(e)) from e
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        with self._cursor() as cursor:
            # Trades table; created_ts mirrors created_at for range queries
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trades (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    pair TEXT NOT NULL,
                    direction TEXT NOT NULL,
                    entry_price REAL NOT NULL,
                    exit_price REAL,
                    stop_loss REAL,
                    take_profit REAL,
                    volume REAL,
                    profit_loss REAL,
                    outcome TEXT NOT NULL DEFAULT 'open',
                    emotion_before TEXT,
                    emotion_after TEXT,
                    session TEXT,
                    notes TEXT,
                    broker_ticket TEXT,
                    created_at TEXT NOT NULL,
                    created_ts REAL NOT NULL
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_trades_user_ts
                ON trades (user_id, created_ts)
            """)

            # One check-in per user per day
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS daily_checkins (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    check_in_date TEXT NOT NULL,
                    mood TEXT NOT NULL,
                    confidence INTEGER NOT NULL,
                    stress INTEGER NOT NULL,
                    sleep_hours REAL NOT NULL,
                    focus_level INTEGER NOT NULL,
                    note TEXT,
                    UNIQUE(user_id, check_in_date)
                )
            """)

            # Append-only audit of detected behaviors
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trading_behaviors (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    behavior_type TEXT NOT NULL,
                    severity TEXT NOT NULL,
                    trade_sequence TEXT NOT NULL,
                    ai_recommendation TEXT NOT NULL,
                    detected_at TEXT NOT NULL
                )
            """)

            # Append-only pattern analysis results
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trade_patterns (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    pattern_type TEXT NOT NULL,
                    pattern_description TEXT NOT NULL,
                    win_rate REAL NOT NULL,
                    sample_size INTEGER NOT NULL,
                    confidence_score REAL NOT NULL,
                    recommendations TEXT,
                    created_at TEXT NOT NULL
                )
            """)

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]

    # ==================== Trades ====================

    def log_trade(self, trade: Trade) -> int:
        """Log a trade, reconciling by broker ticket when one is set.

        A trade whose (user, broker_ticket) already exists updates the
        stored row instead of inserting a duplicate.

        Args:
            trade: Trade to log.

        Returns:
            The ID of the inserted or updated trade.
        """
        values = (
            trade.pair,
            trade.direction,
            trade.entry_price,
            trade.exit_price,
            trade.stop_loss,
            trade.take_profit,
            trade.volume,
            trade.profit_loss,
            trade.outcome,
            trade.emotion_before,
            trade.emotion_after,
            trade.session,
            trade.notes,
            trade.created_at.isoformat(),
            _epoch(trade.created_at),
        )
        with self._cursor() as cursor:
            existing = None
            if trade.broker_ticket:
                cursor.execute(
                    "SELECT id FROM trades WHERE user_id = ? AND broker_ticket = ?",
                    (trade.user_id, trade.broker_ticket),
                )
                existing = cursor.fetchone()

            if existing:
                cursor.execute(
                    """
                    UPDATE trades SET
                        pair = ?, direction = ?, entry_price = ?, exit_price = ?,
                        stop_loss = ?, take_profit = ?, volume = ?, profit_loss = ?,
                        outcome = ?, emotion_before = ?, emotion_after = ?, session = ?,
                        notes = ?, created_at = ?, created_ts = ?
                    WHERE id = ?
                    """,
                    values + (existing["id"],),
                )
                return existing["id"]

            cursor.execute(
                """
                INSERT INTO trades
                (pair, direction, entry_price, exit_price, stop_loss, take_profit,
                 volume, profit_loss, outcome, emotion_before, emotion_after, session,
                 notes, created_at, created_ts, user_id, broker_ticket)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                values + (trade.user_id, trade.broker_ticket),
            )
            return cursor.lastrowid or 0

    def get_trade(self, trade_id: int) -> Optional[Trade]:
        """Get a trade by ID.

        Args:
            trade_id: Trade ID.

        Returns:
            Trade if found, None otherwise.
        """
        with self._cursor() as cursor:
            cursor.execute(
                f"SELECT {TRADE_COLUMNS} FROM trades WHERE id = ?",
                (trade_id,),
            )
            row = cursor.fetchone()
            return _row_to_trade(row) if row else None

    def get_trades(
        self,
        user_id: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        pair: Optional[str] = None,
        outcome: Optional[str] = None,
        newest_first: bool = False,
        limit: Optional[int] = None,
    ) -> list[Trade]:
        """Get a user's trades.

        Args:
            user_id: Owner identifier.
            since: Only trades created at or after this moment.
            until: Only trades created at or before this moment.
            pair: Only trades on this pair (exact match).
            outcome: Only trades with this outcome.
            newest_first: Sort newest first instead of oldest first.
            limit: Maximum number of trades to return.

        Returns:
            List of trades.
        """
        clauses = ["user_id = ?"]
        params: list = [user_id]
        if since is not None:
            clauses.append("created_ts >= ?")
            params.append(_epoch(since))
        if until is not None:
            clauses.append("created_ts <= ?")
            params.append(_epoch(until))
        if pair is not None:
            clauses.append("pair = ?")
            params.append(pair)
        if outcome is not None:
            clauses.append("outcome = ?")
            params.append(outcome)

        order = "DESC" if newest_first else "ASC"
        query = (
            f"SELECT {TRADE_COLUMNS} FROM trades WHERE {' AND '.join(clauses)} "
            f"ORDER BY created_ts {order}, id {order}"
        )
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        with self._cursor() as cursor:
            cursor.execute(query, params)
            return [_row_to_trade(row) for row in cursor.fetchall()]

    def get_trades_on_dates(self, user_id: str, dates: Iterable[date]) -> list[Trade]:
        """Get a user's trades whose stored timestamp falls on any of the dates.

        Dates are matched against the stored timestamp text, so no
        timezone conversion is applied.

        Args:
            user_id: Owner identifier.
            dates: Calendar dates to match.

        Returns:
            List of trades, oldest first.
        """
        day_strings = sorted({d.isoformat() for d in dates})
        if not day_strings:
            return []
        placeholders = ", ".join("?" for _ in day_strings)
        with self._cursor() as cursor:
            cursor.execute(
                f"""
                SELECT {TRADE_COLUMNS} FROM trades
                WHERE user_id = ? AND substr(created_at, 1, 10) IN ({placeholders})
                ORDER BY created_ts
                """,
                [user_id, *day_strings],
            )
            return [_row_to_trade(row) for row in cursor.fetchall()]

    def delete_trade(self, user_id: str, trade_id: int) -> bool:
        """Delete one of a user's trades.

        Args:
            user_id: Owner identifier.
            trade_id: ID of the trade to delete.

        Returns:
            True if a trade was deleted.
        """
        with self._cursor() as cursor:
            cursor.execute(
                "DELETE FROM trades WHERE id = ? AND user_id = ?",
                (trade_id, user_id),
            )
            return cursor.rowcount > 0

    def delete_last_trade(self, user_id: str) -> Optional[Trade]:
        """Delete the user's most recently created trade.

        Args:
            user_id: Owner identifier.

        Returns:
            The deleted trade, or None if the user has no trades.
        """
        latest = self.get_trades(user_id, newest_first=True, limit=1)
        if not latest:
            return None
        trade = latest[0]
        self.delete_trade(user_id, trade.id)
        return trade

    # ==================== Check-ins ====================

    def save_checkin(self, checkin: DailyCheckIn) -> None:
        """Save a check-in, replacing any existing one for that day.

        Args:
            checkin: Check-in to save.
        """
        with self._cursor() as cursor:
            cursor.execute(
                f"""
                INSERT INTO daily_checkins ({CHECKIN_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id, check_in_date) DO UPDATE SET
                    mood = excluded.mood,
                    confidence = excluded.confidence,
                    stress = excluded.stress,
                    sleep_hours = excluded.sleep_hours,
                    focus_level = excluded.focus_level,
                    note = excluded.note
                """,
                (
                    checkin.user_id,
                    checkin.check_in_date.isoformat(),
                    checkin.mood,
                    checkin.confidence,
                    checkin.stress,
                    checkin.sleep_hours,
                    checkin.focus_level,
                    checkin.note,
                ),
            )

    def get_checkin(self, user_id: str, day: date) -> Optional[DailyCheckIn]:
        """Get a user's check-in for a day.

        Args:
            user_id: Owner identifier.
            day: Calendar day.

        Returns:
            DailyCheckIn if found, None otherwise.
        """
        with self._cursor() as cursor:
            cursor.execute(
                f"""
                SELECT {CHECKIN_COLUMNS} FROM daily_checkins
                WHERE user_id = ? AND check_in_date = ?
                """,
                (user_id, day.isoformat()),
            )
            row = cursor.fetchone()
            return _row_to_checkin(row) if row else None

    def get_checkins(
        self, user_id: str, since: Optional[date] = None
    ) -> list[DailyCheckIn]:
        """Get a user's check-ins, newest first.

        Args:
            user_id: Owner identifier.
            since: Optional first day to include.

        Returns:
            List of check-ins.
        """
        with self._cursor() as cursor:
            if since:
                cursor.execute(
                    f"""
                    SELECT {CHECKIN_COLUMNS} FROM daily_checkins
                    WHERE user_id = ? AND check_in_date >= ?
                    ORDER BY check_in_date DESC
                    """,
                    (user_id, since.isoformat()),
                )
            else:
                cursor.execute(
                    f"""
                    SELECT {CHECKIN_COLUMNS} FROM daily_checkins
                    WHERE user_id = ?
                    ORDER BY check_in_date DESC
                    """,
                    (user_id,),
                )
            return [_row_to_checkin(row) for row in cursor.fetchall()]

    def get_similar_checkins(
        self, checkin: DailyCheckIn, since: date, tolerance: float = 1
    ) -> list[DailyCheckIn]:
        """Get check-ins close to the given one on confidence, sleep and stress.

        Args:
            checkin: Reference check-in; its owner scopes the query.
            since: First day to include.
            tolerance: Allowed distance on each of the three measures.

        Returns:
            Matching check-ins (including the reference day if stored).
        """
        with self._cursor() as cursor:
            cursor.execute(
                f"""
                SELECT {CHECKIN_COLUMNS} FROM daily_checkins
                WHERE user_id = ? AND check_in_date >= ?
                AND confidence BETWEEN ? AND ?
                AND sleep_hours BETWEEN ? AND ?
                AND stress BETWEEN ? AND ?
                ORDER BY check_in_date DESC
                """,
                (
                    checkin.user_id,
                    since.isoformat(),
                    checkin.confidence - tolerance,
                    checkin.confidence + tolerance,
                    checkin.sleep_hours - tolerance,
                    checkin.sleep_hours + tolerance,
                    checkin.stress - tolerance,
                    checkin.stress + tolerance,
                ),
            )
            return [_row_to_checkin(row) for row in cursor.fetchall()]

    # ==================== Behaviors ====================

    def save_behaviors(
        self,
        user_id: str,
        findings: list[BehaviorFinding],
        detected_at: datetime,
    ) -> None:
        """Append behavior findings to the audit table.

        Args:
            user_id: Owner identifier.
            findings: Findings to store.
            detected_at: Detection time.
        """
        with self._cursor() as cursor:
            for finding in findings:
                cursor.execute(
                    """
                    INSERT INTO trading_behaviors
                    (user_id, behavior_type, severity, trade_sequence,
                     ai_recommendation, detected_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        user_id,
                        finding.behavior_type,
                        finding.severity,
                        json.dumps(finding.trade_sequence),
                        finding.ai_recommendation,
                        detected_at.isoformat(),
                    ),
                )

    def get_behaviors(self, user_id: str) -> list[BehaviorFinding]:
        """Get stored behavior findings, newest first."""
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT behavior_type, severity, trade_sequence, ai_recommendation
                FROM trading_behaviors
                WHERE user_id = ?
                ORDER BY id DESC
                """,
                (user_id,),
            )
            return [
                BehaviorFinding(
                    behavior_type=row["behavior_type"],
                    severity=row["severity"],
                    trade_sequence=json.loads(row["trade_sequence"]),
                    ai_recommendation=row["ai_recommendation"],
                )
                for row in cursor.fetchall()
            ]

    # ==================== Patterns ====================

    def save_patterns(
        self,
        user_id: str,
        patterns: list[TradePattern],
        created_at: datetime,
    ) -> None:
        """Append pattern analysis results.

        Args:
            user_id: Owner identifier.
            patterns: Patterns to store.
            created_at: Analysis time.
        """
        with self._cursor() as cursor:
            for pattern in patterns:
                cursor.execute(
                    """
                    INSERT INTO trade_patterns
                    (user_id, pattern_type, pattern_description, win_rate,
                     sample_size, confidence_score, recommendations, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        user_id,
                        pattern.pattern_type,
                        pattern.description,
                        pattern.win_rate,
                        pattern.sample_size,
                        pattern.confidence_score,
                        pattern.recommendations,
                        created_at.isoformat(),
                    ),
                )

    def get_patterns(self, user_id: str) -> list[TradePattern]:
        """Get stored patterns, newest first."""
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT pattern_type, pattern_description, win_rate, sample_size,
                       confidence_score, recommendations
                FROM trade_patterns
                WHERE user_id = ?
                ORDER BY id DESC
                """,
                (user_id,),
            )
            return [
                TradePattern(
                    pattern_type=row["pattern_type"],
                    description=row["pattern_description"],
                    win_rate=row["win_rate"],
                    sample_size=row["sample_size"],
                    confidence_score=row["confidence_score"],
                    recommendations=row["recommendations"] or "",
                )
                for row in cursor.fetchall()
            ]

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        with self._cursor() as cursor:
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            return stats
