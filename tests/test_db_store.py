"""Property-based tests for the database store.

**Feature: trade-journal**
"""

import tempfile
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.db.store import DataStore
from tradejournal.errors import DataStoreError
from tradejournal.models import BehaviorFinding, DailyCheckIn, Trade, TradePattern

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
USER = "trader-1"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        yield DataStore(db_path)


def make_trade(
    created_at: datetime = NOW,
    pair: str = "EURUSD",
    outcome: str = "win",
    profit_loss: float | None = 12.5,
    broker_ticket: str | None = None,
    user_id: str = USER,
) -> Trade:
    return Trade(
        user_id=user_id,
        pair=pair,
        direction="buy",
        entry_price=1.0850,
        exit_price=1.0875,
        stop_loss=1.0830,
        take_profit=1.0900,
        volume=0.2,
        profit_loss=profit_loss,
        outcome=outcome,
        emotion_before="calm",
        session="London",
        broker_ticket=broker_ticket,
        created_at=created_at,
    )


def make_checkin(day: date, confidence: int = 6, stress: int = 4, sleep_hours: float = 7) -> DailyCheckIn:
    return DailyCheckIn(
        user_id=USER,
        check_in_date=day,
        mood="neutral",
        confidence=confidence,
        stress=stress,
        sleep_hours=sleep_hours,
    )


class TestDatabaseSchemaCompleteness:
    """
    **Feature: trade-journal, Property 14: Database Schema Completeness**

    *For any* fresh database, all required tables (trades, daily_checkins,
    trading_behaviors, trade_patterns) should exist.
    """

    def test_schema_completeness(self, temp_db: DataStore):
        """Test that all required tables exist in a fresh database."""
        tables = temp_db.get_tables()

        for table in DataStore.REQUIRED_TABLES:
            assert table in tables, f"Required table '{table}' is missing"

    def test_reopening_keeps_data(self):
        """Opening an existing database neither fails nor drops rows."""
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "nested" / "journal.db"
            DataStore(db_path).log_trade(make_trade())

            store = DataStore(db_path)

            assert store.get_stats()["trades"] == 1

    def test_unreadable_database_raises_store_error(self):
        """A file that is not a SQLite database surfaces as DataStoreError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "broken.db"
            db_path.write_bytes(b"this is not a database" * 100)

            with pytest.raises(DataStoreError):
                DataStore(db_path)

    def test_unusable_directory_raises_store_error(self):
        """A database path below a regular file surfaces as DataStoreError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = Path(tmpdir) / "blocker"
            blocker.write_text("not a directory")

            with pytest.raises(DataStoreError, match="Cannot create database directory"):
                DataStore(blocker / "sub" / "journal.db")


class TestTradeStorage:
    """
    **Feature: trade-journal, Property 15: Trade Storage**

    *For any* logged trade, it can be read back with every field intact,
    ordered by its timestamp.
    """

    def test_log_and_get_trade(self, temp_db: DataStore):
        """A logged trade reads back unchanged apart from its new ID."""
        trade = make_trade()

        trade_id = temp_db.log_trade(trade)
        stored = temp_db.get_trade(trade_id)

        assert stored == trade.model_copy(update={"id": trade_id})

    def test_missing_trade_is_none(self, temp_db: DataStore):
        """Unknown IDs return None."""
        assert temp_db.get_trade(404) is None

    def test_ordering_and_limit(self, temp_db: DataStore):
        """Trades sort by time either way; limit keeps the first rows."""
        for minutes in (30, 10, 20):
            temp_db.log_trade(make_trade(created_at=NOW - timedelta(minutes=minutes)))

        oldest_first = temp_db.get_trades(USER)
        newest_two = temp_db.get_trades(USER, newest_first=True, limit=2)

        assert [t.created_at for t in oldest_first] == [
            NOW - timedelta(minutes=30),
            NOW - timedelta(minutes=20),
            NOW - timedelta(minutes=10),
        ]
        assert [t.created_at for t in newest_two] == [
            NOW - timedelta(minutes=10),
            NOW - timedelta(minutes=20),
        ]

    def test_mixed_offsets_sort_by_instant(self, temp_db: DataStore):
        """Timestamps with different offsets are ordered by the real instant."""
        plus_two = timezone(timedelta(hours=2))
        earlier = datetime(2026, 3, 10, 13, 0, tzinfo=plus_two)  # 11:00 UTC
        later = datetime(2026, 3, 10, 11, 30, tzinfo=timezone.utc)
        temp_db.log_trade(make_trade(created_at=later))
        temp_db.log_trade(make_trade(created_at=earlier))

        trades = temp_db.get_trades(USER)

        assert [t.created_at for t in trades] == [earlier, later]

    def test_filters(self, temp_db: DataStore):
        """since, until, pair and outcome narrow the result."""
        temp_db.log_trade(make_trade(created_at=NOW - timedelta(days=3), pair="GBPUSD"))
        temp_db.log_trade(make_trade(created_at=NOW - timedelta(hours=1), outcome="loss", profit_loss=-4))
        temp_db.log_trade(make_trade(created_at=NOW - timedelta(hours=2), pair="GBPUSD"))

        assert len(temp_db.get_trades(USER, since=NOW - timedelta(days=1))) == 2
        assert len(temp_db.get_trades(USER, until=NOW - timedelta(days=1))) == 1
        assert len(temp_db.get_trades(USER, pair="GBPUSD")) == 2
        assert [t.outcome for t in temp_db.get_trades(USER, outcome="loss")] == ["loss"]

    def test_trades_are_scoped_to_user(self, temp_db: DataStore):
        """One user never sees another user's trades."""
        temp_db.log_trade(make_trade(user_id="someone-else"))

        assert temp_db.get_trades(USER) == []

    def test_trades_on_dates(self, temp_db: DataStore):
        """Trades match by the calendar date of their stored timestamp."""
        temp_db.log_trade(make_trade(created_at=datetime(2026, 3, 8, 9, 0, tzinfo=timezone.utc)))
        temp_db.log_trade(make_trade(created_at=datetime(2026, 3, 8, 23, 59, tzinfo=timezone.utc)))
        temp_db.log_trade(make_trade(created_at=datetime(2026, 3, 9, 0, 1, tzinfo=timezone.utc)))

        trades = temp_db.get_trades_on_dates(USER, [date(2026, 3, 8), date(2026, 3, 1)])

        assert len(trades) == 2
        assert temp_db.get_trades_on_dates(USER, []) == []


class TestBrokerTicketReconciliation:
    """
    **Feature: trade-journal, Property 16: Broker Ticket Reconciliation**

    *For any* broker ticket, logging it twice updates the stored trade
    instead of inserting a duplicate.
    """

    @given(ticket=st.text(alphabet="0123456789", min_size=1, max_size=12))
    @settings(max_examples=25)
    def test_same_ticket_updates(self, ticket: str):
        """
        *For any* ticket, a second log with that ticket keeps one row.
        """
        with tempfile.TemporaryDirectory() as tmpdir:
            store = DataStore(Path(tmpdir) / "test.db")

            first_id = store.log_trade(make_trade(outcome="open", profit_loss=None, broker_ticket=ticket))
            second_id = store.log_trade(make_trade(outcome="loss", profit_loss=-8, broker_ticket=ticket))

            assert first_id == second_id
            trades = store.get_trades(USER)
            assert len(trades) == 1
            assert trades[0].outcome == "loss"
            assert trades[0].profit_loss == -8

    def test_trades_without_ticket_always_insert(self, temp_db: DataStore):
        """Trades with no ticket are never merged."""
        temp_db.log_trade(make_trade())
        temp_db.log_trade(make_trade())

        assert len(temp_db.get_trades(USER)) == 2


class TestTradeDeletion:
    """
    **Feature: trade-journal, Property 17: Trade Deletion**

    *For any* journal, deleting the last trade removes exactly the newest
    trade.
    """

    def test_delete_last_trade(self, temp_db: DataStore):
        """The newest trade by timestamp is removed and returned."""
        temp_db.log_trade(make_trade(created_at=NOW, pair="GBPUSD"))
        temp_db.log_trade(make_trade(created_at=NOW - timedelta(hours=1)))

        deleted = temp_db.delete_last_trade(USER)

        assert deleted.pair == "GBPUSD"
        assert [t.pair for t in temp_db.get_trades(USER)] == ["EURUSD"]

    def test_delete_from_empty_journal(self, temp_db: DataStore):
        """Nothing to delete returns None."""
        assert temp_db.delete_last_trade(USER) is None

    def test_delete_respects_owner(self, temp_db: DataStore):
        """A user cannot delete another user's trade by ID."""
        trade_id = temp_db.log_trade(make_trade(user_id="someone-else"))

        assert temp_db.delete_trade(USER, trade_id) is False
        assert temp_db.get_trade(trade_id) is not None


class TestCheckinStorage:
    """
    **Feature: trade-journal, Property 18: One Check-in Per Day**

    *For any* sequence of check-ins on one day, only the latest is kept.
    """

    @given(
        st.lists(
            st.tuples(
                st.integers(min_value=1, max_value=10),
                st.integers(min_value=1, max_value=10),
            ),
            min_size=1,
            max_size=5,
        )
    )
    @settings(max_examples=25)
    def test_upsert_keeps_one_row(self, values: list[tuple[int, int]]):
        """
        *For any* repeated check-ins on a day, one row with the last values remains.
        """
        with tempfile.TemporaryDirectory() as tmpdir:
            store = DataStore(Path(tmpdir) / "test.db")
            day = NOW.date()

            for confidence, stress in values:
                store.save_checkin(make_checkin(day, confidence=confidence, stress=stress))

            assert store.get_stats()["daily_checkins"] == 1
            stored = store.get_checkin(USER, day)
            assert (stored.confidence, stored.stress) == values[-1]

    def test_checkins_newest_first(self, temp_db: DataStore):
        """Check-ins list newest first and honour the start date."""
        for offset in (3, 1, 2, 40):
            temp_db.save_checkin(make_checkin(NOW.date() - timedelta(days=offset)))

        checkins = temp_db.get_checkins(USER, since=NOW.date() - timedelta(days=30))

        assert [c.check_in_date for c in checkins] == [
            NOW.date() - timedelta(days=1),
            NOW.date() - timedelta(days=2),
            NOW.date() - timedelta(days=3),
        ]

    def test_similar_checkins(self, temp_db: DataStore):
        """Similar check-ins are within the tolerance on all three measures."""
        reference = make_checkin(NOW.date(), confidence=6, stress=4, sleep_hours=7)
        temp_db.save_checkin(reference)
        temp_db.save_checkin(make_checkin(date(2026, 3, 1), confidence=5, stress=5, sleep_hours=8))
        temp_db.save_checkin(make_checkin(date(2026, 3, 2), confidence=8, stress=4, sleep_hours=7))
        temp_db.save_checkin(make_checkin(date(2026, 3, 3), confidence=6, stress=4, sleep_hours=5.5))

        similar = temp_db.get_similar_checkins(reference, since=date(2026, 2, 1))

        assert [c.check_in_date for c in similar] == [NOW.date(), date(2026, 3, 1)]


class TestAnalysisResults:
    """
    **Feature: trade-journal, Property 19: Append-Only Analysis Results**

    *For any* analysis run, behaviors and patterns are appended, never
    replaced.
    """

    def test_behaviors_append(self, temp_db: DataStore):
        """Each save adds rows; trade sequences survive storage."""
        finding = BehaviorFinding(
            behavior_type="revenge_trading",
            severity="high",
            trade_sequence=[4, 5, 5, 6],
            ai_recommendation="Take a break.",
        )

        temp_db.save_behaviors(USER, [finding], detected_at=NOW)
        temp_db.save_behaviors(USER, [finding], detected_at=NOW + timedelta(hours=1))

        stored = temp_db.get_behaviors(USER)
        assert stored == [finding, finding]
        assert temp_db.get_behaviors("someone-else") == []

    def test_patterns_append(self, temp_db: DataStore):
        """Patterns from separate runs are all kept."""
        pattern = TradePattern(
            pattern_type="session_based",
            description="Strongest in London session",
            win_rate=62.5,
            sample_size=8,
            confidence_score=80,
            recommendations="Focus on London session",
        )

        temp_db.save_patterns(USER, [pattern], created_at=NOW)
        temp_db.save_patterns(USER, [pattern, pattern], created_at=NOW)

        assert temp_db.get_patterns(USER) == [pattern] * 3
        assert temp_db.get_stats()["trade_patterns"] == 3
