"""Analysis tools: behavior detection, pattern analysis and risk checks.

Each tool loads the user's data, runs the pure analysis functions,
persists results where the analysis is an audit record, and returns a
JSON-ready dictionary. Failures come back in the ``error`` key rather
than as exceptions.
"""

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from tradejournal.analysis.behavior import detect_behaviors
from tradejournal.analysis.correlation import correlate_checkins
from tradejournal.analysis.patterns import (
    MAX_STORED_PATTERNS,
    MIN_PATTERN_TRADES,
    PATTERN_WINDOW_DAYS,
    aggregate_by_day,
    aggregate_by_pair,
    aggregate_by_session,
    build_pattern_prompt,
    generate_basic_patterns,
    parse_summarized_patterns,
)
from tradejournal.analysis.risk import RISK_MESSAGES, assess_pre_trade_risk
from tradejournal.config import DEFAULT_DB_PATH, local_now
from tradejournal.db.store import DataStore
from tradejournal.errors import (
    DataStoreError,
    InsufficientDataError,
    MalformedSummaryError,
    SummarizerUnavailableError,
)
from tradejournal.models import TradePattern

if TYPE_CHECKING:
    from tradejournal.agents.summarizer import BaseSummarizer

logger = logging.getLogger(__name__)

BEHAVIOR_WINDOW = timedelta(hours=24)
BEHAVIOR_MAX_TRADES = 20
CORRELATION_WINDOW_DAYS = 30

TRY_AGAIN_LATER = "Your trading data is unavailable right now. Please try again later."


def _get_data_store(db_path: Optional[Path] = None) -> DataStore:
    """Get a DataStore instance."""
    return DataStore(db_path or DEFAULT_DB_PATH)


def analyze_behavior(
    user_id: str,
    now: Optional[datetime] = None,
    db_path: Optional[Path] = None,
) -> dict:
    """Detect revenge trading, overtrading and lot-size escalation.

    Looks at the user's 20 most recent trades from the last 24 hours and
    appends any findings to the behavior audit table.

    Args:
        user_id: Owner identifier.
        now: Current time override.
        db_path: Optional path to database file.

    Returns:
        Dictionary containing:
        - behaviors: List of finding dictionaries
        - trades_analyzed: Number of trades inspected
        - message: Note when there was nothing to analyze
        - error: Error message if analysis failed (None if successful)
    """
    now = now or local_now()
    try:
        store = _get_data_store(db_path)
        trades = store.get_trades(
            user_id,
            since=now - BEHAVIOR_WINDOW,
            newest_first=True,
            limit=BEHAVIOR_MAX_TRADES,
        )
    except DataStoreError as e:
        logger.warning("Behavior analysis could not load trades for %s: %s", user_id, e)
        return {"behaviors": [], "trades_analyzed": 0, "message": None, "error": TRY_AGAIN_LATER}

    if not trades:
        return {
            "behaviors": [],
            "trades_analyzed": 0,
            "message": "No recent trades to analyze",
            "error": None,
        }

    findings = detect_behaviors(trades, now)

    if findings:
        try:
            store.save_behaviors(user_id, findings, detected_at=now)
            logger.info("Stored %d behavior findings for %s", len(findings), user_id)
        except DataStoreError as e:
            # Findings are advisory; report them even if the audit write fails
            logger.warning("Could not store behavior findings for %s: %s", user_id, e)

    return {
        "behaviors": [f.model_dump(mode="json") for f in findings],
        "trades_analyzed": len(trades),
        "message": None,
        "error": None,
    }


def _summarize_patterns(
    summarizer: Optional["BaseSummarizer"], prompt: str
) -> Optional[list[TradePattern]]:
    """Ask the summarizer for patterns; None means use the offline fallback."""
    if summarizer is None:
        return None
    try:
        patterns = parse_summarized_patterns(summarizer.summarize(prompt))
    except SummarizerUnavailableError as e:
        logger.warning("Pattern summarizer unavailable: %s", e)
        return None
    except MalformedSummaryError as e:
        logger.warning("Pattern summarizer returned unusable output: %s", e)
        return None
    return patterns or None


def analyze_patterns(
    user_id: str,
    summarizer: Optional["BaseSummarizer"] = None,
    now: Optional[datetime] = None,
    db_path: Optional[Path] = None,
) -> dict:
    """Find pair, weekday and session patterns over the last 90 days.

    Aggregates win rates, asks the summarizer to describe the strongest
    patterns, and appends up to five patterns to the journal. Without a
    summarizer, or when it is unavailable or returns unusable output,
    patterns are derived locally from the best bucket of each table.

    Args:
        user_id: Owner identifier.
        summarizer: Optional summarizer. None runs offline.
        now: Current time override.
        db_path: Optional path to database file.

    Returns:
        Dictionary containing:
        - patterns: List of pattern dictionaries
        - trades_analyzed: Number of trades in the window
        - source: "summarizer" or "offline"
        - aggregates: The pair, day and session tables
        - trades_count / required: Present when there was too little data
        - error: Error message if analysis failed (None if successful)
    """
    now = now or local_now()
    try:
        store = _get_data_store(db_path)
        trades = store.get_trades(user_id, since=now - timedelta(days=PATTERN_WINDOW_DAYS))
        if len(trades) < MIN_PATTERN_TRADES:
            raise InsufficientDataError(len(trades), MIN_PATTERN_TRADES)
    except InsufficientDataError as e:
        return {
            "patterns": [],
            "trades_analyzed": 0,
            "trades_count": e.actual,
            "required": e.required,
            "error": str(e),
        }
    except DataStoreError as e:
        logger.warning("Pattern analysis could not load trades for %s: %s", user_id, e)
        return {"patterns": [], "trades_analyzed": 0, "error": TRY_AGAIN_LATER}

    pairs = aggregate_by_pair(trades)
    days = aggregate_by_day(trades)
    sessions = aggregate_by_session(trades)

    patterns = _summarize_patterns(summarizer, build_pattern_prompt(trades, pairs, days, sessions))
    source = "summarizer"
    if patterns is None:
        patterns = generate_basic_patterns(pairs, days, sessions)
        source = "offline"
    patterns = patterns[:MAX_STORED_PATTERNS]

    try:
        store.save_patterns(user_id, patterns, created_at=now)
        logger.info("Stored %d %s patterns for %s", len(patterns), source, user_id)
    except DataStoreError as e:
        logger.warning("Could not store patterns for %s: %s", user_id, e)

    return {
        "patterns": [p.model_dump(mode="json") for p in patterns],
        "trades_analyzed": len(trades),
        "source": source,
        "aggregates": {
            "pairs": [p._asdict() for p in pairs],
            "days": [d._asdict() for d in days],
            "sessions": [s._asdict() for s in sessions],
        },
        "error": None,
    }


def pre_trade_risk(
    user_id: str,
    now: Optional[datetime] = None,
    db_path: Optional[Path] = None,
) -> dict:
    """Assess pre-trade risk. Nothing is stored.

    Returns:
        The RiskAssessment fields plus ``error`` (always None; read
        failures are reported through ``degraded``).
    """
    now = now or local_now()
    try:
        store = _get_data_store(db_path)
    except DataStoreError as e:
        logger.warning("Pre-trade risk could not open the journal: %s", e)
        return {
            "risk_level": "medium",
            "has_checkin": False,
            "recent_losses": 0,
            "poor_mental_state": False,
            "today": None,
            "historical": None,
            "degraded": True,
            "message": RISK_MESSAGES["degraded"],
            "error": None,
        }

    assessment = assess_pre_trade_risk(store, user_id, now)
    return {**assessment.model_dump(mode="json"), "error": None}


def checkin_correlations(
    user_id: str,
    now: Optional[datetime] = None,
    db_path: Optional[Path] = None,
) -> dict:
    """Correlate the last 30 days of check-ins with trading results.

    Returns:
        Dictionary containing:
        - correlations: Band averages, or None without matched days
        - checkins: Number of check-ins considered
        - trades: Number of trades considered
        - error: Error message if the query failed (None if successful)
    """
    now = now or local_now()
    since = now - timedelta(days=CORRELATION_WINDOW_DAYS)
    try:
        store = _get_data_store(db_path)
        checkins = store.get_checkins(user_id, since=since.date())
        trades = store.get_trades(user_id, since=since)
    except DataStoreError as e:
        logger.warning("Correlation data unavailable for %s: %s", user_id, e)
        return {"correlations": None, "checkins": 0, "trades": 0, "error": TRY_AGAIN_LATER}

    return {
        "correlations": correlate_checkins(checkins, trades),
        "checkins": len(checkins),
        "trades": len(trades),
        "error": None,
    }
