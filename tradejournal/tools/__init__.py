"""Journal and analysis tools for the trade journal.

Each tool returns a plain dictionary with an ``error`` key so callers
(CLI commands, agents, web handlers) never have to catch exceptions.
"""

from tradejournal.tools.journal import (
    log_trade,
    get_trades,
    delete_last_trade,
    save_checkin,
)
from tradejournal.tools.analysis import (
    analyze_behavior,
    analyze_patterns,
    pre_trade_risk,
    checkin_correlations,
)

__all__ = [
    # Journal tools
    "log_trade",
    "get_trades",
    "delete_last_trade",
    "save_checkin",
    # Analysis tools
    "analyze_behavior",
    "analyze_patterns",
    "pre_trade_risk",
    "checkin_correlations",
]
