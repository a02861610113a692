"""AI agents for the trade journal.

This module provides the hosted-model summarizer used by pattern
analysis, behind the BaseSummarizer interface.
"""

from tradejournal.agents.base import (
    create_agent,
    run_agent_sync,
    run_agent_async,
    get_model,
)
from tradejournal.agents.summarizer import BaseSummarizer, PatternSummarizerAgent

__all__ = [
    # Base utilities
    "create_agent",
    "run_agent_sync",
    "run_agent_async",
    "get_model",
    # Summarizers
    "BaseSummarizer",
    "PatternSummarizerAgent",
]
