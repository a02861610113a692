"""Pattern summarizer backed by a hosted language model.

The analysis code only depends on BaseSummarizer, so tests and offline
runs can swap in any object with a ``summarize(prompt) -> str`` method.
"""

from abc import ABC, abstractmethod
from typing import Optional

from agents import Agent

from tradejournal.agents.base import (
    DEFAULT_TIMEOUT_SECONDS,
    create_agent,
    run_agent_sync,
)
from tradejournal.errors import SummarizerUnavailableError


PATTERN_ANALYST_INSTRUCTIONS = """You are a forex pattern analyst.
You receive win-rate tables grouped by currency pair, weekday and trading
session, plus a sample of recent trades.

Identify the patterns that matter most for this trader's results.
Return a valid JSON array only, with no prose before or after it.
"""


class BaseSummarizer(ABC):
    """Turns an analysis prompt into generated text."""

    @abstractmethod
    def summarize(self, prompt: str) -> str:
        """Generate text for the prompt.

        Raises:
            SummarizerUnavailableError: The summarizer cannot answer now.
        """


class PatternSummarizerAgent(BaseSummarizer):
    """Summarizer that asks an OpenAI agent for pattern JSON."""

    def __init__(
        self,
        model: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        api_key: Optional[str] = None,
    ):
        """Initialize the summarizer.

        Args:
            model: Optional model override.
            timeout: Seconds to wait for a response.
            api_key: Optional API key; without one the environment's
                OPENAI_API_KEY is used.
        """
        self.model = model
        self.timeout = timeout
        self.api_key = api_key
        self._agent = self._create_agent()

    def _create_agent(self) -> Agent:
        """Create the underlying agent."""
        if self.api_key:
            from agents import set_default_openai_key

            set_default_openai_key(self.api_key)
        return create_agent(
            name="Pattern Analyst",
            instructions=PATTERN_ANALYST_INSTRUCTIONS,
            model=self.model,
        )

    def summarize(self, prompt: str) -> str:
        text = run_agent_sync(self._agent, prompt, timeout=self.timeout)
        if not text.strip():
            raise SummarizerUnavailableError("Pattern Analyst returned an empty response")
        return text
