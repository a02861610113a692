"""OpenAI Agents SDK helpers for the journal's hosted summarizer.

Wraps agent construction and execution, and turns provider trouble
(API errors, timeouts, network failures) into SummarizerUnavailableError
so callers can fall back to offline analysis.
"""

import asyncio
import logging
import os
from typing import Optional

# Tracing exports fail noisily when offline; the summarizer does not need them
os.environ.setdefault("OPENAI_AGENTS_DISABLE_TRACING", "1")

import openai
from agents import Agent, Runner
from agents.exceptions import AgentsException

from tradejournal.errors import SummarizerUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-5.2"
DEFAULT_TIMEOUT_SECONDS = 30.0


def get_model() -> str:
    """Model name from OPENAI_MODEL, or the journal default."""
    return os.environ.get("OPENAI_MODEL", DEFAULT_MODEL)


def create_agent(name: str, instructions: str, model: Optional[str] = None) -> Agent:
    """Build a tool-less agent that only generates text.

    Args:
        name: Agent name, used in logs and error messages.
        instructions: System prompt.
        model: Model override; falls back to ``get_model()``.
    """
    return Agent(
        name=name,
        instructions=instructions,
        tools=[],
        model=model or get_model(),
    )


def _describe_failure(error: Exception) -> Optional[str]:
    """Return a reason if the error came from the provider, else None."""
    if isinstance(error, asyncio.TimeoutError):
        return "timed out"
    if isinstance(error, openai.RateLimitError):
        code = getattr(error, "code", None)
        return "quota exhausted" if code == "insufficient_quota" else "rate limited"
    if isinstance(error, (openai.APIConnectionError, openai.APITimeoutError)):
        return "unreachable"
    if isinstance(error, openai.APIStatusError):
        if error.status_code == 402:
            return "quota exhausted"
        if error.status_code == 429:
            return "rate limited"
        return f"rejected the request (HTTP {error.status_code})"
    if isinstance(error, openai.APIError):
        return "request failed"
    if isinstance(error, AgentsException):
        return "agent run failed"
    return None


async def run_agent_async(agent: Agent, prompt: str, timeout: Optional[float] = None) -> str:
    """Send ``prompt`` to ``agent`` and return its final output as text.

    Raises:
        SummarizerUnavailableError: The provider failed or gave no
            answer within ``timeout`` seconds.
    """
    logger.debug("Running %s on %s (timeout=%s)", agent.name, agent.model, timeout)
    try:
        result = await asyncio.wait_for(Runner.run(agent, prompt), timeout=timeout)
    except Exception as e:
        reason = _describe_failure(e)
        if reason is None:
            raise
        raise SummarizerUnavailableError(f"{agent.name} {reason}: {e}") from e
    return str(result.final_output)


def run_agent_sync(agent: Agent, prompt: str, timeout: Optional[float] = None) -> str:
    """Blocking wrapper around ``run_agent_async``."""
    return asyncio.run(run_agent_async(agent, prompt, timeout=timeout))
