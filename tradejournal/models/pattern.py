"""TradePattern data model."""

from typing import Literal

from pydantic import BaseModel, Field

PatternType = Literal["pair_based", "time_based", "session_based"]


class TradePattern(BaseModel):
    """A statistical pattern surfaced by aggregation and summarization.

    Numbers are kept as reported; summarizer claims are not range-checked.
    """

    pattern_type: PatternType = Field(..., description="Pattern family")
    description: str = Field(..., min_length=1, description="Pattern description")
    win_rate: float = Field(..., description="Win rate percentage")
    sample_size: int = Field(..., description="Trades behind the pattern")
    confidence_score: float = Field(..., description="Confidence percentage")
    recommendations: str = Field(default="", description="Recommendation text")

    model_config = {"frozen": True}
