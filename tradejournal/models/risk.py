"""RiskAssessment data model."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from tradejournal.models.checkin import DailyCheckIn

RiskLevel = Literal["low", "medium", "high"]


class HistoricalPerformance(BaseModel):
    """Results on past days with a similar mental state."""

    win_rate: int = Field(..., ge=0, le=100, description="Rounded win rate percentage")
    avg_pnl: int = Field(..., description="Rounded average P&L per trade")
    sample_size: int = Field(..., ge=1, description="Number of trades sampled")

    model_config = {"frozen": True}


class RiskAssessment(BaseModel):
    """Advisory pre-trade risk classification. Never persisted."""

    risk_level: RiskLevel = Field(..., description="Categorical risk level")
    has_checkin: bool = Field(..., description="Whether today's check-in exists")
    recent_losses: int = Field(default=0, ge=0, description="Losses in the last 2 hours")
    poor_mental_state: bool = Field(default=False, description="Poor mental state flag")
    today: Optional[DailyCheckIn] = Field(default=None, description="Today's check-in")
    historical: Optional[HistoricalPerformance] = Field(
        default=None, description="Similar-day performance"
    )
    degraded: bool = Field(default=False, description="Fell back after a fetch failure")
    message: str = Field(default="", description="Display message")

    model_config = {"frozen": True}
