"""BehaviorFinding data model."""

from typing import Literal

from pydantic import BaseModel, Field

BehaviorType = Literal["revenge_trading", "overtrading", "lot_size_escalation"]
Severity = Literal["low", "medium", "high"]


class BehaviorFinding(BaseModel):
    """One detected behavioral anomaly over a trade window."""

    behavior_type: BehaviorType = Field(..., description="Detected behavior")
    severity: Severity = Field(..., description="Severity level")
    trade_sequence: list[int] = Field(
        default_factory=list, description="Implicated trade IDs in order"
    )
    ai_recommendation: str = Field(..., description="Recommendation for the trader")

    model_config = {"frozen": True}
