"""DailyCheckIn data model."""

from datetime import date as date_type
from typing import Literal, Optional

from pydantic import BaseModel, Field

Mood = Literal["great", "good", "neutral", "anxious", "stressed", "tired"]


class DailyCheckIn(BaseModel):
    """A trader's mental-state snapshot for one calendar day."""

    user_id: str = Field(..., min_length=1, description="Owner identifier")
    check_in_date: date_type = Field(..., description="Calendar day of the check-in")
    mood: Mood = Field(default="neutral", description="Self-reported mood")
    confidence: int = Field(..., ge=1, le=10, description="Confidence (1-10)")
    stress: int = Field(..., ge=1, le=10, description="Stress (1-10)")
    sleep_hours: float = Field(..., ge=0, le=24, description="Hours slept")
    focus_level: int = Field(default=5, ge=1, le=10, description="Focus (1-10)")
    note: Optional[str] = Field(default=None, description="Free-text note")

    model_config = {"frozen": True}

    @property
    def is_poor_mental_state(self) -> bool:
        """Low confidence, short sleep or high stress."""
        return self.confidence < 5 or self.sleep_hours < 6 or self.stress >= 7
