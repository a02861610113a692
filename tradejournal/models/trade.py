"""Trade data model."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

Direction = Literal["buy", "sell"]
Outcome = Literal["open", "win", "loss", "breakeven"]


class Trade(BaseModel):
    """Represents a journaled forex/CFD position."""

    id: Optional[int] = Field(default=None, description="Database ID")
    user_id: str = Field(..., min_length=1, description="Owner identifier")
    pair: str = Field(..., min_length=1, description="Instrument pair, e.g. EURUSD")
    direction: Direction = Field(..., description="Trade direction (buy/sell)")
    entry_price: float = Field(..., ge=0, description="Entry price")
    exit_price: Optional[float] = Field(default=None, ge=0, description="Exit price")
    stop_loss: Optional[float] = Field(default=None, ge=0, description="Stop-loss level")
    take_profit: Optional[float] = Field(default=None, ge=0, description="Take-profit level")
    volume: Optional[float] = Field(default=None, ge=0, description="Position size in lots")
    profit_loss: Optional[float] = Field(default=None, description="Realized P&L")
    outcome: Outcome = Field(default="open", description="Trade outcome")
    emotion_before: Optional[str] = Field(default=None, description="Emotion tag before entry")
    emotion_after: Optional[str] = Field(default=None, description="Emotion tag after exit")
    session: Optional[str] = Field(default=None, description="Session tag")
    notes: Optional[str] = Field(default=None, description="Free-text notes")
    broker_ticket: Optional[str] = Field(default=None, description="Broker ticket number")
    created_at: datetime = Field(..., description="Creation timestamp")

    model_config = {"frozen": True}

    @field_validator("direction", "outcome", mode="before")
    @classmethod
    def _lowercase(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @model_validator(mode="after")
    def _open_trades_have_no_pnl(self) -> "Trade":
        if self.outcome == "open" and self.profit_loss not in (None, 0):
            raise ValueError("an open trade cannot carry realized profit/loss")
        return self
