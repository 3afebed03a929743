"""Portfolio analytics report models."""

from datetime import date as date_type
from typing import Optional

from pydantic import BaseModel, Field


class DailyPerformance(BaseModel):
    """Realized performance for one calendar day."""

    date: date_type = Field(..., description="Trade date")
    realized_net_pnl: float = Field(..., description="Sum of net P&L closed that day")
    trade_count: int = Field(..., ge=0, description="Number of trades")
    win_count: int = Field(..., ge=0, description="Winning trades")
    loss_count: int = Field(..., ge=0, description="Losing trades")

    model_config = {"frozen": True}


class PeriodMetrics(BaseModel):
    """Aggregate statistics over a set of closed trades.

    The defaults describe an empty period.
    """

    total_net_pnl: float = 0.0
    trade_count: int = 0
    win_count: int = 0
    loss_count: int = 0
    breakeven_count: int = 0
    win_rate: Optional[float] = Field(default=None, description="Wins over decisive trades")
    avg_win: Optional[float] = None
    avg_loss: Optional[float] = Field(default=None, description="Negative when present")
    profit_factor: Optional[float] = Field(default=None, description="May be +inf")
    expectancy: Optional[float] = None
    max_drawdown: float = Field(default=0.0, ge=0)
    max_win_streak: int = 0
    max_loss_streak: int = 0

    model_config = {"frozen": True}


class EquityPoint(BaseModel):
    """One day on the cumulative equity curve."""

    date: date_type = Field(..., description="Trade date")
    cumulative_pnl: float = Field(..., description="Cumulative realized P&L")
    drawdown: float = Field(..., ge=0, description="Running peak minus cumulative P&L")

    model_config = {"frozen": True}
