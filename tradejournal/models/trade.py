"""Trade data models."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from tradejournal.models.enums import (
    AssetClass,
    Direction,
    ExecutionType,
    OptionType,
    TradeResult,
    TradeStatus,
)
from tradejournal.models.execution import ParseError


class Execution(BaseModel):
    """An entry or exit leg of an aggregated trade.

    Quantity and fees are always positive magnitudes here; the sign
    convention of the broker log is dropped at the aggregation boundary.
    """

    execution_type: ExecutionType = Field(..., description="Entry or exit")
    execution_date: date = Field(..., description="Execution date")
    execution_time: Optional[str] = Field(default=None, description="Execution time")
    quantity: float = Field(..., ge=0, description="Absolute quantity")
    price: float = Field(..., description="Execution price")
    fees: float = Field(..., ge=0, description="Absolute fees")
    exchange: Optional[str] = Field(default=None, description="Execution venue")
    broker_execution_id: str = Field(..., description="Broker execution ID")

    model_config = {"frozen": True}


class AggregatedTrade(BaseModel):
    """One round trip (or still-open position) rebuilt from executions."""

    key: str = Field(..., description="Grouping key: symbol and first entry date")
    symbol: str = Field(..., description="Raw symbol (packed contract for options)")
    underlying_symbol: str = Field(..., description="Underlying symbol")
    asset_class: AssetClass = Field(..., description="Stock or option")
    option_type: Optional[OptionType] = Field(default=None)
    strike_price: Optional[float] = Field(default=None)
    expiration_date: Optional[date] = Field(default=None)
    direction: Direction = Field(..., description="Fixed by the first opening execution")
    trade_date: date = Field(..., description="Date of the first entry")
    entries: list[Execution] = Field(default_factory=list)
    exits: list[Execution] = Field(default_factory=list)
    status: TradeStatus = Field(..., description="Open or closed")
    total_quantity: float = Field(..., ge=0, description="Total entered quantity")
    avg_entry_price: float = Field(..., description="Weighted average entry price")
    avg_exit_price: Optional[float] = Field(default=None, description="Absent while open")
    total_fees: float = Field(..., ge=0, description="Entry plus exit fees")
    net_pnl: Optional[float] = Field(default=None, description="Absent while open")

    model_config = {"frozen": True}


class ImportPreview(BaseModel):
    """What an import of a trade log would bring in."""

    trades_to_import: list[AggregatedTrade] = Field(default_factory=list)
    open_positions: list[AggregatedTrade] = Field(default_factory=list)
    duplicate_count: int = Field(default=0, ge=0)
    parse_errors: list[ParseError] = Field(default_factory=list)

    model_config = {"frozen": True}


class Trade(BaseModel):
    """Represents a journaled trade with resolved prices and fees."""

    id: Optional[str] = Field(default=None, description="Trade ID")
    symbol: str = Field(..., min_length=1, description="Trading symbol")
    asset_class: AssetClass = Field(default=AssetClass.STOCK, description="Stock or option")
    trade_date: date = Field(..., description="Trade date")
    direction: Direction = Field(..., description="Long or short")
    quantity: Optional[float] = Field(default=None, description="Position size")
    entry_price: float = Field(..., description="Entry price")
    exit_price: Optional[float] = Field(default=None, description="Exit price")
    stop_loss_price: Optional[float] = Field(default=None, description="Planned stop")
    entry_time: Optional[str] = Field(default=None)
    exit_time: Optional[str] = Field(default=None)
    fees: float = Field(default=0.0, description="Total fees")
    status: TradeStatus = Field(default=TradeStatus.OPEN)
    strategy: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)

    model_config = {"frozen": True}


class DerivedFields(BaseModel):
    """Financial metrics computed from a trade's raw fields."""

    gross_pnl: Optional[float] = None
    net_pnl: Optional[float] = None
    pnl_per_share: Optional[float] = None
    risk_per_share: Optional[float] = None
    r_multiple: Optional[float] = None
    result: Optional[TradeResult] = None

    model_config = {"frozen": True}


class TradeWithDerived(BaseModel):
    """A trade together with its derived fields."""

    trade: Trade
    derived: DerivedFields

    model_config = {"frozen": True}

    @property
    def trade_date(self) -> date:
        return self.trade.trade_date

    @property
    def net_pnl(self) -> Optional[float]:
        return self.derived.net_pnl

    @property
    def result(self) -> Optional[TradeResult]:
        return self.derived.result


class ExitLeg(BaseModel):
    """A manually entered partial exit."""

    exit_date: date = Field(..., description="Exit date")
    exit_time: Optional[str] = Field(default=None, description="Exit time")
    quantity: float = Field(..., description="Exited quantity")
    price: float = Field(..., description="Exit price")
    fees: Optional[float] = Field(default=None, description="Exit fees")

    model_config = {"frozen": True}


class TradeInput(BaseModel):
    """Payload for manually entering a trade.

    Values are checked by ``validate_trade_input`` rather than by field
    constraints so that every rejection carries a field-specific message.
    """

    symbol: str = Field(..., min_length=1, description="Trading symbol")
    asset_class: Optional[AssetClass] = Field(default=None)
    trade_date: date = Field(..., description="Trade date")
    direction: Direction = Field(..., description="Long or short")
    quantity: Optional[float] = Field(default=None)
    entry_price: float = Field(..., description="Entry price")
    exit_price: Optional[float] = Field(default=None)
    stop_loss_price: Optional[float] = Field(default=None)
    entry_time: Optional[str] = Field(default=None)
    exit_time: Optional[str] = Field(default=None)
    fees: Optional[float] = Field(default=None)
    strategy: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)
    status: Optional[TradeStatus] = Field(default=None)
    exits: Optional[list[ExitLeg]] = Field(default=None)

    model_config = {"frozen": True}
