"""Raw execution models produced by the log parser."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from tradejournal.models.enums import AssetClass, OptionType, TlgAction


class OptionContractDetails(BaseModel):
    """Contract details decoded from a packed OCC option symbol."""

    underlying: str = Field(..., min_length=1, description="Underlying symbol")
    expiration_date: date = Field(..., description="Contract expiration date")
    option_type: OptionType = Field(..., description="Call or put")
    strike_price: float = Field(..., description="Strike price in dollars")

    model_config = {"frozen": True}


class RawExecution(BaseModel):
    """Represents one fill read from a broker trade log."""

    broker_execution_id: str = Field(..., description="Broker execution ID")
    symbol: str = Field(..., description="Raw instrument symbol (packed for options)")
    name: str = Field(..., description="Instrument description")
    exchange: str = Field(..., description="Execution venue")
    action: TlgAction = Field(..., description="Opening/closing action")
    execution_date: date = Field(..., description="Execution date")
    execution_time: str = Field(..., description="Broker-local execution time")
    currency: str = Field(..., description="Trade currency")
    quantity: float = Field(..., description="Signed quantity (negative for sells)")
    multiplier: float = Field(..., description="Contract multiplier")
    price: float = Field(..., description="Execution price")
    total: float = Field(..., description="Total proceeds")
    fees: float = Field(..., description="Fees (negative magnitude in the log)")
    fx_rate: Optional[float] = Field(default=None, description="FX rate to base currency")
    asset_class: AssetClass = Field(..., description="Stock or option")
    option_details: Optional[OptionContractDetails] = Field(
        default=None, description="Decoded option contract"
    )

    model_config = {"frozen": True}

    @property
    def abs_quantity(self) -> float:
        return abs(self.quantity)

    @property
    def abs_fees(self) -> float:
        return abs(self.fees)

    @property
    def underlying_symbol(self) -> str:
        """Underlying for options, the symbol itself for stocks."""
        if self.option_details is not None:
            return self.option_details.underlying
        return self.symbol


class ParseError(BaseModel):
    """A log line that could not be parsed."""

    line_number: int = Field(..., ge=1, description="1-based line number")
    line_content: str = Field(..., description="Raw line text")
    error: str = Field(..., description="Reason the line was rejected")

    model_config = {"frozen": True}


class ParseOutcome(BaseModel):
    """Executions and per-line errors from one parsed log, in line order."""

    executions: list[RawExecution] = Field(default_factory=list)
    errors: list[ParseError] = Field(default_factory=list)

    model_config = {"frozen": True}
