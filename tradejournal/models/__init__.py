"""Data models for TradeJournal."""

from tradejournal.models.enums import (
    AssetClass,
    Direction,
    ExecutionType,
    OptionType,
    TlgAction,
    TradeResult,
    TradeStatus,
)
from tradejournal.models.execution import (
    OptionContractDetails,
    ParseError,
    ParseOutcome,
    RawExecution,
)
from tradejournal.models.metrics import DailyPerformance, EquityPoint, PeriodMetrics
from tradejournal.models.trade import (
    AggregatedTrade,
    DerivedFields,
    Execution,
    ExitLeg,
    ImportPreview,
    Trade,
    TradeInput,
    TradeWithDerived,
)

__all__ = [
    "AssetClass",
    "Direction",
    "ExecutionType",
    "OptionType",
    "TlgAction",
    "TradeResult",
    "TradeStatus",
    "OptionContractDetails",
    "ParseError",
    "ParseOutcome",
    "RawExecution",
    "DailyPerformance",
    "EquityPoint",
    "PeriodMetrics",
    "AggregatedTrade",
    "DerivedFields",
    "Execution",
    "ExitLeg",
    "ImportPreview",
    "Trade",
    "TradeInput",
    "TradeWithDerived",
]
