"""Trade calculations: position aggregation, P&L and portfolio analytics."""

from tradejournal.calculations.aggregations import (
    calculate_daily_performance,
    calculate_equity_curve,
    calculate_max_drawdown,
    calculate_period_metrics,
    daily_performance,
    equity_curve,
    filter_trades,
    period_metrics,
)
from tradejournal.calculations.pnl import (
    calculate_derived_fields,
    derive,
    with_derived_fields,
)
from tradejournal.calculations.positions import (
    CLOSED_EPSILON,
    ExitSource,
    TradeValidationError,
    aggregate,
    build_trade,
    parse_and_aggregate,
    preview_import,
    summarize_exits,
    to_trade,
    validate_trade_input,
)

__all__ = [
    "calculate_daily_performance",
    "calculate_equity_curve",
    "calculate_max_drawdown",
    "calculate_period_metrics",
    "daily_performance",
    "equity_curve",
    "filter_trades",
    "period_metrics",
    "calculate_derived_fields",
    "derive",
    "with_derived_fields",
    "CLOSED_EPSILON",
    "ExitSource",
    "TradeValidationError",
    "aggregate",
    "build_trade",
    "parse_and_aggregate",
    "preview_import",
    "summarize_exits",
    "to_trade",
    "validate_trade_input",
]
