"""Position tracking: grouping executions into trades.

Two sources of exits share one weighted-average and closed-detection
routine, ``summarize_exits``:

* imported executions from a broker log, where bad lines were already
  dropped by the parser and aggregation itself never fails;
* manually entered partial exits, which are validated strictly and
  abort the whole trade on the first bad value.
"""

import logging
from enum import Enum
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, Field

from tradejournal.calculations.pnl import (
    calculate_gross_pnl,
    calculate_net_pnl,
    with_derived_fields,
)
from tradejournal.config import DEFAULT_ASSET_CLASS, DEFAULT_CURRENCY, DEFAULT_TRADE_STATUS
from tradejournal.models import (
    AggregatedTrade,
    AssetClass,
    Direction,
    Execution,
    ExecutionType,
    ExitLeg,
    ImportPreview,
    ParseError,
    RawExecution,
    TlgAction,
    Trade,
    TradeInput,
    TradeStatus,
    TradeWithDerived,
)
from tradejournal.parsers import parse

logger = logging.getLogger(__name__)

# Tolerance for "fully exited" after repeated fractional-share arithmetic.
CLOSED_EPSILON = 1e-4


class TradeValidationError(ValueError):
    """A manually entered trade failed validation."""


class ExitSource(str, Enum):
    IMPORTED = "imported"
    MANUAL = "manual"


class Fill(BaseModel):
    """Quantity, price and fees of one fill, whatever its source."""

    quantity: float
    price: float
    fees: float = 0.0
    time: Optional[str] = None

    model_config = {"frozen": True}


class ExitSummary(BaseModel):
    """Aggregated view of a trade's exits."""

    exited_quantity: float = Field(..., description="Sum of exit quantities")
    avg_exit_price: Optional[float] = Field(default=None, description="Weighted average")
    total_fees: float = Field(default=0.0, description="Sum of exit fees")
    latest_exit_time: Optional[str] = Field(default=None)
    status: Optional[TradeStatus] = Field(
        default=None, description="None when the caller should keep its status"
    )

    model_config = {"frozen": True}


def weighted_average_price(fills: Sequence[Fill]) -> Optional[float]:
    """Quantity-weighted average price, ``None`` without any quantity."""
    total_quantity = sum(f.quantity for f in fills)
    if total_quantity <= 0:
        return None
    return sum(f.quantity * f.price for f in fills) / total_quantity


def summarize_exits(
    entry_quantity: Optional[float],
    fills: Iterable[Fill],
    source: ExitSource = ExitSource.IMPORTED,
) -> ExitSummary:
    """Aggregate exits against an entered quantity.

    Args:
        entry_quantity: Total entered quantity, ``None`` if unknown or
            if there were no entries.
        fills: Exits in chronological order.
        source: Imported exits always resolve to open or closed. Manual
            exits may not exceed the entry and leave the status unset
            when there are none.

    Raises:
        TradeValidationError: Manual exits exceed the entry quantity.
    """
    fills = list(fills)
    exited_quantity = sum(f.quantity for f in fills)

    if (
        source is ExitSource.MANUAL
        and entry_quantity is not None
        and entry_quantity > 0
        # Legs summing past the entry by float rounding alone are accepted.
        and exited_quantity - entry_quantity > CLOSED_EPSILON
    ):
        raise TradeValidationError(
            f"Total exit quantity ({exited_quantity:g}) cannot exceed "
            f"entry quantity ({entry_quantity:g})"
        )

    times = [f.time for f in fills if f.time]

    return ExitSummary(
        exited_quantity=exited_quantity,
        avg_exit_price=weighted_average_price(fills),
        total_fees=sum(f.fees for f in fills),
        latest_exit_time=max(times) if times else None,
        status=_resolve_status(entry_quantity, exited_quantity, len(fills), source),
    )


def _resolve_status(
    entry_quantity: Optional[float],
    exited_quantity: float,
    fill_count: int,
    source: ExitSource,
) -> Optional[TradeStatus]:
    if source is ExitSource.IMPORTED:
        if entry_quantity is None or fill_count == 0:
            return TradeStatus.OPEN
        if entry_quantity - exited_quantity <= CLOSED_EPSILON:
            return TradeStatus.CLOSED
        return TradeStatus.OPEN

    if fill_count == 0 or entry_quantity is None or entry_quantity <= 0:
        return None
    if abs(exited_quantity - entry_quantity) < CLOSED_EPSILON:
        return TradeStatus.CLOSED
    if exited_quantity < entry_quantity:
        return TradeStatus.OPEN
    return None


class PositionTracker:
    """Collects the executions of one symbol into a single trade."""

    def __init__(self, first: RawExecution):
        """Initialize the tracker from the first execution seen for a symbol.

        Args:
            first: Execution that created the bucket.
        """
        self.symbol = first.symbol
        self.underlying_symbol = first.underlying_symbol
        self.asset_class = first.asset_class
        self.option_details = first.option_details
        self.direction: Optional[Direction] = None
        self.entries: list[RawExecution] = []
        self.exits: list[RawExecution] = []
        self.open_quantity = 0.0

    def add_execution(self, execution: RawExecution) -> None:
        if execution.action.is_opening:
            # Direction is fixed by the first opening fill
            if self.direction is None:
                self.direction = (
                    Direction.LONG if execution.action is TlgAction.BUY_TO_OPEN else Direction.SHORT
                )
            self.entries.append(execution)
            self.open_quantity += execution.abs_quantity
        else:
            self.exits.append(execution)
            self.open_quantity -= execution.abs_quantity

    def to_aggregated_trade(self) -> AggregatedTrade:
        """Build the aggregated trade with its derived values."""
        entries = [_to_execution(e, ExecutionType.ENTRY) for e in self.entries]
        exits = [_to_execution(e, ExecutionType.EXIT) for e in self.exits]

        total_quantity = sum(e.quantity for e in entries)
        entry_fills = [Fill(quantity=e.quantity, price=e.price) for e in entries]
        avg_entry_price = weighted_average_price(entry_fills) or 0.0

        summary = summarize_exits(
            total_quantity if entries else None,
            (Fill(quantity=e.quantity, price=e.price, fees=e.fees, time=e.execution_time) for e in exits),
        )
        total_fees = sum(e.fees for e in entries) + summary.total_fees
        direction = self.direction or Direction.LONG

        avg_exit_price = None
        net_pnl = None
        status = summary.status
        if status is TradeStatus.CLOSED and summary.avg_exit_price is not None:
            avg_exit_price = summary.avg_exit_price
            gross_pnl = calculate_gross_pnl(
                direction,
                avg_entry_price,
                avg_exit_price,
                total_quantity,
                self.asset_class.multiplier,
            )
            net_pnl = calculate_net_pnl(gross_pnl, total_fees)
        else:
            status = TradeStatus.OPEN

        # Entries are always present from valid input; fall back to the first exit
        first = entries[0] if entries else exits[0]
        trade_date = first.execution_date

        details = self.option_details
        return AggregatedTrade(
            key=f"{self.symbol}_{trade_date.isoformat()}",
            symbol=self.symbol,
            underlying_symbol=self.underlying_symbol,
            asset_class=self.asset_class,
            option_type=details.option_type if details else None,
            strike_price=details.strike_price if details else None,
            expiration_date=details.expiration_date if details else None,
            direction=direction,
            trade_date=trade_date,
            entries=entries,
            exits=exits,
            status=status,
            total_quantity=total_quantity,
            avg_entry_price=avg_entry_price,
            avg_exit_price=avg_exit_price,
            total_fees=total_fees,
            net_pnl=net_pnl,
        )


def _to_execution(execution: RawExecution, execution_type: ExecutionType) -> Execution:
    return Execution(
        execution_type=execution_type,
        execution_date=execution.execution_date,
        execution_time=execution.execution_time,
        quantity=execution.abs_quantity,
        price=execution.price,
        fees=execution.abs_fees,
        exchange=execution.exchange,
        broker_execution_id=execution.broker_execution_id,
    )


def aggregate(
    executions: Iterable[RawExecution],
) -> tuple[list[AggregatedTrade], list[AggregatedTrade]]:
    """Group executions into trades.

    Executions are sorted by date and time, then bucketed by raw symbol;
    for options that is the full contract symbol, so different strikes
    and expiries never merge.

    Returns:
        Closed trades and open positions, each ordered by trade date.
    """
    ordered = sorted(executions, key=lambda e: (e.execution_date, e.execution_time))

    trackers: dict[str, PositionTracker] = {}
    for execution in ordered:
        tracker = trackers.get(execution.symbol)
        if tracker is None:
            tracker = trackers[execution.symbol] = PositionTracker(execution)
        tracker.add_execution(execution)

    closed_trades: list[AggregatedTrade] = []
    open_positions: list[AggregatedTrade] = []
    for tracker in trackers.values():
        trade = tracker.to_aggregated_trade()
        if trade.status is TradeStatus.CLOSED:
            closed_trades.append(trade)
        else:
            open_positions.append(trade)

    closed_trades.sort(key=lambda t: t.trade_date)
    open_positions.sort(key=lambda t: t.trade_date)

    logger.debug(
        "Aggregated %d executions into %d closed trades and %d open positions",
        len(ordered),
        len(closed_trades),
        len(open_positions),
    )
    return closed_trades, open_positions


def parse_and_aggregate(
    content: str,
    default_currency: str = DEFAULT_CURRENCY,
) -> tuple[list[AggregatedTrade], list[AggregatedTrade], list[ParseError]]:
    """Parse a trade log and aggregate its executions."""
    outcome = parse(content, default_currency)
    closed_trades, open_positions = aggregate(outcome.executions)
    return closed_trades, open_positions, outcome.errors


def preview_import(
    content: str,
    known_execution_ids: Iterable[str] = (),
    default_currency: str = DEFAULT_CURRENCY,
) -> ImportPreview:
    """Preview an import, skipping trades that were already imported.

    A closed trade is a duplicate when any of its entries carries a broker
    execution ID in ``known_execution_ids``.
    """
    known = set(known_execution_ids)
    closed_trades, open_positions, errors = parse_and_aggregate(content, default_currency)

    trades_to_import = []
    duplicate_count = 0
    for trade in closed_trades:
        if any(e.broker_execution_id in known for e in trade.entries):
            duplicate_count += 1
        else:
            trades_to_import.append(trade)

    return ImportPreview(
        trades_to_import=trades_to_import,
        open_positions=open_positions,
        duplicate_count=duplicate_count,
        parse_errors=errors,
    )


def to_trade(aggregated: AggregatedTrade, trade_id: Optional[str] = None) -> Trade:
    """Convert an aggregated trade into a journal trade record."""
    return Trade(
        id=trade_id,
        symbol=aggregated.symbol,
        asset_class=aggregated.asset_class,
        trade_date=aggregated.trade_date,
        direction=aggregated.direction,
        quantity=aggregated.total_quantity,
        entry_price=aggregated.avg_entry_price,
        exit_price=aggregated.avg_exit_price,
        entry_time=aggregated.entries[0].execution_time if aggregated.entries else None,
        exit_time=aggregated.exits[-1].execution_time if aggregated.exits else None,
        fees=aggregated.total_fees,
        status=aggregated.status,
    )


def validate_trade_input(trade_input: TradeInput) -> None:
    """Check a manually entered trade.

    Raises:
        TradeValidationError: On the first invalid value.
    """
    if trade_input.entry_price <= 0:
        raise TradeValidationError("Entry price must be greater than 0")
    if trade_input.quantity is not None and trade_input.quantity <= 0:
        raise TradeValidationError("Quantity must be greater than 0")
    if trade_input.exit_price is not None and trade_input.exit_price <= 0:
        raise TradeValidationError("Exit price must be greater than 0")
    if trade_input.stop_loss_price is not None and trade_input.stop_loss_price <= 0:
        raise TradeValidationError("Stop loss price must be greater than 0")
    if trade_input.fees is not None and trade_input.fees < 0:
        raise TradeValidationError("Fees cannot be negative")

    for ordinal, leg in enumerate(trade_input.exits or [], start=1):
        _validate_exit_leg(ordinal, leg)


def _validate_exit_leg(ordinal: int, leg: ExitLeg) -> None:
    if leg.quantity <= 0:
        raise TradeValidationError(f"Exit {ordinal} quantity must be greater than 0")
    if leg.price <= 0:
        raise TradeValidationError(f"Exit {ordinal} price must be greater than 0")
    if leg.fees is not None and leg.fees < 0:
        raise TradeValidationError(f"Exit {ordinal} fees cannot be negative")


def build_trade(
    trade_input: TradeInput,
    trade_id: Optional[str] = None,
    default_asset_class: AssetClass = DEFAULT_ASSET_CLASS,
) -> TradeWithDerived:
    """Create a trade from manual input, folding in any partial exits.

    Exit legs override the exit price (weighted average), exit time
    (latest leg) and status, and their fees are added to the base fees.
    An unset asset class falls back to ``default_asset_class``.

    Raises:
        TradeValidationError: If any value is invalid or the exits exceed
            the entry quantity.
    """
    validate_trade_input(trade_input)

    exit_price = trade_input.exit_price
    exit_time = trade_input.exit_time
    fees = trade_input.fees or 0.0
    status = trade_input.status

    if trade_input.exits:
        summary = summarize_exits(
            trade_input.quantity,
            (
                Fill(quantity=leg.quantity, price=leg.price, fees=leg.fees or 0.0, time=leg.exit_time)
                for leg in trade_input.exits
            ),
            source=ExitSource.MANUAL,
        )
        if summary.avg_exit_price is not None:
            exit_price = summary.avg_exit_price
        if summary.latest_exit_time is not None:
            exit_time = summary.latest_exit_time
        fees += summary.total_fees
        if summary.status is not None:
            status = summary.status

    trade = Trade(
        id=trade_id,
        symbol=trade_input.symbol,
        asset_class=trade_input.asset_class or default_asset_class,
        trade_date=trade_input.trade_date,
        direction=trade_input.direction,
        quantity=trade_input.quantity,
        entry_price=trade_input.entry_price,
        exit_price=exit_price,
        stop_loss_price=trade_input.stop_loss_price,
        entry_time=trade_input.entry_time,
        exit_time=exit_time,
        fees=fees,
        status=status or DEFAULT_TRADE_STATUS,
        strategy=trade_input.strategy,
        notes=trade_input.notes,
    )
    return with_derived_fields(trade)
