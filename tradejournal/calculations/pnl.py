"""Per-trade P&L derivation.

Pure functions over a single trade's resolved fields. Missing inputs
propagate to ``None`` rather than defaulting to zero.
"""

from typing import Optional

from tradejournal.models import (
    DerivedFields,
    Direction,
    Trade,
    TradeResult,
    TradeWithDerived,
)


def calculate_gross_pnl(
    direction: Direction,
    entry_price: float,
    exit_price: float,
    quantity: float,
    multiplier: float = 1.0,
) -> float:
    """Gross P&L.

    Long: (exit - entry) x quantity x multiplier
    Short: (entry - exit) x quantity x multiplier
    """
    return calculate_pnl_per_share(direction, entry_price, exit_price) * quantity * multiplier


def calculate_net_pnl(gross_pnl: float, fees: float) -> float:
    return gross_pnl - fees


def calculate_pnl_per_share(direction: Direction, entry_price: float, exit_price: float) -> float:
    """Price move in the trade's favour, independent of size."""
    if direction is Direction.LONG:
        return exit_price - entry_price
    return entry_price - exit_price


def calculate_risk_per_share(entry_price: float, stop_loss_price: float) -> Optional[float]:
    """Distance from entry to stop; ``None`` when the stop sits at entry."""
    risk = abs(entry_price - stop_loss_price)
    return risk if risk > 0 else None


def calculate_r_multiple(pnl_per_share: float, risk_per_share: Optional[float]) -> Optional[float]:
    if risk_per_share is None or risk_per_share <= 0:
        return None
    return pnl_per_share / risk_per_share


def classify_result(net_pnl: float) -> TradeResult:
    if net_pnl > 0:
        return TradeResult.WIN
    if net_pnl < 0:
        return TradeResult.LOSS
    return TradeResult.BREAKEVEN


def calculate_derived_fields(trade: Trade) -> DerivedFields:
    """Compute every derived field for a trade.

    Args:
        trade: Trade with resolved prices, quantity and fees.

    Returns:
        DerivedFields; all P&L fields are ``None`` without an exit price,
        and gross/net P&L and the result also need a quantity.
    """
    gross_pnl = net_pnl = pnl_per_share = None

    if trade.exit_price is not None:
        pnl_per_share = calculate_pnl_per_share(trade.direction, trade.entry_price, trade.exit_price)

        if trade.quantity is not None:
            gross_pnl = calculate_gross_pnl(
                trade.direction,
                trade.entry_price,
                trade.exit_price,
                trade.quantity,
                trade.asset_class.multiplier,
            )
            net_pnl = calculate_net_pnl(gross_pnl, trade.fees)

    risk_per_share = None
    if trade.stop_loss_price is not None:
        risk_per_share = calculate_risk_per_share(trade.entry_price, trade.stop_loss_price)

    r_multiple = None
    if pnl_per_share is not None:
        r_multiple = calculate_r_multiple(pnl_per_share, risk_per_share)

    return DerivedFields(
        gross_pnl=gross_pnl,
        net_pnl=net_pnl,
        pnl_per_share=pnl_per_share,
        risk_per_share=risk_per_share,
        r_multiple=r_multiple,
        result=classify_result(net_pnl) if net_pnl is not None else None,
    )


derive = calculate_derived_fields


def with_derived_fields(trade: Trade) -> TradeWithDerived:
    return TradeWithDerived(trade=trade, derived=calculate_derived_fields(trade))
