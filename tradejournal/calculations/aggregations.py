"""Portfolio analytics over trades carrying derived fields.

Open trades are expected to be filtered out by the caller (see
``filter_trades``); any trade without a net P&L is skipped here and
contributes nothing.
"""

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional, Sequence

from tradejournal.models import (
    DailyPerformance,
    EquityPoint,
    PeriodMetrics,
    TradeResult,
    TradeStatus,
    TradeWithDerived,
)


def calculate_daily_performance(trades: Iterable[TradeWithDerived]) -> list[DailyPerformance]:
    """Realized P&L and win/loss counts per trade date, oldest first.

    Breakeven trades count towards ``trade_count`` only.
    """
    pnl_by_date: dict[date, float] = defaultdict(float)
    counts: dict[date, list[int]] = defaultdict(lambda: [0, 0, 0])

    for trade in trades:
        if trade.net_pnl is None:
            continue
        day = trade.trade_date
        pnl_by_date[day] += trade.net_pnl
        day_counts = counts[day]
        day_counts[0] += 1
        if trade.result is TradeResult.WIN:
            day_counts[1] += 1
        elif trade.result is TradeResult.LOSS:
            day_counts[2] += 1

    return [
        DailyPerformance(
            date=day,
            realized_net_pnl=pnl_by_date[day],
            trade_count=counts[day][0],
            win_count=counts[day][1],
            loss_count=counts[day][2],
        )
        for day in sorted(pnl_by_date)
    ]


def calculate_period_metrics(trades: Iterable[TradeWithDerived]) -> PeriodMetrics:
    """Win rate, profit factor, expectancy, drawdown and streaks.

    Trades are processed in trade-date order (stable, so same-day trades
    keep their given order). A breakeven trade ends both the current
    win streak and the current loss streak.
    """
    ordered = sorted(trades, key=lambda t: t.trade_date)
    if not ordered:
        return PeriodMetrics()

    total_net_pnl = 0.0
    win_count = loss_count = breakeven_count = 0
    total_wins = 0.0
    total_losses = 0.0

    win_streak = loss_streak = 0
    max_win_streak = max_loss_streak = 0

    for trade in ordered:
        net_pnl = trade.net_pnl
        if net_pnl is None:
            continue
        total_net_pnl += net_pnl

        if trade.result is TradeResult.WIN:
            win_count += 1
            total_wins += net_pnl
            win_streak += 1
            loss_streak = 0
            max_win_streak = max(max_win_streak, win_streak)
        elif trade.result is TradeResult.LOSS:
            loss_count += 1
            total_losses += net_pnl
            loss_streak += 1
            win_streak = 0
            max_loss_streak = max(max_loss_streak, loss_streak)
        elif trade.result is TradeResult.BREAKEVEN:
            breakeven_count += 1
            win_streak = loss_streak = 0

    decisive_count = win_count + loss_count
    win_rate = win_count / decisive_count if decisive_count > 0 else None
    avg_win = total_wins / win_count if win_count > 0 else None
    # Stays negative
    avg_loss = total_losses / loss_count if loss_count > 0 else None

    profit_factor: Optional[float]
    if total_losses < 0:
        profit_factor = total_wins / abs(total_losses)
    elif total_wins > 0:
        profit_factor = float("inf")
    else:
        profit_factor = None

    expectancy = None
    if win_rate is not None and avg_win is not None and avg_loss is not None:
        expectancy = win_rate * avg_win + (1 - win_rate) * avg_loss

    return PeriodMetrics(
        total_net_pnl=total_net_pnl,
        trade_count=win_count + loss_count + breakeven_count,
        win_count=win_count,
        loss_count=loss_count,
        breakeven_count=breakeven_count,
        win_rate=win_rate,
        avg_win=avg_win,
        avg_loss=avg_loss,
        profit_factor=profit_factor,
        expectancy=expectancy,
        max_drawdown=calculate_max_drawdown(calculate_equity_curve(ordered)),
        max_win_streak=max_win_streak,
        max_loss_streak=max_loss_streak,
    )


def calculate_equity_curve(trades: Iterable[TradeWithDerived]) -> list[EquityPoint]:
    """Cumulative realized P&L with running drawdown, one point per trade date."""
    pnl_by_date: dict[date, float] = defaultdict(float)
    for trade in trades:
        if trade.net_pnl is not None:
            pnl_by_date[trade.trade_date] += trade.net_pnl

    curve = []
    cumulative_pnl = 0.0
    peak = 0.0
    for day in sorted(pnl_by_date):
        cumulative_pnl += pnl_by_date[day]
        peak = max(peak, cumulative_pnl)
        curve.append(EquityPoint(date=day, cumulative_pnl=cumulative_pnl, drawdown=peak - cumulative_pnl))
    return curve


def calculate_max_drawdown(curve: Sequence[EquityPoint]) -> float:
    return max((point.drawdown for point in curve), default=0.0)


def filter_trades(
    trades: Iterable[TradeWithDerived],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    closed_only: bool = True,
) -> list[TradeWithDerived]:
    """Select trades within an inclusive date range.

    Args:
        trades: Trades to filter.
        start_date: First trade date to keep, unbounded if None.
        end_date: Last trade date to keep, unbounded if None.
        closed_only: Keep only closed trades that have a net P&L.
    """
    selected = []
    for trade in trades:
        if start_date is not None and trade.trade_date < start_date:
            continue
        if end_date is not None and trade.trade_date > end_date:
            continue
        if closed_only and (trade.trade.status is not TradeStatus.CLOSED or trade.net_pnl is None):
            continue
        selected.append(trade)
    return selected


daily_performance = calculate_daily_performance
period_metrics = calculate_period_metrics
equity_curve = calculate_equity_curve
