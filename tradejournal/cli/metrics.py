"""Metrics command for TradeJournal CLI.

Reports period statistics, daily performance and the equity curve
for the closed trades in a broker trade log.
"""

import math
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from pydantic import BaseModel, Field
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tradejournal.calculations import (
    calculate_daily_performance,
    calculate_equity_curve,
    calculate_period_metrics,
    filter_trades,
    parse_and_aggregate,
    to_trade,
    with_derived_fields,
)
from tradejournal.cli.common import format_money, read_log
from tradejournal.config import DEFAULT_CURRENCY, Settings, load_settings
from tradejournal.models import DailyPerformance, EquityPoint, PeriodMetrics

console = Console()


class MetricsReport(BaseModel):
    """Everything the metrics command reports."""

    period: PeriodMetrics
    daily: list[DailyPerformance] = Field(default_factory=list)
    equity_curve: list[EquityPoint] = Field(default_factory=list)
    open_position_count: int = 0
    parse_error_count: int = 0


def build_report(
    content: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    default_currency: str = DEFAULT_CURRENCY,
) -> MetricsReport:
    """Parse, aggregate and analyze a trade log.

    Args:
        content: Trade log text.
        start_date: First trade date to include.
        end_date: Last trade date to include.
        default_currency: Currency for records that leave it empty.
    """
    closed_trades, open_positions, errors = parse_and_aggregate(content, default_currency)

    trades = filter_trades(
        (with_derived_fields(to_trade(t, trade_id=t.key)) for t in closed_trades),
        start_date=start_date.date() if start_date else None,
        end_date=end_date.date() if end_date else None,
    )

    return MetricsReport(
        period=calculate_period_metrics(trades),
        daily=calculate_daily_performance(trades),
        equity_curve=calculate_equity_curve(trades),
        open_position_count=len(open_positions),
        parse_error_count=len(errors),
    )


def _format_ratio(value: Optional[float]) -> str:
    if value is None:
        return "-"
    if math.isinf(value):
        return "∞"
    return f"{value:.2f}"


def render_report(report: MetricsReport, settings: Settings) -> None:
    """Print a metrics report as rich panels and tables."""
    period = report.period

    if period.trade_count == 0:
        console.print(Panel(
            "[dim]No closed trades in range[/dim]",
            title="[bold]Performance[/bold]",
            border_style="dim",
        ))
        return

    win_rate = f"{period.win_rate * 100:.1f}%" if period.win_rate is not None else "-"
    summary = (
        f"[bold]Net P&L:[/bold]        {format_money(period.total_net_pnl, settings)}\n"
        f"[bold]Trades:[/bold]         {period.trade_count} "
        f"([green]{period.win_count}W[/green] / [red]{period.loss_count}L[/red] / "
        f"{period.breakeven_count}BE)\n"
        f"[bold]Win Rate:[/bold]       {win_rate}\n"
        f"[bold]Avg Win:[/bold]        {format_money(period.avg_win, settings)}\n"
        f"[bold]Avg Loss:[/bold]       {format_money(period.avg_loss, settings)}\n"
        f"[bold]Profit Factor:[/bold]  {_format_ratio(period.profit_factor)}\n"
        f"[bold]Expectancy:[/bold]     {format_money(period.expectancy, settings)}\n"
        f"[bold]Max Drawdown:[/bold]   {settings.currency_symbol}{period.max_drawdown:,.2f}\n"
        f"[bold]Streaks:[/bold]        {period.max_win_streak} wins / {period.max_loss_streak} losses"
    )
    console.print(Panel(summary, title="[bold]Performance[/bold]", border_style="cyan"))

    daily = Table(title="Daily P&L", show_header=True, header_style="bold cyan")
    daily.add_column("Date", style="bold")
    daily.add_column("Trades", justify="right")
    daily.add_column("W/L", justify="right")
    daily.add_column("P&L", justify="right")
    daily.add_column("Equity", justify="right")
    daily.add_column("Drawdown", justify="right")

    equity_by_date = {point.date: point for point in report.equity_curve}
    for day in report.daily:
        point = equity_by_date[day.date]
        daily.add_row(
            day.date.isoformat(),
            str(day.trade_count),
            f"{day.win_count}/{day.loss_count}",
            format_money(day.realized_net_pnl, settings),
            format_money(point.cumulative_pnl, settings),
            f"{point.drawdown:,.2f}",
        )
    console.print(daily)

    if report.open_position_count:
        console.print(f"\n[dim]{report.open_position_count} open position(s) excluded[/dim]")
    if report.parse_error_count:
        console.print(f"[yellow]{report.parse_error_count} line(s) could not be parsed[/yellow]")


@click.command(name="metrics")
@click.argument("log_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--from", "start_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="First trade date to include (YYYY-MM-DD).",
)
@click.option(
    "--to", "end_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Last trade date to include (YYYY-MM-DD).",
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    default=False,
    help="Print the report as JSON.",
)
def metrics(
    log_file: Path,
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    as_json: bool,
) -> None:
    """Show performance metrics for closed trades in a trade log.

    \b
    Examples:
      tradejournal metrics trades.tlg
      tradejournal metrics trades.tlg --from 2025-01-01 --to 2025-03-31
      tradejournal metrics trades.tlg --json
    """
    if start_date and end_date and start_date > end_date:
        raise click.BadParameter("--from must not be after --to")

    settings = load_settings()
    report = build_report(read_log(log_file), start_date, end_date, settings.currency)

    if as_json:
        click.echo(report.model_dump_json(indent=2))
        return

    render_report(report, settings)
