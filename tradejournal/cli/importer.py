"""Import command for TradeJournal CLI.

Previews the trades reconstructed from a broker trade log.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tradejournal.calculations import preview_import
from tradejournal.cli.common import format_money, read_log
from tradejournal.config import load_settings
from tradejournal.models import AggregatedTrade, ImportPreview

console = Console()


def _load_known_ids(path: Optional[Path]) -> set[str]:
    """Read broker execution IDs, one per line."""
    if path is None:
        return set()
    return {line.strip() for line in read_log(path).split("\n") if line.strip()}


def _trades_table(title: str, trades: list[AggregatedTrade], settings) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")

    table.add_column("Date", style="bold")
    table.add_column("Symbol")
    table.add_column("Side")
    table.add_column("Qty", justify="right")
    table.add_column("Entry", justify="right")
    table.add_column("Exit", justify="right")
    table.add_column("Fees", justify="right")
    table.add_column("Net P&L", justify="right")

    for trade in trades:
        table.add_row(
            trade.trade_date.isoformat(),
            trade.symbol,
            trade.direction.value.upper(),
            f"{trade.total_quantity:g}",
            f"{trade.avg_entry_price:.4f}",
            f"{trade.avg_exit_price:.4f}" if trade.avg_exit_price is not None else "-",
            f"{trade.total_fees:.2f}",
            format_money(trade.net_pnl, settings),
        )

    return table


def render_preview(preview: ImportPreview, settings) -> None:
    """Print an import preview as rich tables."""
    if preview.trades_to_import:
        console.print(_trades_table("Closed Trades", preview.trades_to_import, settings))
    else:
        console.print(Panel(
            "[dim]No new closed trades found[/dim]",
            title="[bold]Closed Trades[/bold]",
            border_style="dim",
        ))

    if preview.open_positions:
        console.print(_trades_table("Open Positions", preview.open_positions, settings))

    if preview.duplicate_count:
        console.print(f"\n[yellow]Skipped {preview.duplicate_count} already imported trade(s)[/yellow]")

    if preview.parse_errors:
        table = Table(title="Parse Errors", show_header=True, header_style="bold red")
        table.add_column("Line", justify="right")
        table.add_column("Error")
        for error in preview.parse_errors:
            table.add_row(str(error.line_number), error.error)
        console.print(table)


@click.command(name="import")
@click.argument("log_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-k", "--known-ids",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="File of already imported broker execution IDs, one per line.",
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    default=False,
    help="Print the preview as JSON.",
)
def import_log(log_file: Path, known_ids: Optional[Path], as_json: bool) -> None:
    """Preview trades reconstructed from a broker trade log.

    Executions are grouped per symbol into closed trades and open
    positions. Lines that cannot be parsed are listed, not fatal.

    \b
    Examples:
      tradejournal import trades.tlg
      tradejournal import trades.tlg --known-ids imported.txt
      tradejournal import trades.tlg --json
    """
    settings = load_settings()
    preview = preview_import(read_log(log_file), _load_known_ids(known_ids), settings.currency)

    if as_json:
        click.echo(preview.model_dump_json(indent=2))
        return

    render_preview(preview, settings)
