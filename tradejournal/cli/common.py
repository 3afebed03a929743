"""Helpers shared by TradeJournal commands."""

from pathlib import Path
from typing import Optional

import click

from tradejournal.config import Settings


def read_log(path: Path) -> str:
    """Read a trade log as UTF-8 text.

    Raises:
        click.ClickException: If the file cannot be read.
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Could not read {path}: {e}") from e


def format_money(value: Optional[float], settings: Settings, colored: bool = True) -> str:
    """Format a P&L amount with sign and currency symbol."""
    if value is None:
        return "-"

    sign = "+" if value >= 0 else "-"
    text = f"{sign}{settings.currency_symbol}{abs(value):,.2f}"
    if not colored:
        return text

    color = "green" if value >= 0 else "red"
    return f"[{color}]{text}[/{color}]"
