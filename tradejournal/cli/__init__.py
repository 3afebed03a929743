"""CLI commands for TradeJournal.

This package provides the command-line interface for importing
broker trade logs and reporting performance analytics.
"""

from tradejournal.cli.main import cli, main

__all__ = ["cli", "main"]
