"""TradeJournal - broker log import and trade performance analytics."""

__version__ = "0.1.0"
