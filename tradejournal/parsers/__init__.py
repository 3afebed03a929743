"""Broker log parsers."""

from tradejournal.parsers.tlg import parse, parse_date, parse_option_symbol

__all__ = ["parse", "parse_date", "parse_option_symbol"]
