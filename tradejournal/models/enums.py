"""Enumerations shared across TradeJournal models."""

from enum import Enum


class TlgAction(str, Enum):
    """Execution action as written in a broker trade log."""

    BUY_TO_OPEN = "BUYTOOPEN"
    SELL_TO_CLOSE = "SELLTOCLOSE"
    SELL_TO_OPEN = "SELLTOOPEN"
    BUY_TO_CLOSE = "BUYTOCLOSE"

    @classmethod
    def from_text(cls, text: str) -> "TlgAction":
        """Match an action string case-insensitively.

        Raises:
            ValueError: If the text is not one of the four known actions.
        """
        try:
            return cls(text.upper())
        except ValueError:
            raise ValueError(f"Unknown action: {text}") from None

    @property
    def is_opening(self) -> bool:
        return self in (TlgAction.BUY_TO_OPEN, TlgAction.SELL_TO_OPEN)

    @property
    def is_closing(self) -> bool:
        return self in (TlgAction.SELL_TO_CLOSE, TlgAction.BUY_TO_CLOSE)

    @property
    def is_buy(self) -> bool:
        return self in (TlgAction.BUY_TO_OPEN, TlgAction.BUY_TO_CLOSE)


class AssetClass(str, Enum):
    """Instrument asset class."""

    STOCK = "stock"
    OPTION = "option"

    @property
    def multiplier(self) -> float:
        """Contract multiplier (one option contract covers 100 shares)."""
        return 100.0 if self is AssetClass.OPTION else 1.0


class OptionType(str, Enum):
    CALL = "call"
    PUT = "put"


class Direction(str, Enum):
    LONG = "long"
    SHORT = "short"


class TradeStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class TradeResult(str, Enum):
    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"


class ExecutionType(str, Enum):
    ENTRY = "entry"
    EXIT = "exit"
