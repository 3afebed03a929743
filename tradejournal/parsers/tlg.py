"""Parser for pipe-delimited broker trade logs (TLG format).

Only execution records are read:

    STK_TRD|id|symbol|name|exchange|action|flags|YYYYMMDD|time|currency|qty|mult|price|total|fees|fx
    OPT_TRD|id|contract|name|exchange|action|flags|YYYYMMDD|time|currency|qty|mult|price|total|fees|fx

Every other line (section headers, account information) is skipped.
A malformed record never stops the parse; it is reported as a
``ParseError`` alongside the executions that did parse.
"""

import logging
import math
from datetime import date

from tradejournal.config import DEFAULT_CURRENCY
from tradejournal.models import (
    AssetClass,
    OptionContractDetails,
    OptionType,
    ParseError,
    ParseOutcome,
    RawExecution,
    TlgAction,
)

logger = logging.getLogger(__name__)

STOCK_PREFIX = "STK_TRD|"
OPTION_PREFIX = "OPT_TRD|"

RECORD_FIELD_COUNT = 16

# Two-digit option expiry years are read as 20YY.
OPTION_CENTURY = 2000


def parse(content: str, default_currency: str = DEFAULT_CURRENCY) -> ParseOutcome:
    """Parse the full text of a trade log.

    Args:
        content: File content, one record per newline-terminated line.
        default_currency: Currency for records that leave it empty.

    Returns:
        ParseOutcome with executions and errors, both in line order.
    """
    executions: list[RawExecution] = []
    errors: list[ParseError] = []

    for line_number, raw_line in enumerate(content.split("\n"), start=1):
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith(STOCK_PREFIX):
            asset_class = AssetClass.STOCK
        elif line.startswith(OPTION_PREFIX):
            asset_class = AssetClass.OPTION
        else:
            continue

        try:
            executions.append(parse_record(line, asset_class, default_currency))
        except ValueError as e:
            logger.debug("Rejected line %d: %s", line_number, e)
            errors.append(ParseError(line_number=line_number, line_content=line, error=str(e)))

    logger.info("Parsed %d executions with %d errors", len(executions), len(errors))
    return ParseOutcome(executions=executions, errors=errors)


def parse_record(
    line: str, asset_class: AssetClass, default_currency: str = DEFAULT_CURRENCY
) -> RawExecution:
    """Parse a single STK_TRD or OPT_TRD record.

    Raises:
        ValueError: If the record is malformed.
    """
    fields = line.split("|")
    kind = "option" if asset_class is AssetClass.OPTION else "stock"

    if len(fields) != RECORD_FIELD_COUNT:
        raise ValueError(
            f"Invalid {kind} transaction: expected {RECORD_FIELD_COUNT} fields, got {len(fields)}"
        )

    symbol = fields[2]
    action = TlgAction.from_text(fields[5])
    # fields[6] holds open/close flags, already implied by the action
    execution_date = parse_date(fields[7])

    option_details = None
    if asset_class is AssetClass.OPTION:
        option_details = parse_option_symbol(symbol)

    return RawExecution(
        broker_execution_id=fields[1],
        symbol=symbol,
        name=fields[3],
        exchange=fields[4],
        action=action,
        execution_date=execution_date,
        execution_time=fields[8],
        currency=fields[9] or default_currency,
        quantity=_parse_number(fields[10], "quantity"),
        multiplier=_parse_number(fields[11], "multiplier"),
        price=_parse_number(fields[12], "price"),
        total=_parse_number(fields[13], "total"),
        fees=_parse_number(fields[14], "fees"),
        fx_rate=_parse_fx_rate(fields[15]),
        asset_class=asset_class,
        option_details=option_details,
    )


def parse_date(text: str) -> date:
    """Parse a strict YYYYMMDD date.

    Raises:
        ValueError: If the text is not eight digits or not a calendar date.
    """
    if len(text) != 8 or not _is_ascii_digits(text):
        raise ValueError(f"Invalid date format: {text}")

    try:
        return date(int(text[0:4]), int(text[4:6]), int(text[6:8]))
    except ValueError:
        raise ValueError(f"Invalid date: {text}") from None


def parse_option_symbol(contract: str) -> OptionContractDetails:
    """Decode a packed OCC option symbol.

    Format::

        AAPL  250905C00240000
        |     |     ||
        |     |     |+-- strike x 1000 (240000 = $240.00)
        |     |     +--- C = call, P = put
        |     +--------- expiry YYMMDD (250905 = 2025-09-05)
        +--------------- underlying, space padded

    Raises:
        ValueError: If the symbol cannot be decoded.
    """
    contract = contract.strip()

    date_start = _find_expiry_start(contract)
    if date_start is None:
        raise ValueError(f"Could not find date portion in option symbol: {contract}")

    underlying = contract[:date_start].strip()
    if not underlying:
        raise ValueError(f"Empty underlying symbol in option contract: {contract}")

    expiry_text = contract[date_start:date_start + 6]
    try:
        expiration_date = date(
            OPTION_CENTURY + int(expiry_text[0:2]),
            int(expiry_text[2:4]),
            int(expiry_text[4:6]),
        )
    except ValueError:
        raise ValueError(f"Invalid expiration date: {expiry_text}") from None

    option_type = OptionType.CALL if contract[date_start + 6] == "C" else OptionType.PUT

    strike_text = contract[date_start + 7:]
    if not _is_ascii_digits(strike_text):
        raise ValueError(f"Invalid strike price: {strike_text}")

    return OptionContractDetails(
        underlying=underlying,
        expiration_date=expiration_date,
        option_type=option_type,
        strike_price=int(strike_text) / 1000.0,
    )


def _find_expiry_start(contract: str) -> int | None:
    """Index of the first six-digit run immediately followed by C or P."""
    for i in range(len(contract) - 6):
        if _is_ascii_digits(contract[i:i + 6]) and contract[i + 6] in ("C", "P"):
            return i
    return None


def _is_ascii_digits(text: str) -> bool:
    return text.isascii() and text.isdigit()


def _parse_number(text: str, field: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"Invalid {field}: {text}") from None
    if not math.isfinite(value):
        raise ValueError(f"Invalid {field}: {text}")
    return value


def _parse_fx_rate(text: str) -> float | None:
    """FX rate is optional; an empty or unreadable value is treated as absent."""
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None
