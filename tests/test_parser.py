"""Tests for the broker trade log parser.

**Feature: trade-journal**
"""

from datetime import date

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.models import AssetClass, OptionType, TlgAction
from tradejournal.parsers import parse, parse_date, parse_option_symbol


STOCK_BUY = (
    "STK_TRD|1055305319|AAPL|APPLE INC|DARK|BUYTOOPEN|O|20260127|09:38:25|USD"
    "|100.00|1.00|260.595|26059.50|-1.00|0.83654"
)
STOCK_SELL = (
    "STK_TRD|1055344297|AAPL|APPLE INC|IBKRATS|SELLTOCLOSE|C|20260127|09:49:27|USD"
    "|-70.00|1.00|260.925|-18264.75|-1.01365|0.83654"
)
OPTION_BUY = (
    "OPT_TRD|931660771|AAPL  250905C00240000|AAPL 05SEP25 240 C|MEMX,MIAX|BUYTOOPEN|O"
    "|20250904|09:49:58|USD|5.00|100.00|1.45|725.00|-3.96325|0.85835"
)

SAMPLE_LOG = f"""ACCOUNT_INFORMATION
ACT_INF|U6498184|Test User|Individual|Address

STOCK_TRANSACTIONS
{STOCK_BUY}
{STOCK_SELL}

OPTION_TRANSACTIONS
{OPTION_BUY}
"""


class TestParseStockRecords:
    """Stock execution records."""

    def test_parse_stock_buy(self):
        outcome = parse(STOCK_BUY)

        assert outcome.errors == []
        assert len(outcome.executions) == 1
        execution = outcome.executions[0]
        assert execution.broker_execution_id == "1055305319"
        assert execution.symbol == "AAPL"
        assert execution.action is TlgAction.BUY_TO_OPEN
        assert execution.execution_date == date(2026, 1, 27)
        assert execution.execution_time == "09:38:25"
        assert execution.quantity == 100.0
        assert execution.price == 260.595
        assert execution.fees == -1.0
        assert execution.fx_rate == 0.83654
        assert execution.asset_class is AssetClass.STOCK
        assert execution.option_details is None

    def test_parse_stock_sell_keeps_sign(self):
        execution = parse(STOCK_SELL).executions[0]

        assert execution.action is TlgAction.SELL_TO_CLOSE
        assert execution.quantity == -70.0
        assert execution.abs_quantity == 70.0
        assert execution.abs_fees == pytest.approx(1.01365)

    def test_action_is_case_insensitive(self):
        line = STOCK_BUY.replace("BUYTOOPEN", "BuyToOpen")

        outcome = parse(line)

        assert outcome.errors == []
        assert outcome.executions[0].action is TlgAction.BUY_TO_OPEN

    def test_empty_fx_rate_is_absent(self):
        line = STOCK_BUY.rsplit("|", 1)[0] + "|"

        execution = parse(line).executions[0]

        assert execution.fx_rate is None


class TestParseOptionRecords:
    """Option execution records."""

    def test_parse_option_buy(self):
        execution = parse(OPTION_BUY).executions[0]

        assert execution.symbol == "AAPL  250905C00240000"
        assert execution.asset_class is AssetClass.OPTION
        assert execution.multiplier == 100.0
        assert execution.underlying_symbol == "AAPL"
        details = execution.option_details
        assert details.underlying == "AAPL"
        assert details.expiration_date == date(2025, 9, 5)
        assert details.option_type is OptionType.CALL
        assert details.strike_price == 240.0

    def test_bad_contract_symbol_is_an_error(self):
        line = OPTION_BUY.replace("AAPL  250905C00240000", "AAPL  BADSYMBOL")

        outcome = parse(line)

        assert outcome.executions == []
        assert len(outcome.errors) == 1
        assert "option symbol" in outcome.errors[0].error


class TestParseFile:
    """Whole-file parsing with tolerant error handling."""

    def test_parse_file_skips_headers(self):
        outcome = parse(SAMPLE_LOG)

        assert len(outcome.executions) == 3
        assert outcome.errors == []
        assert outcome.executions[0].asset_class is AssetClass.STOCK
        assert outcome.executions[2].asset_class is AssetClass.OPTION

    def test_wrong_field_count_reports_line_number(self):
        truncated = "STK_TRD|1|AAPL|APPLE INC|DARK|BUYTOOPEN|O|20260127"
        content = "\n".join(["HEADER", STOCK_BUY, truncated, "", STOCK_SELL])

        outcome = parse(content)

        assert len(outcome.executions) == 2
        assert len(outcome.errors) == 1
        error = outcome.errors[0]
        assert error.line_number == 3
        assert error.line_content == truncated
        assert "expected 16 fields, got 8" in error.error

    @pytest.mark.parametrize(
        "old,new,message",
        [
            ("BUYTOOPEN", "HOLD", "Unknown action: HOLD"),
            ("20260127", "20250230", "Invalid date: 20250230"),
            ("20260127", "2026-01-27", "Invalid date format"),
            ("|100.00|", "|abc|", "Invalid quantity: abc"),
            ("|260.595|", "|nan|", "Invalid price: nan"),
            ("|-1.00|", "||", "Invalid fees: "),
        ],
    )
    def test_invalid_field_is_an_error(self, old: str, new: str, message: str):
        outcome = parse(STOCK_BUY.replace(old, new, 1))

        assert outcome.executions == []
        assert len(outcome.errors) == 1
        assert message in outcome.errors[0].error

    def test_errors_keep_line_order(self):
        content = "\n".join([
            STOCK_BUY.replace("BUYTOOPEN", "X"),
            STOCK_SELL,
            STOCK_BUY.replace("20260127", "20261301"),
        ])

        outcome = parse(content)

        assert [e.line_number for e in outcome.errors] == [1, 3]
        assert len(outcome.executions) == 1

    @pytest.mark.parametrize("separator", ["\x0c", "\x0b", "\x1c", "\x85", "\u2028"])
    def test_only_newline_ends_a_line(self, separator: str):
        line = STOCK_BUY.replace("APPLE INC", f"APPLE{separator}INC")
        content = "\n".join([line, "STK_TRD|1|AAPL|APPLE INC"])

        outcome = parse(content)

        assert len(outcome.executions) == 1
        assert outcome.executions[0].name == f"APPLE{separator}INC"
        assert [e.line_number for e in outcome.errors] == [2]

    def test_crlf_line_endings(self):
        content = "\r\n".join(["HEADER", STOCK_BUY, "STK_TRD|bad"])

        outcome = parse(content)

        assert len(outcome.executions) == 1
        assert outcome.executions[0].fx_rate == 0.83654
        assert [e.line_number for e in outcome.errors] == [3]


class TestParseDeterminism:
    """
    **Feature: trade-journal, Property 1: Parse Determinism**

    *For any* input text, parsing twice yields identical output and
    never raises.
    """

    @given(
        lines=st.lists(
            st.one_of(
                st.sampled_from([STOCK_BUY, STOCK_SELL, OPTION_BUY, "HEADER", ""]),
                st.text(max_size=60).map(lambda s: "STK_TRD|" + s),
                st.text(max_size=60).map(lambda s: "OPT_TRD|" + s),
            ),
            max_size=20,
        )
    )
    @settings(max_examples=100)
    def test_parse_is_total_and_deterministic(self, lines: list[str]):
        content = "\n".join(lines)

        first = parse(content)
        second = parse(content)

        assert first == second
        record_lines = sum(
            1 for line in content.split("\n")
            if line.strip().startswith(("STK_TRD|", "OPT_TRD|"))
        )
        assert len(first.executions) + len(first.errors) == record_lines


class TestParseDate:
    def test_valid_date(self):
        assert parse_date("20260127") == date(2026, 1, 27)

    @pytest.mark.parametrize("text", ["2026012", "20261327", "20250230", "2026O127", ""])
    def test_invalid_date(self, text: str):
        with pytest.raises(ValueError):
            parse_date(text)


class TestOptionSymbolDecoding:
    """Packed OCC option symbols."""

    def test_call(self):
        details = parse_option_symbol("AAPL  250905C00240000")

        assert details.underlying == "AAPL"
        assert details.expiration_date == date(2025, 9, 5)
        assert details.option_type is OptionType.CALL
        assert details.strike_price == 240.0

    def test_put(self):
        details = parse_option_symbol("AMD   251017P00145000")

        assert details.underlying == "AMD"
        assert details.expiration_date == date(2025, 10, 17)
        assert details.option_type is OptionType.PUT
        assert details.strike_price == 145.0

    def test_fractional_strike(self):
        assert parse_option_symbol("SPY   250620C00542500").strike_price == 542.5

    def test_long_underlying_without_padding(self):
        details = parse_option_symbol("GOOGL 250117P00100000")

        assert details.underlying == "GOOGL"

    @pytest.mark.parametrize(
        "symbol,message",
        [
            ("250905C00240000", "Empty underlying"),
            ("AAPL", "Could not find date portion"),
            ("AAPL  251332C00240000", "Invalid expiration date"),
            ("AAPL  250905C00A40000", "Invalid strike price"),
            ("AAPL  250905C", "Invalid strike price"),
        ],
    )
    def test_invalid_symbols(self, symbol: str, message: str):
        with pytest.raises(ValueError, match=message):
            parse_option_symbol(symbol)


class TestOptionSymbolRoundTrip:
    """
    **Feature: trade-journal, Property 2: Option Symbol Round Trip**

    *For any* OCC symbol, re-encoding the decoded expiry and strike
    reproduces the symbol's own numeric substrings.
    """

    @given(
        underlying=st.text(alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZ", min_size=1, max_size=6),
        expiry=st.dates(min_value=date(2000, 1, 1), max_value=date(2099, 12, 31)),
        type_char=st.sampled_from(["C", "P"]),
        strike=st.integers(min_value=0, max_value=99_999_999),
    )
    @settings(max_examples=200)
    def test_round_trip(self, underlying: str, expiry: date, type_char: str, strike: int):
        symbol = f"{underlying:<6}{expiry:%y%m%d}{type_char}{strike:08d}"

        details = parse_option_symbol(symbol)

        assert details.underlying == underlying
        assert f"{details.expiration_date:%y%m%d}" == symbol[-15:-9]
        assert f"{round(details.strike_price * 1000):08d}" == symbol[-8:]
        assert details.option_type is (OptionType.CALL if type_char == "C" else OptionType.PUT)
