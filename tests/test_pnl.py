"""Tests for per-trade P&L derivation.

**Feature: trade-journal**
"""

from datetime import date

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.calculations import derive, with_derived_fields
from tradejournal.calculations.pnl import (
    calculate_gross_pnl,
    calculate_net_pnl,
    calculate_pnl_per_share,
    calculate_r_multiple,
    calculate_risk_per_share,
    classify_result,
)
from tradejournal.models import AssetClass, Direction, Trade, TradeResult, TradeStatus


def make_trade(**overrides) -> Trade:
    values = {
        "symbol": "AAPL",
        "trade_date": date(2025, 3, 3),
        "direction": Direction.LONG,
        "quantity": 100.0,
        "entry_price": 100.0,
        "exit_price": 110.0,
        "fees": 0.0,
        "status": TradeStatus.CLOSED,
    }
    values.update(overrides)
    return Trade(**values)


class TestPnLFunctions:
    def test_gross_pnl_long_win(self):
        assert calculate_gross_pnl(Direction.LONG, 100.0, 110.0, 10.0) == pytest.approx(100.0)

    def test_gross_pnl_long_loss(self):
        assert calculate_gross_pnl(Direction.LONG, 100.0, 90.0, 10.0) == pytest.approx(-100.0)

    def test_gross_pnl_short_win(self):
        assert calculate_gross_pnl(Direction.SHORT, 100.0, 90.0, 10.0) == pytest.approx(100.0)

    def test_gross_pnl_short_loss(self):
        assert calculate_gross_pnl(Direction.SHORT, 100.0, 110.0, 10.0) == pytest.approx(-100.0)

    def test_gross_pnl_option_multiplier(self):
        assert calculate_gross_pnl(Direction.LONG, 1.50, 2.00, 5.0, 100.0) == pytest.approx(250.0)

    def test_net_pnl(self):
        assert calculate_net_pnl(100.0, 10.0) == pytest.approx(90.0)

    def test_pnl_per_share(self):
        assert calculate_pnl_per_share(Direction.LONG, 100.0, 110.0) == pytest.approx(10.0)
        assert calculate_pnl_per_share(Direction.SHORT, 100.0, 90.0) == pytest.approx(10.0)

    def test_risk_per_share(self):
        assert calculate_risk_per_share(100.0, 95.0) == pytest.approx(5.0)
        assert calculate_risk_per_share(100.0, 105.0) == pytest.approx(5.0)

    def test_stop_at_entry_has_no_risk(self):
        assert calculate_risk_per_share(100.0, 100.0) is None

    def test_r_multiple(self):
        assert calculate_r_multiple(10.0, 5.0) == pytest.approx(2.0)
        assert calculate_r_multiple(10.0, None) is None
        assert calculate_r_multiple(10.0, 0.0) is None

    def test_classify_result(self):
        assert classify_result(100.0) is TradeResult.WIN
        assert classify_result(-100.0) is TradeResult.LOSS
        assert classify_result(0.0) is TradeResult.BREAKEVEN


class TestDerive:
    def test_closed_long_trade(self):
        derived = derive(make_trade(fees=2.0, stop_loss_price=95.0))

        assert derived.gross_pnl == pytest.approx(1000.0)
        assert derived.net_pnl == pytest.approx(998.0)
        assert derived.pnl_per_share == pytest.approx(10.0)
        assert derived.risk_per_share == pytest.approx(5.0)
        assert derived.r_multiple == pytest.approx(2.0)
        assert derived.result is TradeResult.WIN

    def test_option_trade_uses_contract_multiplier(self):
        trade = make_trade(
            symbol="AAPL  250905C00240000",
            asset_class=AssetClass.OPTION,
            quantity=5.0,
            entry_price=1.50,
            exit_price=2.00,
            fees=8.0,
        )

        derived = derive(trade)

        assert derived.gross_pnl == pytest.approx(250.0)
        assert derived.net_pnl == pytest.approx(242.0)

    def test_short_losing_trade(self):
        derived = derive(make_trade(direction=Direction.SHORT, exit_price=104.0, stop_loss_price=102.0))

        assert derived.net_pnl == pytest.approx(-400.0)
        assert derived.r_multiple == pytest.approx(-2.0)
        assert derived.result is TradeResult.LOSS

    def test_breakeven_trade(self):
        derived = derive(make_trade(exit_price=100.0))

        assert derived.net_pnl == 0.0
        assert derived.result is TradeResult.BREAKEVEN

    def test_open_trade_has_no_derived_fields(self):
        derived = derive(make_trade(exit_price=None, stop_loss_price=95.0, status=TradeStatus.OPEN))

        assert derived.gross_pnl is None
        assert derived.net_pnl is None
        assert derived.pnl_per_share is None
        assert derived.r_multiple is None
        assert derived.result is None
        assert derived.risk_per_share == pytest.approx(5.0)

    def test_missing_quantity_keeps_per_share_values(self):
        derived = derive(make_trade(quantity=None, stop_loss_price=95.0))

        assert derived.gross_pnl is None
        assert derived.net_pnl is None
        assert derived.result is None
        assert derived.pnl_per_share == pytest.approx(10.0)
        assert derived.r_multiple == pytest.approx(2.0)

    def test_with_derived_fields(self):
        result = with_derived_fields(make_trade())

        assert result.trade_date == date(2025, 3, 3)
        assert result.net_pnl == pytest.approx(1000.0)
        assert result.result is TradeResult.WIN


prices = st.floats(min_value=0.01, max_value=10_000.0, allow_nan=False, allow_infinity=False)


class TestDeriveIsPure:
    """
    **Feature: trade-journal, Property 4: Derivation Purity**

    *For any* trade, deriving twice yields identical fields.
    """

    @given(
        direction=st.sampled_from(list(Direction)),
        asset_class=st.sampled_from(list(AssetClass)),
        entry_price=prices,
        exit_price=st.one_of(st.none(), prices),
        stop_loss_price=st.one_of(st.none(), prices),
        quantity=st.one_of(st.none(), st.floats(min_value=0.001, max_value=100_000.0)),
        fees=st.floats(min_value=0.0, max_value=1_000.0),
    )
    @settings(max_examples=200)
    def test_derive_twice_is_identical(
        self, direction, asset_class, entry_price, exit_price, stop_loss_price, quantity, fees
    ):
        trade = make_trade(
            direction=direction,
            asset_class=asset_class,
            entry_price=entry_price,
            exit_price=exit_price,
            stop_loss_price=stop_loss_price,
            quantity=quantity,
            fees=fees,
        )

        first = derive(trade)
        second = derive(trade)

        assert first == second
        if exit_price is None:
            assert first.net_pnl is None and first.pnl_per_share is None
        if first.net_pnl is not None:
            assert first.result is classify_result(first.net_pnl)
        if first.risk_per_share is not None:
            assert first.risk_per_share > 0
