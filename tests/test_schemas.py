"""Tests for request and response schemas."""

import math
from datetime import date

import pytest
from pydantic import ValidationError

from conftest import NOW, make_trade
from ledger.models.trade import Closed, Holding, Market
from ledger.schemas.trade import (
    CalculationRead,
    TradeCreate,
    TradeEdit,
    TradePreview,
    TradeRead,
    TradeUpdate,
)
from ledger.services.calculator import calculate_trade


def _form(**overrides):
    form = {
        "market": "TW",
        "stockSymbol": "2330",
        "stockName": " 台積電 ",
        "quantity": "1000",
        "buyDate": "2024-01-01",
        "buyPrice": "100",
        "sellDate": "",
        "sellPrice": "",
        "expectedSellPrice": "",
        "note": "",
    }
    form.update(overrides)
    return form


# ---------------------------------------------------------------------------
# 1. Create
# ---------------------------------------------------------------------------

class TestTradeCreate:
    def test_camel_case_form_with_blank_optionals(self):
        data = TradeCreate.model_validate(_form())
        assert data.stock_name == "台積電"
        assert data.quantity == 1000
        assert data.sell_price is None
        assert data.sell_date is None
        assert data.expected_sell_price is None

        trade = data.to_trade()
        assert trade.id is None
        assert trade.position == Holding()
        assert trade.note == ""

    def test_snake_case_is_accepted(self):
        data = TradeCreate(stock_name="Apple", quantity=5, buy_date=date(2024, 1, 1), buy_price=180, market=Market.US)
        assert data.market == Market.US

    def test_sold_form_drops_expected_price(self):
        data = TradeCreate.model_validate(
            _form(sellDate="2024-05-01", sellPrice="120", expectedSellPrice="150")
        )
        assert data.expected_sell_price is None
        assert data.to_trade().position == Closed(sell_price=120, sell_date=date(2024, 5, 1))

    def test_expected_price_kept_while_holding(self):
        trade = TradeCreate.model_validate(_form(expectedSellPrice="150")).to_trade()
        assert trade.expected_sell_price == 150

    @pytest.mark.parametrize(
        "overrides",
        [
            {"stockName": "   "},
            {"quantity": "0"},
            {"quantity": "-5"},
            {"buyPrice": "-1"},
            {"buyDate": "yesterday"},
            {"sellPrice": "120"},
            {"sellDate": "2024-05-01"},
            {"market": "JP"},
        ],
    )
    def test_invalid_forms_rejected(self, overrides):
        with pytest.raises(ValidationError):
            TradeCreate.model_validate(_form(**overrides))

    def test_missing_required_field(self):
        form = _form()
        del form["buyDate"]
        with pytest.raises(ValidationError):
            TradeCreate.model_validate(form)


# ---------------------------------------------------------------------------
# 2. Update and edit
# ---------------------------------------------------------------------------

class TestTradeUpdate:
    def test_only_sent_fields_are_set(self):
        data = TradeUpdate.model_validate({"quantity": 5})
        assert data.model_dump(exclude_unset=True) == {"quantity": 5}

    def test_blank_optional_becomes_explicit_none(self):
        data = TradeUpdate.model_validate({"expectedSellPrice": ""})
        assert data.model_dump(exclude_unset=True) == {"expected_sell_price": None}

    def test_required_fields_cannot_be_cleared(self):
        with pytest.raises(ValidationError):
            TradeUpdate.model_validate({"stockName": None})

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            TradeUpdate.model_validate({"sellPrice": -3})


class TestTradeEdit:
    def test_sell_quantity_and_confirmation(self):
        data = TradeEdit.model_validate(
            _form(sellDate="2024-05-01", sellPrice="120", sellQuantity="400", confirmSplit=True)
        )
        assert data.sell_quantity == 400
        assert data.confirm_split is True

    def test_blank_sell_quantity_is_absent(self):
        assert TradeEdit.model_validate(_form(sellQuantity="")).sell_quantity is None

    def test_zero_sell_quantity_rejected(self):
        with pytest.raises(ValidationError):
            TradeEdit.model_validate(_form(sellQuantity="0"))


def test_preview_needs_only_calculator_inputs():
    data = TradePreview.model_validate({"quantity": "1000", "buyPrice": "100", "expectedSellPrice": "110"})
    trade = data.to_trade(today=NOW.date())
    assert trade.buy_date == NOW.date()
    assert calculate_trade(trade, NOW).expected_profit == 9_372


# ---------------------------------------------------------------------------
# 3. Read models
# ---------------------------------------------------------------------------

class TestReadModels:
    def test_trade_read_flattens_position(self):
        trade = make_trade("x", sell_price=110)
        read = TradeRead.from_trade(trade, calculate_trade(trade, NOW))
        assert read.is_sold
        assert read.sell_price == 110
        assert read.expected_sell_price is None
        assert read.calculations.profit == 9_372
        assert read.calculations.fees_and_tax == 142 + 156 + 330

    def test_non_finite_numbers_become_null(self):
        trade = make_trade("x", quantity=math.nan, buy_date=None)
        read = TradeRead.from_trade(trade, calculate_trade(trade, NOW))
        assert read.quantity is None
        assert read.calculations.total_cost is None
        assert read.calculations.holding_days is None
        assert read.calculations.buy_fee is None
        assert read.calculations.fees_and_tax is None
        # serializable without NaN tokens
        assert "NaN" not in read.model_dump_json()

    def test_calculation_read_keeps_expected_fields(self):
        calc = calculate_trade(make_trade(expected_sell_price=110), NOW)
        read = CalculationRead.from_calc(calc)
        assert read.expected_profit == 9_372
        assert read.profit == 0
