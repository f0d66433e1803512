# -*- coding: utf-8 -*-
from decimal import Decimal

import pytest

from conftest import burger, line, neighborhood
from lanches_pos.errors import ValidationError
from lanches_pos.models.entities import PickupType
from lanches_pos.models.money import format_brl, to_money
from lanches_pos.services import pricing_service


def test_line_item_total_with_extras():
    item = line(burger(), quantity=2, extras=['bacon'])
    assert pricing_service.line_item_total(item) == Decimal('45.80')


def test_grand_total_adds_delivery_fee_only_for_delivery():
    items = [line(burger(), quantity=2, extras=['bacon'])]
    n = neighborhood(fee='5.00')

    assert pricing_service.grand_total(items, PickupType.DELIVERY, n) == Decimal('50.80')
    assert pricing_service.grand_total(items, PickupType.IMMEDIATE, n) == Decimal('45.80')
    assert pricing_service.grand_total(items, PickupType.SCHEDULED, n) == Decimal('45.80')
    assert pricing_service.grand_total(items, PickupType.DELIVERY, None) == Decimal('45.80')


def test_decimal_sum_has_no_float_drift():
    product = burger(price='0.10')
    items = [line(product, quantity=3)]
    assert pricing_service.order_subtotal(items) == Decimal('0.30')


def test_empty_cart_subtotal_is_zero():
    assert pricing_service.order_subtotal([]) == Decimal('0.00')


@pytest.mark.parametrize('quantity', [0, -1])
def test_invalid_quantity_rejected(quantity):
    item = line(burger(), quantity=quantity)
    with pytest.raises(ValidationError):
        pricing_service.line_item_total(item)


def test_estimated_time_for_delivery_and_pickup():
    n = neighborhood(km=2.5)
    # 20 + ceil(2.5 * 5) = 33
    assert pricing_service.estimated_time(PickupType.DELIVERY, n, 30) == 33
    assert pricing_service.estimated_time(PickupType.IMMEDIATE, n, 30) == 30


def test_price_breakdown_serializes_money_as_strings():
    items = [line(burger(), quantity=2, extras=['bacon'])]
    result = pricing_service.price_breakdown(items, PickupType.DELIVERY, neighborhood())
    assert result == {
        'subtotal': '45.80',
        'delivery_fee': '5.00',
        'total': '50.80',
        'item_count': 2,
    }


def test_money_helpers():
    assert to_money('18,90') == Decimal('18.90')
    assert to_money(18.9) == Decimal('18.90')
    assert to_money('R$ 5') == Decimal('5.00')
    assert to_money('abc', default=None) is None
    assert format_brl(Decimal('1234.5')) == 'R$ 1.234,50'


@pytest.mark.parametrize('raw', ['NaN', 'nan', 'Infinity', '-inf', float('nan'), Decimal('NaN')])
def test_non_finite_money_falls_back_to_default(raw):
    assert to_money(raw, default=None) is None
    assert to_money(raw) == Decimal('0.00')


def test_brazilian_thousands_separator():
    assert to_money('1.234,56') == Decimal('1234.56')
    assert to_money('R$ 12.345,00') == Decimal('12345.00')
    assert to_money('1234.56') == Decimal('1234.56')
