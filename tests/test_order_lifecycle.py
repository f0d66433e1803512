# -*- coding: utf-8 -*-
from decimal import Decimal

import pytest

from lanches_pos.models.entities import OrderStatus, PaymentMethod, PaymentStatus


def order_data(**overrides):
    data = {
        'origin': 'online',
        'pickup_type': 'immediate',
        'customer_name': 'Ana',
        'customer_phone': '(11) 98765-4321',
        'items': [{'product_id': 'x-burger', 'quantity': 2, 'extra_ids': ['bacon']}],
    }
    data.update(overrides)
    return data


def create(container, **overrides):
    res = container.order_service.create_order(order_data(**overrides))
    assert res['ok'], res.get('error')
    return res['order']


# ═══════════════════════════════════════════════════════════════════════════
# CREACIÓN
# ═══════════════════════════════════════════════════════════════════════════

def test_create_order_prices_from_catalog(container):
    data = order_data()
    data['items'][0]['price'] = '0.01'  # el precio del cliente se ignora
    res = container.order_service.create_order(data)
    assert res['ok']
    order = res['order']
    assert order.total == Decimal('45.80')
    assert order.status == OrderStatus.RECEIVED
    assert order.payment_status == PaymentStatus.PENDING
    assert order.customer_phone == '5511987654321'
    assert order.id and order.number == 1


def test_order_numbers_increase(container):
    first = create(container)
    second = create(container)
    assert second.number == first.number + 1
    numbers = [o.number for o in container.order_service.list_orders()]
    assert numbers == [2, 1]


def test_delivery_order_adds_fee_and_estimated_time(container, centro):
    order = create(
        container,
        pickup_type='delivery',
        delivery={'neighborhood_id': centro.id, 'street': 'Rua General Osório', 'number': '100'},
    )
    assert order.total == Decimal('50.80')
    assert order.delivery_info.delivery_fee == Decimal('5.00')
    assert order.delivery_info.estimated_time == 33


def test_delivery_requires_known_neighborhood_and_fields(container, centro):
    res = container.order_service.create_order(order_data(
        pickup_type='delivery', delivery={'neighborhood_id': centro.id, 'street': '', 'number': ''}))
    assert not res['ok'] and res['code'] == 400

    res = container.order_service.create_order(order_data(
        pickup_type='delivery', delivery={'neighborhood_id': 'nope', 'street': 'Rua A', 'number': '1'}))
    assert not res['ok']
    assert container.order_service.list_orders() == []


def test_street_validation_blocks_unregistered_street(container, centro):
    container.settings_service.update_settings({'is_street_validation_enabled': True})
    res = container.order_service.create_order(order_data(
        pickup_type='delivery',
        delivery={'neighborhood_id': centro.id, 'street': 'Rua Saldanha', 'number': '5'}))
    assert not res['ok']


def test_scheduled_order_needs_valid_time(container):
    res = container.order_service.create_order(order_data(pickup_type='scheduled', scheduled_time='25:00'))
    assert not res['ok']
    order = create(container, pickup_type='scheduled', scheduled_time='19:30')
    assert order.scheduled_time == '19:30'


def test_closed_store_rejects_online_but_not_counter(container):
    container.settings_service.set_store_open(False)
    res = container.order_service.create_order(order_data())
    assert not res['ok']
    order = create(container, origin='counter', payment_method='pix', payment_status='paid')
    assert order.payment_status == PaymentStatus.PAID
    assert order.payment_method == PaymentMethod.PIX


def test_table_order_needs_table_number(container):
    assert not container.order_service.create_order(order_data(origin='table'))['ok']
    order = create(container, origin='table', table_number=7)
    assert order.table_number == '7'


def test_cash_change_note(container):
    order = create(container, payment_method='cash', change_for='50', general_observation='Sem cebola')
    assert order.general_observation == 'Sem cebola | Troco para: R$ 50,00'

    res = container.order_service.create_order(order_data(payment_method='cash', change_for='40'))
    assert not res['ok']

    res = container.order_service.create_order(order_data(payment_method='cash', change_for='NaN'))
    assert not res['ok'] and res['code'] == 400


def test_inactive_product_and_foreign_extra_rejected(container):
    container.catalog_service.set_product_active('x-burger', False)
    assert not container.order_service.create_order(order_data())['ok']
    # El personal puede vender igual en el mostrador
    assert container.order_service.create_order(order_data(origin='counter'))['ok']

    container.catalog_service.set_product_active('x-burger', True)
    bad = order_data(items=[{'product_id': 'x-burger', 'quantity': 1, 'extra_ids': ['queijo']}])
    assert not container.order_service.create_order(bad)['ok']


@pytest.mark.parametrize('quantity', [0, -2, 'dos', True])
def test_invalid_quantity_rejected(container, quantity):
    data = order_data(items=[{'product_id': 'x-burger', 'quantity': quantity}])
    assert not container.order_service.create_order(data)['ok']


def test_quote_matches_created_total(container, centro):
    data = order_data(pickup_type='delivery', delivery={'neighborhood_id': centro.id})
    quote = container.order_service.quote(data)
    assert quote['ok']
    assert quote['total'] == '50.80'
    assert quote['delivery_fee'] == '5.00'


def test_quote_rejects_malformed_delivery(container):
    quote = container.order_service.quote(order_data(pickup_type='delivery', delivery='centro'))
    assert not quote['ok'] and quote['code'] == 400


# ═══════════════════════════════════════════════════════════════════════════
# TRANSICIONES
# ═══════════════════════════════════════════════════════════════════════════

def test_advance_walks_states_then_noop(container):
    order = create(container)
    service = container.order_service
    expected = [OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.COMPLETED]
    for status in expected:
        res = service.advance(order.id)
        assert res['ok'] and res['changed']
        assert res['order'].status == status

    res = service.advance(order.id)
    assert res['ok'] and res['changed'] is False
    assert service.get_order(order.id).status == OrderStatus.COMPLETED


def test_cancel_from_active_states_only(container):
    service = container.order_service
    order = create(container)
    service.advance(order.id)
    res = service.cancel(order.id)
    assert res['ok'] and res['order'].status == OrderStatus.CANCELLED

    # Cancelado es terminal
    assert service.advance(order.id)['changed'] is False
    res = service.cancel(order.id)
    assert not res['ok'] and res['code'] == 409

    done = create(container)
    for _ in range(3):
        service.advance(done.id)
    assert not service.cancel(done.id)['ok']


def test_set_status_accepts_only_next_or_cancel(container):
    service = container.order_service
    order = create(container)
    assert not service.set_status(order.id, 'ready')['ok']
    assert not service.set_status(order.id, 'bogus')['ok']
    assert service.set_status(order.id, 'preparing')['ok']
    assert service.set_status(order.id, 'cancelled')['order'].status == OrderStatus.CANCELLED


def test_unknown_order_is_not_found(container):
    res = container.order_service.advance('nope')
    assert not res['ok'] and res['code'] == 404


def test_payment_is_independent_from_status(container):
    service = container.order_service
    order = create(container)
    res = service.set_payment_status(order.id, 'paid', 'debit_card')
    assert res['ok']
    assert res['order'].payment_status == PaymentStatus.PAID
    assert res['order'].payment_method == PaymentMethod.DEBIT_CARD
    assert res['order'].status == OrderStatus.RECEIVED
    assert not service.set_payment_status(order.id, 'refunded')['ok']


def test_reschedule_only_scheduled_orders(container):
    service = container.order_service
    scheduled = create(container, pickup_type='scheduled', scheduled_time='19:30')
    immediate = create(container)
    assert service.reschedule(scheduled.id, '20:15')['order'].scheduled_time == '20:15'
    assert not service.reschedule(scheduled.id, '8:00')['ok']
    assert not service.reschedule(immediate.id, '20:15')['ok']


def test_mark_printed(container):
    order = create(container)
    assert not order.is_printed
    assert container.order_service.mark_printed(order.id)['order'].is_printed


def test_kanban_has_every_column(container):
    order = create(container)
    container.order_service.advance(order.id)
    columns = container.order_service.orders_by_status()
    assert set(columns) == {s.value for s in OrderStatus}
    assert [o.id for o in columns['preparing']] == [order.id]
    assert columns['received'] == []
