# -*- coding: utf-8 -*-
from decimal import Decimal

from lanches_pos.models.entities import OrderStatus


def test_category_in_use_cannot_be_deleted(container):
    catalog = container.catalog_service
    res = catalog.delete_category('lanches')
    assert not res['ok'] and res['code'] == 409
    assert [c.id for c in catalog.list_categories()] == ['lanches', 'bebidas']
    assert catalog.get_product('x-burger').category_id == 'lanches'


def test_empty_category_can_be_deleted(container):
    catalog = container.catalog_service
    assert catalog.delete_category('bebidas')['ok']
    assert [c.id for c in catalog.list_categories()] == ['lanches']
    assert catalog.delete_category('bebidas')['code'] == 404


def test_save_category_appends_at_end(container):
    res = container.catalog_service.save_category('Porções')
    assert res['ok']
    assert res['category'].order == 3
    assert not container.catalog_service.save_category('  ')['ok']


def test_save_product_with_extras(container):
    res = container.catalog_service.save_product({
        'name': 'Guaraná 350ml',
        'price': '6,00',
        'category_id': 'bebidas',
        'extras': [{'name': 'Gelo', 'price': '0'}],
    })
    assert res['ok']
    product = res['product']
    assert product.id
    assert product.price == Decimal('6.00')
    assert [e.name for e in product.extras] == ['Gelo']


def test_save_product_validates_input(container):
    catalog = container.catalog_service
    assert not catalog.save_product({'name': '', 'price': '5'})['ok']
    assert not catalog.save_product({'name': 'Suco', 'price': '-1'})['ok']
    assert not catalog.save_product({'name': 'Suco', 'price': '5', 'category_id': 'nope'})['ok']
    assert catalog.save_product({'name': 'Suco', 'price': '5'}, product_id='nope')['code'] == 404


def test_active_menu_hides_inactive_and_cost(container):
    catalog = container.catalog_service
    catalog.save_product({
        'name': 'X-Burger',
        'price': '18.90',
        'cost_price': '9.00',
        'category_id': 'lanches',
        'extras': [
            {'id': 'bacon', 'name': 'Bacon', 'price': '4.00'},
            {'id': 'ovo', 'name': 'Ovo', 'price': '3.00', 'is_active': False},
        ],
    }, product_id='x-burger')
    menu = catalog.active_menu()
    assert [entry['category']['id'] for entry in menu] == ['lanches']
    product = menu[0]['products'][0]
    assert 'cost_price' not in product
    assert [e['id'] for e in product['extras']] == ['bacon']

    catalog.set_product_active('x-burger', False)
    assert catalog.active_menu() == []


def test_price_change_propagates_to_open_orders_only(container):
    orders = container.order_service
    item = [{'product_id': 'x-burger', 'quantity': 2, 'extra_ids': ['bacon']}]
    base = {'origin': 'counter', 'pickup_type': 'immediate', 'customer_name': 'Ana', 'items': item}
    open_order = orders.create_order(dict(base))['order']
    done = orders.create_order(dict(base))['order']
    for _ in range(3):
        orders.advance(done.id)

    res = container.catalog_service.save_product({
        'name': 'X-Burger',
        'price': '20.00',
        'category_id': 'lanches',
        'extras': [
            {'id': 'bacon', 'name': 'Bacon', 'price': '5.00'},
            {'id': 'ovo', 'name': 'Ovo', 'price': '3.00'},
        ],
    }, product_id='x-burger')
    assert res['ok'] and res['updated_orders'] == 1

    refreshed = orders.get_order(open_order.id)
    assert refreshed.items[0].product.price == Decimal('20.00')
    assert refreshed.total == Decimal('50.00')

    untouched = orders.get_order(done.id)
    assert untouched.status == OrderStatus.COMPLETED
    assert untouched.total == Decimal('45.80')


def test_deleted_product_keeps_order_snapshot(container):
    order = container.order_service.create_order({
        'origin': 'counter', 'pickup_type': 'immediate', 'customer_name': 'Ana',
        'items': [{'product_id': 'x-burger', 'quantity': 1}],
    })['order']
    assert container.catalog_service.delete_product('x-burger')['ok']
    assert container.catalog_service.delete_product('x-burger')['code'] == 404
    assert container.order_service.get_order(order.id).items[0].product.name == 'X-Burger'


def test_nan_price_is_rejected(container):
    res = container.catalog_service.save_product({'name': 'Suco', 'price': 'NaN'})
    assert not res['ok'] and res['code'] == 400


def test_deactivating_product_updates_open_orders(container):
    orders = container.order_service
    order = orders.create_order({
        'origin': 'counter', 'pickup_type': 'immediate', 'customer_name': 'Ana',
        'items': [{'product_id': 'x-burger', 'quantity': 1}],
    })['order']

    res = container.catalog_service.set_product_active('x-burger', False)
    assert res['ok'] and res['updated_orders'] == 1
    assert orders.get_order(order.id).items[0].product.is_active is False
