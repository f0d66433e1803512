# -*- coding: utf-8 -*-
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from lanches_pos.errors import ValidationError


def completed_order(container, quantity=1, extra_ids=(), method='pix', origin='counter'):
    res = container.order_service.create_order({
        'origin': origin,
        'pickup_type': 'immediate',
        'customer_name': 'Ana',
        'payment_method': method,
        'items': [{'product_id': 'x-burger', 'quantity': quantity, 'extra_ids': list(extra_ids)}],
    })
    assert res['ok'], res.get('error')
    order = res['order']
    for _ in range(3):
        container.order_service.advance(order.id)
    return order


def test_dashboard_stats(container):
    completed_order(container)
    pending = container.order_service.create_order({
        'origin': 'online', 'pickup_type': 'immediate', 'customer_name': 'Bia',
        'items': [{'product_id': 'x-burger', 'quantity': 1}],
    })['order']
    cancelled = container.order_service.create_order({
        'origin': 'online', 'pickup_type': 'immediate', 'customer_name': 'Caio',
        'items': [{'product_id': 'x-burger', 'quantity': 1}],
    })['order']
    container.order_service.cancel(cancelled.id)

    stats = container.report_service.dashboard_stats()
    assert stats == {'active': 1, 'pending': 1, 'completed': 1, 'revenue': '37.80'}
    assert pending.status.value == 'received'


def test_sales_overview_groups_cards(container):
    completed_order(container, method='pix')
    completed_order(container, method='credit_card', origin='online')
    completed_order(container, method='card')

    sales = container.report_service.sales_overview()
    assert sales['total_orders'] == 3
    assert sales['total_sales'] == '56.70'
    assert sales['web_sales'] == '18.90'
    assert sales['counter_orders'] == 2
    assert sales['cards_total'] == '37.80'
    assert sales['by_method']['pix'] == '18.90'


def test_product_report_counts_products_and_extras(container):
    completed_order(container, quantity=2, extra_ids=['bacon'])
    completed_order(container, quantity=1, extra_ids=['bacon', 'ovo'])
    container.order_service.create_order({
        'origin': 'counter', 'pickup_type': 'immediate', 'customer_name': 'Ana',
        'items': [{'product_id': 'x-burger', 'quantity': 5}],
    })  # abierto: no entra

    report = container.report_service.product_sales_report('all')
    assert report['orders'] == 2
    assert report['total_items'] == 3
    product = report['products'][0]
    assert product['name'] == 'X-Burger'
    assert product['category'] == 'Lanches'
    assert product['qty'] == 3
    assert product['total'] == Decimal('56.70')
    extras = {e['name']: (e['qty'], e['total']) for e in report['extras']}
    assert extras == {'Bacon': (3, Decimal('12.00')), 'Ovo': (1, Decimal('3.00'))}

    assert container.report_service.product_sales_report('all', search='coca')['products'] == []


def test_product_report_period_filter(container):
    completed_order(container)
    future = datetime(2999, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert container.report_service.product_sales_report('today', now=future)['orders'] == 0
    assert container.report_service.product_sales_report('month', now=future)['orders'] == 0
    assert container.report_service.product_sales_report('all', now=future)['orders'] == 1

    with pytest.raises(ValidationError):
        container.report_service.product_sales_report('year')


def test_csv_export(container):
    completed_order(container, quantity=2, extra_ids=['bacon'])
    output = container.report_service.export_product_report_csv('all')
    assert output.startswith('\ufeff')
    lines = output.lstrip('\ufeff').splitlines()
    assert lines[0] == 'Produto;Categoria;Quantidade Saida;Total Bruto (R$)'
    assert lines[1] == 'X-Burger;Lanches;2;37,80'
    assert 'ADICIONAIS MAIS PEDIDOS' in lines
    assert lines[-1] == 'Bacon;2;8,00'
