# -*- coding: utf-8 -*-
from lanches_pos.services.notification_service import (
    build_order_payload,
    format_whatsapp_number,
    whatsapp_link,
)


def test_format_whatsapp_number():
    assert format_whatsapp_number('(11) 98765-4321') == '5511987654321'
    assert format_whatsapp_number('+55 11 98765-4321') == '5511987654321'
    assert format_whatsapp_number(None) == ''


def test_whatsapp_link_encodes_text():
    link = whatsapp_link('11987654321', 'Pedido #1 pronto!')
    assert link == 'https://wa.me/5511987654321?text=Pedido%20%231%20pronto%21'


def test_delivery_payload(container, centro):
    container.settings_service.update_settings({'whatsapp_number': '(11) 3333-4444'})
    order = container.order_service.create_order({
        'origin': 'online',
        'pickup_type': 'delivery',
        'customer_name': 'Ana',
        'payment_method': 'pix',
        'delivery': {'neighborhood_id': centro.id, 'street': 'Av. Brasil', 'number': '10'},
        'items': [{'product_id': 'x-burger', 'quantity': 1, 'observation': 'sem cebola'}],
    })['order']

    payload = build_order_payload(order, container.settings_service.get_settings())
    assert payload['number'] == order.number
    assert payload['store_whatsapp'] == '551133334444'
    assert payload['origin'] == 'WhatsApp'
    assert payload['status'] == 'Recebido'
    assert payload['pickup']['neighborhood'] == 'Centro'
    assert payload['pickup']['estimated_time'] == 33
    assert payload['items'][0]['observation'] == 'sem cebola'
    assert payload['delivery_fee'] == '5.00'
    assert payload['total'] == '23.90'
    assert payload['payment'] == {'method': 'pix', 'label': 'Pix', 'status': 'pending'}
