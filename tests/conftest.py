# -*- coding: utf-8 -*-
"""
Fixtures compartidas: un contenedor por carpeta temporal y el cliente Flask.
"""
import os
import tempfile

import pytest
from decimal import Decimal

# Los logs de los tests no van a la carpeta del paquete
os.environ.setdefault('POS_LOG_DIR', os.path.join(tempfile.gettempdir(), 'lanches_pos_test_logs'))
os.environ.setdefault('POS_ENABLE_PROFILING', '0')

from lanches_pos.app_container import AppContainer, get_container
from lanches_pos.models.entities import CartLineItem, Neighborhood, Product, ProductExtra


@pytest.fixture
def container(tmp_path):
    AppContainer.reset_instance()
    c = AppContainer(base_path=str(tmp_path), seed_demo=True)
    yield c
    AppContainer.reset_instance()


@pytest.fixture
def centro(container):
    """Barrio Centro con tasa 5,00 y dos calles registradas."""
    res = container.settings_service.add_neighborhood(
        'Centro', '5.00', 2.5, ['Rua General Osório', 'Av. Brasil'])
    assert res['ok']
    return res['neighborhood']


@pytest.fixture
def client(container):
    from lanches_pos.main import app
    app.config['TESTING'] = True
    assert get_container() is container
    with app.test_client() as c:
        yield c


def login_admin(client, pin='1234'):
    r = client.post('/api/auth/pin', json={'pin': pin})
    assert r.status_code == 200
    token = r.get_json()['csrf_token']
    assert token, 'sin token CSRF tras el login'
    return token


def burger(price='18.90'):
    return Product(
        id='x-burger',
        name='X-Burger',
        price=Decimal(price),
        category_id='lanches',
        extras=[
            ProductExtra(id='bacon', name='Bacon', price=Decimal('4.00')),
            ProductExtra(id='ovo', name='Ovo', price=Decimal('3.00')),
        ],
    )


def line(product, quantity=1, extras=()):
    return CartLineItem(
        id='l1',
        product=product,
        quantity=quantity,
        selected_extras=[product.get_extra(e) for e in extras],
    )


def neighborhood(fee='5.00', km=2.5, streets=()):
    return Neighborhood(id='n1', name='Centro', delivery_fee=Decimal(fee),
                        estimated_distance_km=km, allowed_streets=list(streets))
