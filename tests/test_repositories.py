# -*- coding: utf-8 -*-
import json
import os

import pytest

from lanches_pos.errors import IntegrityError, PersistenceError
from lanches_pos.repositories import (
    CashierRepository,
    CatalogRepository,
    IOrderRepository,
    OrderRepository,
    StoreSettingsRepository,
)


def test_order_repository_implements_interface(tmp_path):
    assert isinstance(OrderRepository(str(tmp_path)), IOrderRepository)


def test_create_order_assigns_identity(tmp_path):
    repo = OrderRepository(str(tmp_path))
    first = repo.create_order({'id': 'client-id', 'number': 99, 'status': 'received'})
    second = repo.create_order({'status': 'received'})
    assert first['id'] != 'client-id'
    assert (first['number'], second['number']) == (1, 2)
    assert first['created_at']
    assert repo.get_order(first['id'])['number'] == 1


def test_counter_never_reuses_numbers(tmp_path):
    repo = OrderRepository(str(tmp_path))
    repo.create_order({'status': 'received'})
    repo.create_order({'status': 'received'})
    os.remove(os.path.join(str(tmp_path), 'counters.json'))

    repo = OrderRepository(str(tmp_path))
    assert repo.create_order({'status': 'received'})['number'] == 3


def test_update_order_protects_identity(tmp_path):
    repo = OrderRepository(str(tmp_path))
    order = repo.create_order({'status': 'received'})
    updated = repo.update_order(order['id'], {'number': 500, 'id': 'x', 'total': '10.00'})
    assert updated['number'] == order['number']
    assert updated['id'] == order['id']
    assert updated['total'] == '10.00'
    assert repo.update_order_status('missing', 'ready') is None


def test_corrupt_file_raises_persistence_error(tmp_path):
    repo = OrderRepository(str(tmp_path))
    with open(repo.file_path, 'w', encoding='utf-8') as f:
        f.write('{not json')
    with pytest.raises(PersistenceError):
        repo.get_orders()


def test_failed_write_leaves_file_untouched(tmp_path):
    repo = OrderRepository(str(tmp_path))
    repo.create_order({'status': 'received'})
    with pytest.raises(PersistenceError):
        repo.save_all([{'bad': object()}])
    assert len(repo.get_orders()) == 1
    assert not os.path.exists(repo.file_path + '.tmp')


def test_catalog_seed_and_integrity(tmp_path):
    repo = CatalogRepository(str(tmp_path), seed=True)
    assert repo.get_product('x-burger')['price'] == '18.90'
    with pytest.raises(IntegrityError):
        repo.delete_category('lanches')
    with open(repo.file_path, encoding='utf-8') as f:
        data = json.load(f)
    assert {c['id'] for c in data['categories']} == {'lanches', 'bebidas'}


def test_settings_repository_merges_and_upserts(tmp_path):
    repo = StoreSettingsRepository(str(tmp_path))
    repo.update_settings({'name': 'Loja'})
    merged = repo.update_settings({'prep_time': 20})
    assert merged == {'name': 'Loja', 'prep_time': 20}

    stored = repo.upsert_neighborhood({'name': 'Centro', 'delivery_fee': '5.00'})
    assert stored['id']
    repo.upsert_neighborhood(dict(stored, delivery_fee='6.00'))
    assert [n['delivery_fee'] for n in repo.get_settings()['neighborhoods']] == ['6.00']
    assert repo.delete_neighborhood(stored['id'])
    assert not repo.delete_neighborhood(stored['id'])


def test_cashier_logs_newest_first(tmp_path):
    repo = CashierRepository(str(tmp_path))
    repo.add_log({'type': 'open', 'value': '10.00'})
    repo.add_log({'type': 'close', 'value': '30.00'})
    assert [l['type'] for l in repo.get_logs()] == ['close', 'open']
    assert repo.latest_log('open')['value'] == '10.00'
    assert repo.latest_log()['type'] == 'close'


def test_writes_publish_change_events(tmp_path):
    from lanches_pos.state import ChangeNotifier

    notifier = ChangeNotifier()
    events = []
    notifier.subscribe('orders', events.append)
    repo = OrderRepository(str(tmp_path), notifier)
    assert events == []  # crear el archivo vacío no notifica
    repo.create_order({'status': 'received'})
    assert events == ['orders']
