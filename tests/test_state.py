# -*- coding: utf-8 -*-
from lanches_pos.state import ALL_CHANNELS, ChangeNotifier


def test_notifier_channels_and_wildcard():
    notifier = ChangeNotifier()
    orders, everything = [], []
    unsubscribe = notifier.subscribe('orders', orders.append)
    notifier.subscribe(ALL_CHANNELS, everything.append)

    notifier.publish('orders')
    notifier.publish('catalog')
    assert orders == ['orders']
    assert everything == ['orders', 'catalog']

    unsubscribe()
    notifier.publish('orders')
    assert orders == ['orders']
    assert notifier.subscriber_count('orders') == 0
    assert notifier.subscriber_count() == 1


def test_state_refreshes_after_writes(container):
    state = container.state
    version = state.version
    assert [p.id for p in state.products] == ['x-burger']

    res = container.order_service.create_order({
        'origin': 'online', 'pickup_type': 'immediate', 'customer_name': 'Ana',
        'items': [{'product_id': 'x-burger', 'quantity': 1}],
    })
    assert res['ok']
    assert state.version > version
    assert [o.id for o in state.orders] == [res['order'].id]

    container.settings_service.set_store_open(False)
    assert state.settings.is_open is False


def test_state_keeps_last_view_when_storage_breaks(container):
    state = container.state
    container.order_service.create_order({
        'origin': 'counter', 'pickup_type': 'immediate', 'customer_name': 'Ana',
        'items': [{'product_id': 'x-burger', 'quantity': 1}],
    })
    assert len(state.orders) == 1

    with open(container.order_repo.file_path, 'w', encoding='utf-8') as f:
        f.write('[corrupto')
    assert state.refresh() is False
    assert state.last_error
    assert len(state.orders) == 1


def test_snapshot_hides_pin(container):
    snapshot = container.state.snapshot()
    assert 'admin_pin' not in snapshot['settings']
    assert snapshot['version'] >= 1


def test_reset_unsubscribes_state(container):
    state = container.state
    assert container.notifier.subscriber_count(ALL_CHANNELS) == 1
    container.reset()
    assert container.notifier.subscriber_count(ALL_CHANNELS) == 0
    assert container.state is not state
