# -*- coding: utf-8 -*-
import json

from lanches_pos.models.entities import StoreSettings
from lanches_pos.services.settings_service import is_pin_hash


def test_defaults_when_storage_is_empty(container):
    settings = container.settings_service.get_settings()
    assert settings.name == 'Thita Lanches'
    assert settings.is_open and not settings.is_cashier_open
    assert settings.prep_time == 30
    assert settings.scheduling_interval == 15
    assert not settings.is_street_validation_enabled


def test_corrupt_fields_fall_back_to_defaults(container):
    with open(container.settings_repo.file_path, 'w', encoding='utf-8') as f:
        json.dump({'name': 'Loja', 'prep_time': 'muito', 'scheduling_interval': -5,
                   'is_open': 'talvez', 'neighborhoods': 'x'}, f)
    settings = container.settings_service.get_settings()
    assert settings.name == 'Loja'
    assert settings.prep_time == 30
    assert settings.scheduling_interval == 15
    assert settings.is_open is True
    assert settings.neighborhoods == []


def test_from_dict_reports_problems():
    problems = []
    StoreSettings.from_dict({'prep_time': 0, 'delivery_radius': 'far'}, problems)
    assert sorted(problems) == ['delivery_radius', 'prep_time']


def test_update_settings_rejects_unknown_and_invalid(container):
    service = container.settings_service
    assert not service.update_settings({'admin_pin': '0000'})['ok']
    assert not service.update_settings({'prep_time': -1})['ok']
    assert not service.update_settings({})['ok']

    res = service.update_settings({'prep_time': 45, 'whatsapp_number': '11999998888'})
    assert res['ok']
    assert res['settings'].prep_time == 45
    assert service.get_settings().whatsapp_number == '11999998888'


def test_neighborhood_edit_keeps_streets(container, centro):
    service = container.settings_service
    res = service.add_neighborhood('Centro', '7.50', 3, neighborhood_id=centro.id)
    assert res['ok']
    assert res['neighborhood'].allowed_streets == ['Rua General Osório', 'Av. Brasil']
    assert str(service.get_neighborhood(centro.id).delivery_fee) == '7.50'

    assert not service.add_neighborhood('', '5')['ok']
    assert not service.add_neighborhood('Sul', '-1')['ok']
    assert not service.add_neighborhood('Sul', '5', neighborhood_id='nope')['ok']

    assert service.remove_neighborhood(centro.id)['ok']
    assert not service.remove_neighborhood(centro.id)['ok']


def test_import_streets(container, centro):
    text = '\n'.join([
        'Centro;Rua XV de Novembro',
        'centro ; Rua General Osório',   # repetida
        'Bairro Desconhecido;Rua A',
        'linha sem separador',
        '',
    ])
    res = container.settings_service.import_streets(text)
    assert res == {'ok': True, 'imported': 1, 'skipped': 3}
    streets = container.settings_service.get_neighborhood(centro.id).allowed_streets
    assert 'Rua XV de Novembro' in streets


def test_default_pin_is_migrated_to_hash(container):
    service = container.settings_service
    assert not service.verify_admin_pin('0000')
    assert service.verify_admin_pin('1234')
    stored = container.settings_repo.get_settings()['admin_pin']
    assert is_pin_hash(stored)
    assert service.verify_admin_pin('1234')


def test_change_pin(container):
    service = container.settings_service
    assert not service.change_admin_pin('0000', '5678')['ok']
    assert not service.change_admin_pin('1234', '12')['ok']
    assert service.change_admin_pin('1234', '5678')['ok']
    assert service.verify_admin_pin('5678')
    assert not service.verify_admin_pin('1234')
