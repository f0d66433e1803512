# -*- coding: utf-8 -*-
import pytest

from conftest import neighborhood
from lanches_pos.errors import ValidationError
from lanches_pos.models.entities import DeliveryInfo, PickupType
from lanches_pos.services.delivery_service import (
    is_street_eligible,
    require_delivery_fields,
    validate_delivery_fields,
)

STREETS = ['Rua General Osório', 'Av. Brasil']


def test_validation_disabled_accepts_anything():
    n = neighborhood(streets=STREETS)
    assert is_street_eligible('xyz', n, False, PickupType.DELIVERY)


def test_partial_name_matches_registered_street():
    n = neighborhood(streets=STREETS)
    assert is_street_eligible('osório', n, True, PickupType.DELIVERY)
    assert is_street_eligible('  GENERAL OSÓRIO ', n, True, PickupType.DELIVERY)


def test_typed_name_containing_registered_street_matches():
    n = neighborhood(streets=STREETS)
    assert is_street_eligible('Avenida Av. Brasil 1200', n, True, PickupType.DELIVERY)


def test_unknown_street_rejected():
    n = neighborhood(streets=STREETS)
    assert not is_street_eligible('Rua Saldanha', n, True, PickupType.DELIVERY)


@pytest.mark.parametrize('street', ['', 'ab', '  a '])
def test_short_input_is_not_checked(street):
    n = neighborhood(streets=STREETS)
    assert is_street_eligible(street, n, True, PickupType.DELIVERY)


def test_neighborhood_without_streets_is_unrestricted():
    assert is_street_eligible('Rua Qualquer', neighborhood(), True, PickupType.DELIVERY)


def test_no_neighborhood_or_not_delivery_passes():
    n = neighborhood(streets=STREETS)
    assert is_street_eligible('Rua Saldanha', None, True, PickupType.DELIVERY)
    assert is_street_eligible('Rua Saldanha', n, True, PickupType.IMMEDIATE)


def test_delivery_fields_required():
    info = DeliveryInfo(neighborhood_id='', street=' ', number='')
    errors = validate_delivery_fields(info)
    assert len(errors) == 3
    assert validate_delivery_fields(None)

    with pytest.raises(ValidationError):
        require_delivery_fields(info)

    require_delivery_fields(DeliveryInfo(neighborhood_id='n1', street='Rua A', number='10'))
