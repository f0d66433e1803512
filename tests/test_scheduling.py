# -*- coding: utf-8 -*-
from datetime import datetime

import pytest

from lanches_pos.errors import ValidationError
from lanches_pos.services.scheduling_service import generate_slots, is_valid_slot_format


def test_first_slot_respects_advance():
    slots = generate_slots(datetime(2024, 5, 10, 10, 7), interval_minutes=15, max_slots=20)
    assert slots[:3] == ['10:45', '11:00', '11:15']
    assert len(slots) == 20


def test_slot_exactly_at_threshold_is_excluded():
    # 10:00 + 30 min = 10:30 → el primer horario es 10:45
    slots = generate_slots(datetime(2024, 5, 10, 10, 0), interval_minutes=15)
    assert slots[0] == '10:45'


def test_slots_cross_midnight_without_duplicates():
    slots = generate_slots(datetime(2024, 5, 10, 23, 50), interval_minutes=30, max_slots=5)
    assert slots == ['00:30', '01:00', '01:30', '02:00', '02:30']
    assert len(set(slots)) == len(slots)


def test_horizon_limits_slots_without_repeating_labels():
    slots = generate_slots(datetime(2024, 5, 10, 10, 0), interval_minutes=60, max_slots=100)
    assert len(slots) == len(set(slots))
    assert len(slots) <= 24


def test_non_positive_interval_rejected():
    with pytest.raises(ValidationError):
        generate_slots(datetime(2024, 5, 10, 10, 0), interval_minutes=0)


def test_zero_max_slots_returns_empty():
    assert generate_slots(datetime(2024, 5, 10, 10, 0), max_slots=0) == []


@pytest.mark.parametrize('value,expected', [
    ('09:45', True),
    ('23:59', True),
    ('24:00', False),
    ('9:45', False),
    ('12:60', False),
    (None, False),
])
def test_slot_format(value, expected):
    assert is_valid_slot_format(value) is expected


def test_service_uses_store_interval(container):
    container.settings_service.update_settings({'scheduling_interval': 30})
    slots = container.scheduling_service.available_slots(now=datetime(2024, 5, 10, 10, 7), max_slots=3)
    assert slots == ['11:00', '11:30', '12:00']
