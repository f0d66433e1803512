# ==============================================================================
# GENERADOR DE HORARIOS DE RETIRO
# ==============================================================================
# Los horarios se calculan de nuevo en cada llamada (nunca se guardan).
# No se consulta la ocupación: dos pedidos pueden elegir el mismo horario.
# ==============================================================================

import math
import re
from datetime import datetime, timedelta
from typing import List, Optional

from lanches_pos.errors import ValidationError

_SLOT_RE = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)$')

DEFAULT_MIN_ADVANCE = 30
DEFAULT_INTERVAL = 15
DEFAULT_MAX_SLOTS = 20
DEFAULT_HORIZON_HOURS = 24


def is_valid_slot_format(value: str) -> bool:
    """True para "HH:MM" de 24 horas (ej: "09:45")."""
    return isinstance(value, str) and bool(_SLOT_RE.match(value))


def generate_slots(now: datetime,
                   min_advance_minutes: int = DEFAULT_MIN_ADVANCE,
                   interval_minutes: int = DEFAULT_INTERVAL,
                   max_slots: int = DEFAULT_MAX_SLOTS,
                   horizon_hours: int = DEFAULT_HORIZON_HOURS) -> List[str]:
    """
    Genera los próximos horarios de retiro.

    El primer candidato es el próximo múltiplo del intervalo dentro de la
    hora actual (sin segundos). Solo se devuelven horarios estrictamente
    posteriores a now + min_advance.

    Args:
        now: Momento de referencia (hora local de la tienda)
        min_advance_minutes: Antelación mínima
        interval_minutes: Paso entre horarios
        max_slots: Máximo de horarios devueltos
        horizon_hours: Hasta dónde mirar

    Returns:
        Lista de "HH:MM" en orden, sin repetidos

    Raises:
        ValidationError: Si el intervalo no es positivo
    """
    if interval_minutes <= 0:
        raise ValidationError('El intervalo debe ser mayor a cero')
    if max_slots <= 0:
        return []

    base = now.replace(second=0, microsecond=0)
    first_minute = math.ceil(base.minute / interval_minutes) * interval_minutes
    candidate = base.replace(minute=0) + timedelta(minutes=first_minute)

    threshold = now + timedelta(minutes=min_advance_minutes)
    horizon = now + timedelta(hours=horizon_hours)
    step = timedelta(minutes=interval_minutes)

    slots: List[str] = []
    seen = set()
    while candidate <= horizon and len(slots) < max_slots:
        if candidate > threshold:
            label = candidate.strftime('%H:%M')
            if label not in seen:
                seen.add(label)
                slots.append(label)
        candidate += step
    return slots


class SchedulingService:
    """Horarios de retiro usando el intervalo configurado en la tienda."""

    def __init__(self, settings_service):
        self.settings_service = settings_service

    def available_slots(self, now: Optional[datetime] = None,
                        max_slots: int = DEFAULT_MAX_SLOTS) -> List[str]:
        settings = self.settings_service.get_settings()
        return generate_slots(
            now or datetime.now(),
            min_advance_minutes=DEFAULT_MIN_ADVANCE,
            interval_minutes=settings.scheduling_interval,
            max_slots=max_slots,
        )
