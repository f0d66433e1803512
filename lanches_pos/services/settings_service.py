# ==============================================================================
# SERVICIO DE CONFIGURACIÓN DE LA TIENDA
# ==============================================================================
# Configuración global, barrios atendidos, importación de calles y PIN
# de administración.
# ==============================================================================

import hmac
from typing import Any, Dict, List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from lanches_pos.errors import PosError
from lanches_pos.logger import log_error, log_event, log_warning
from lanches_pos.models.entities import DEFAULT_ADMIN_PIN, Neighborhood, StoreSettings
from lanches_pos.models.money import to_money
from lanches_pos.repositories.interfaces import IStoreSettingsRepository

# Prefijos de los hashes que genera werkzeug
_HASH_PREFIXES = ('pbkdf2:', 'scrypt:')

# Campos editables vía update_settings (el PIN tiene su propio método)
EDITABLE_FIELDS = frozenset([
    'name', 'is_open', 'prep_time', 'delivery_radius', 'opening_hours',
    'whatsapp_number', 'scheduling_interval', 'is_street_validation_enabled',
])


def is_pin_hash(value: Optional[str]) -> bool:
    return bool(value) and value.startswith(_HASH_PREFIXES)


class SettingsService:
    """
    Servicio de configuración.

    Responsabilidades:
    - Leer la configuración aplicando defaults a campos inválidos
    - Actualizar campos y barrios
    - Verificar y migrar el PIN de administración
    """

    def __init__(self, settings_repo: IStoreSettingsRepository):
        self.settings_repo = settings_repo

    # =========================================================================
    # LECTURA
    # =========================================================================

    def get_settings(self) -> StoreSettings:
        """
        Configuración actual. Nunca falla por datos corruptos:
        los campos inválidos caen al default y se registra una advertencia.
        """
        problems: List[str] = []
        settings = StoreSettings.from_dict(self.settings_repo.get_settings(), problems)
        if problems:
            log_warning(f"Configuración inválida en {', '.join(problems)}; se usan valores por defecto")
        return settings

    def get_neighborhood(self, neighborhood_id: str) -> Optional[Neighborhood]:
        return self.get_settings().get_neighborhood(neighborhood_id)

    # =========================================================================
    # ACTUALIZACIÓN
    # =========================================================================

    def update_settings(self, partial: Dict[str, Any]) -> Dict[str, Any]:
        """
        Actualiza campos de la configuración.

        Args:
            partial: Campos a modificar (solo EDITABLE_FIELDS)

        Returns:
            Dict con resultado (ok, settings, error)
        """
        if not isinstance(partial, dict) or not partial:
            return {'ok': False, 'error': 'Nada para actualizar'}

        unknown = sorted(set(partial) - EDITABLE_FIELDS)
        if unknown:
            return {'ok': False, 'error': f"Campos no editables: {', '.join(unknown)}"}

        problems: List[str] = []
        candidate = StoreSettings.from_dict(partial, problems)
        if problems:
            return {'ok': False, 'error': f"Valores inválidos: {', '.join(problems)}"}

        normalized = candidate.to_dict()
        changes = {key: normalized[key] for key in partial}
        try:
            self.settings_repo.update_settings(changes)
        except PosError as e:
            log_error("Error guardando configuración", e)
            return {'ok': False, 'error': e.message}

        log_event(f"Configuración actualizada: {', '.join(sorted(changes))}")
        return {'ok': True, 'settings': self.get_settings()}

    def set_store_open(self, is_open: bool) -> Dict[str, Any]:
        return self.update_settings({'is_open': bool(is_open)})

    def set_cashier_open(self, is_open: bool) -> None:
        """Solo lo usa CashierService, dentro de su sección crítica."""
        self.settings_repo.update_settings({'is_cashier_open': bool(is_open)})

    # =========================================================================
    # BARRIOS
    # =========================================================================

    def add_neighborhood(self, name: str, delivery_fee: Any, estimated_distance_km: Any = 0,
                         allowed_streets: Optional[List[str]] = None,
                         neighborhood_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Crea (o edita, si se pasa neighborhood_id) un barrio atendido.

        Returns:
            Dict con resultado (ok, neighborhood, error)
        """
        name = (name or '').strip()
        if not name:
            return {'ok': False, 'error': 'El barrio necesita un nombre'}
        fee = to_money(delivery_fee, default=None)
        if fee is None or fee < 0:
            return {'ok': False, 'error': 'Tasa de entrega inválida'}
        try:
            distance = float(estimated_distance_km or 0)
        except (TypeError, ValueError):
            return {'ok': False, 'error': 'Distancia inválida'}
        if distance < 0:
            return {'ok': False, 'error': 'Distancia inválida'}

        existing = None
        if neighborhood_id:
            existing = self.get_neighborhood(neighborhood_id)
            if existing is None:
                return {'ok': False, 'error': 'Barrio no encontrado'}

        if allowed_streets is None:
            # Al editar sin lista se conservan las calles ya importadas
            streets = list(existing.allowed_streets) if existing else []
        else:
            streets = [s.strip() for s in allowed_streets if isinstance(s, str) and s.strip()]

        neighborhood = Neighborhood(
            id=neighborhood_id or '',
            name=name,
            delivery_fee=fee,
            estimated_distance_km=distance,
            allowed_streets=streets,
        )
        try:
            stored = self.settings_repo.upsert_neighborhood(neighborhood.to_dict())
        except PosError as e:
            log_error("Error guardando barrio", e)
            return {'ok': False, 'error': e.message}
        log_event(f"Barrio guardado: {name} (tasa {fee})")
        return {'ok': True, 'neighborhood': Neighborhood.from_dict(stored)}

    def remove_neighborhood(self, neighborhood_id: str) -> Dict[str, Any]:
        try:
            removed = self.settings_repo.delete_neighborhood(neighborhood_id)
        except PosError as e:
            log_error("Error eliminando barrio", e)
            return {'ok': False, 'error': e.message}
        if not removed:
            return {'ok': False, 'error': 'Barrio no encontrado'}
        log_event(f"Barrio eliminado: {neighborhood_id}")
        return {'ok': True}

    def import_streets(self, text: str) -> Dict[str, Any]:
        """
        Importa calles desde texto con líneas "Bairro;Rua".

        - El barrio se busca por nombre sin distinguir mayúsculas
        - Las calles repetidas se ignoran
        - Las líneas mal formadas o de barrios desconocidos se saltan

        Returns:
            Dict con resultado (ok, imported, skipped)
        """
        settings = self.get_settings()
        by_name = {n.name.strip().lower(): n for n in settings.neighborhoods}
        touched: Dict[str, Neighborhood] = {}
        imported = 0
        skipped = 0

        for raw_line in (text or '').splitlines():
            line = raw_line.strip()
            if not line:
                continue
            parts = line.split(';')
            if len(parts) < 2:
                skipped += 1
                continue
            neighborhood = by_name.get(parts[0].strip().lower())
            street = parts[1].strip()
            if neighborhood is None or not street:
                skipped += 1
                continue
            existing = {s.strip().lower() for s in neighborhood.allowed_streets}
            if street.lower() in existing:
                skipped += 1
                continue
            neighborhood.allowed_streets.append(street)
            touched[neighborhood.id] = neighborhood
            imported += 1

        try:
            for neighborhood in touched.values():
                self.settings_repo.upsert_neighborhood(neighborhood.to_dict())
        except PosError as e:
            log_error("Error importando calles", e)
            return {'ok': False, 'error': e.message}

        if imported:
            log_event(f"Calles importadas: {imported} ({skipped} ignoradas)")
        return {'ok': True, 'imported': imported, 'skipped': skipped}

    # =========================================================================
    # PIN DE ADMINISTRACIÓN
    # =========================================================================

    def verify_admin_pin(self, pin: str) -> bool:
        """
        Verifica el PIN. Un PIN guardado en texto plano (instalaciones viejas)
        se reemplaza por su hash tras la primera verificación correcta.
        """
        if not pin:
            return False
        stored = self.settings_repo.get_settings().get('admin_pin')
        if not isinstance(stored, str) or not stored:
            stored = DEFAULT_ADMIN_PIN

        if is_pin_hash(stored):
            return check_password_hash(stored, pin)

        if not hmac.compare_digest(stored.encode('utf-8'), str(pin).encode('utf-8')):
            return False
        try:
            self.settings_repo.update_settings({'admin_pin': generate_password_hash(str(pin))})
            log_event("PIN de administración migrado a hash")
        except PosError as e:
            # El PIN es correcto aunque no se haya podido migrar
            log_error("No se pudo migrar el PIN", e)
        return True

    def change_admin_pin(self, current_pin: str, new_pin: str) -> Dict[str, Any]:
        if not self.verify_admin_pin(current_pin):
            return {'ok': False, 'error': 'PIN actual incorrecto'}
        new_pin = (new_pin or '').strip()
        if len(new_pin) < 4 or not new_pin.isdigit():
            return {'ok': False, 'error': 'El PIN debe tener al menos 4 dígitos'}
        try:
            self.settings_repo.update_settings({'admin_pin': generate_password_hash(new_pin)})
        except PosError as e:
            log_error("Error guardando PIN", e)
            return {'ok': False, 'error': e.message}
        log_event("PIN de administración cambiado")
        return {'ok': True}

