# ==============================================================================
# REPOSITORIO DE CONFIGURACIÓN DE LA TIENDA
# ==============================================================================
# Encapsula todo el acceso a store_settings.json (registro único).
# Guarda el diccionario tal cual; la validación y los defaults
# se aplican al leerlo con StoreSettings.from_dict.
# ==============================================================================

import os
import uuid
from typing import Any, Dict

from lanches_pos.repositories.base import DictRepository


class StoreSettingsRepository(DictRepository):
    """
    Repositorio de la configuración de la tienda.

    Formato de store_settings.json:
    {
        "name": "Thita Lanches",
        "is_open": true,
        "neighborhoods": [{"id": "...", "name": "Centro", "delivery_fee": "5.00", ...}],
        ...
    }
    """

    channel = 'settings'

    def __init__(self, base_path: str, notifier=None):
        super().__init__(os.path.join(base_path, 'store_settings.json'), notifier)

    def get_settings(self) -> Dict[str, Any]:
        return self.get_all()

    def update_settings(self, partial: Dict[str, Any]) -> Dict[str, Any]:
        """
        Mezcla los campos dados con los guardados.

        Returns:
            Configuración completa resultante
        """
        with self._file_lock:
            data = self.get_all()
            data.update(partial)
            self._write_raw(data)
            return data

    # =========================================================================
    # BARRIOS
    # =========================================================================

    def upsert_neighborhood(self, record: Dict[str, Any]) -> Dict[str, Any]:
        with self._file_lock:
            data = self.get_all()
            neighborhoods = data.get('neighborhoods')
            if not isinstance(neighborhoods, list):
                neighborhoods = []
            stored = dict(record)
            if not stored.get('id'):
                stored['id'] = uuid.uuid4().hex
            for i, existing in enumerate(neighborhoods):
                if isinstance(existing, dict) and existing.get('id') == stored['id']:
                    neighborhoods[i] = stored
                    break
            else:
                neighborhoods.append(stored)
            data['neighborhoods'] = neighborhoods
            self._write_raw(data)
            return stored

    def delete_neighborhood(self, neighborhood_id: str) -> bool:
        with self._file_lock:
            data = self.get_all()
            neighborhoods = data.get('neighborhoods') or []
            remaining = [n for n in neighborhoods if not (isinstance(n, dict) and n.get('id') == neighborhood_id)]
            if len(remaining) == len(neighborhoods):
                return False
            data['neighborhoods'] = remaining
            self._write_raw(data)
            return True
