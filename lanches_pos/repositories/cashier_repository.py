# ==============================================================================
# REPOSITORIO DE CAJA - Libro de aperturas y cierres
# ==============================================================================
# Encapsula todo el acceso a cashier_logs.json.
# Solo se agregan registros (más nuevo primero); nunca se editan.
# ==============================================================================

import os
import uuid
from typing import Any, Dict, List, Optional

from lanches_pos.repositories.base import ListRepository


class CashierRepository(ListRepository):
    """
    Formato de cashier_logs.json:
    [
        {"id": "...", "type": "close", "timestamp": "...", "value": "120.50", "summary": {...}},
        {"id": "...", "type": "open", "timestamp": "...", "value": "100.00"}
    ]
    """

    channel = 'cashier'

    def __init__(self, base_path: str, notifier=None):
        super().__init__(os.path.join(base_path, 'cashier_logs.json'), notifier)

    def get_logs(self) -> List[Dict[str, Any]]:
        return self.get_all()

    def get_log(self, log_id: str) -> Optional[Dict[str, Any]]:
        return self.find_by('id', log_id)

    def latest_log(self, log_type: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Último registro (opcionalmente filtrado por tipo).

        Args:
            log_type: 'open', 'close' o None para cualquiera
        """
        for record in self.get_all():
            if log_type is None or record.get('type') == log_type:
                return record
        return None

    def add_log(self, record: Dict[str, Any]) -> Dict[str, Any]:
        with self._file_lock:
            stored = dict(record)
            if not stored.get('id'):
                stored['id'] = uuid.uuid4().hex
            data = self.get_all()
            data.insert(0, stored)
            self._write_raw(data)
            return stored
