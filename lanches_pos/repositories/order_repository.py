# ==============================================================================
# REPOSITORIO DE PEDIDOS
# ==============================================================================
# Encapsula todo el acceso a orders.json y al contador de counters.json.
# Los pedidos nunca se borran: solo cambian de estado.
# ==============================================================================

import os
import uuid
from typing import Any, Dict, List, Optional

from lanches_pos.models.entities import utcnow
from lanches_pos.repositories.base import DictRepository, ListRepository


class CounterRepository(DictRepository):
    """
    Contadores persistidos.

    Formato de counters.json:
    {
        "orders": 42
    }
    """

    def __init__(self, base_path: str, notifier=None):
        super().__init__(os.path.join(base_path, 'counters.json'), notifier)

    def increment(self, name: str, floor: int = 0) -> int:
        """
        Incrementa el contador y devuelve el nuevo valor.

        Args:
            name: Nombre del contador
            floor: Valor mínimo del que partir (ej: mayor número ya usado)
        """
        with self._file_lock:
            data = self.get_all()
            try:
                current = int(data.get(name, 0) or 0)
            except (TypeError, ValueError):
                current = 0
            value = max(current, floor) + 1
            data[name] = value
            self._write_raw(data, notify=False)
            return value


class OrderRepository(ListRepository):
    """
    Repositorio de pedidos.

    Formato de orders.json (orden de creación):
    [
        {"id": "9f1c...", "number": 1, "status": "received", "items": [...], ...},
        ...
    ]
    """

    channel = 'orders'

    def __init__(self, base_path: str, notifier=None):
        """
        Args:
            base_path: Carpeta de datos
            notifier: Publicador de eventos de cambio
        """
        super().__init__(os.path.join(base_path, 'orders.json'), notifier)
        self._counters = CounterRepository(base_path)

    # =========================================================================
    # LECTURA
    # =========================================================================

    def get_orders(self) -> List[Dict[str, Any]]:
        """Todos los pedidos, más nuevos primero."""
        return sorted(self.get_all(), key=lambda o: o.get('number') or 0, reverse=True)

    def get_order(self, order_id: str) -> Optional[Dict[str, Any]]:
        return self.find_by('id', order_id)

    # =========================================================================
    # NUMERACIÓN Y CREACIÓN
    # =========================================================================

    def next_order_number(self) -> int:
        """
        Reserva el próximo número de pedido.
        Nunca devuelve un número ya usado aunque counters.json se haya perdido.
        """
        with self._file_lock:
            used = [o.get('number') or 0 for o in self.get_all()]
            return self._counters.increment('orders', floor=max(used, default=0))

    def create_order(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Guarda un pedido nuevo asignando id, number y created_at.

        Args:
            record: Pedido en formato to_dict() (id/number se ignoran)

        Returns:
            El registro tal como quedó guardado
        """
        with self._file_lock:
            stored = dict(record)
            stored['id'] = uuid.uuid4().hex
            stored['number'] = self.next_order_number()
            stored['created_at'] = utcnow().isoformat()
            data = self.get_all()
            data.append(stored)
            self._write_raw(data)
            return stored

    # =========================================================================
    # ACTUALIZACIONES
    # =========================================================================

    def update_order_status(self, order_id: str, status: str) -> Optional[Dict[str, Any]]:
        return self.update_where('id', order_id, {'status': status})

    def update_payment_status(self, order_id: str, payment_status: str,
                              payment_method: Optional[str] = None) -> Optional[Dict[str, Any]]:
        updates = {'payment_status': payment_status}
        if payment_method:
            updates['payment_method'] = payment_method
        return self.update_where('id', order_id, updates)

    def update_scheduled_time(self, order_id: str, scheduled_time: str) -> Optional[Dict[str, Any]]:
        return self.update_where('id', order_id, {'scheduled_time': scheduled_time})

    def mark_order_as_printed(self, order_id: str) -> Optional[Dict[str, Any]]:
        return self.update_where('id', order_id, {'is_printed': True})

    def update_order(self, order_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        # id, number y created_at son inmutables
        safe = {k: v for k, v in updates.items() if k not in ('id', 'number', 'created_at')}
        return self.update_where('id', order_id, safe)
