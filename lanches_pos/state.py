# ==============================================================================
# ESTADO DE LA APLICACIÓN Y NOTIFICACIÓN DE CAMBIOS
# ==============================================================================
# ChangeNotifier: los repositorios publican "cambió X" después de cada
# escritura confirmada.
# StoreState: vista en memoria (pedidos, cardápio, configuración, caja) que
# se vuelve a leer COMPLETA en cada evento. No hay merge incremental:
# la última lectura gana.
# ==============================================================================

import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

from lanches_pos.errors import PosError
from lanches_pos.logger import log_debug, log_error
from lanches_pos.models.entities import CashierLog, Category, Order, Product, StoreSettings

# Canal comodín: recibe todos los eventos
ALL_CHANNELS = '*'


class ChangeNotifier:
    """
    Publicador/suscriptor síncrono por canal.

    Uso:
        unsubscribe = notifier.subscribe('orders', callback)
        notifier.publish('orders')   # callback('orders')
        unsubscribe()
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[str], None]]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, channel: str, callback: Callable[[str], None]) -> Callable[[], None]:
        with self._lock:
            self._subscribers[channel].append(callback)

        def unsubscribe():
            self.unsubscribe(channel, callback)
        return unsubscribe

    def unsubscribe(self, channel: str, callback: Callable[[str], None]) -> None:
        with self._lock:
            callbacks = self._subscribers.get(channel, [])
            if callback in callbacks:
                callbacks.remove(callback)

    def subscriber_count(self, channel: str = None) -> int:
        with self._lock:
            if channel is None:
                return sum(len(cbs) for cbs in self._subscribers.values())
            return len(self._subscribers.get(channel, []))

    def publish(self, channel: str) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(channel, []))
            if channel != ALL_CHANNELS:
                callbacks += self._subscribers.get(ALL_CHANNELS, [])
        for callback in callbacks:
            callback(channel)


class StoreState:
    """
    Vista en memoria del estado de la tienda.

    Se suscribe a todos los canales del notifier; cualquier cambio dispara
    refresh(). Si la lectura falla se conserva la última vista válida.
    """

    def __init__(self, order_repo, catalog_repo, settings_repo, cashier_repo,
                 notifier: Optional[ChangeNotifier] = None):
        self.order_repo = order_repo
        self.catalog_repo = catalog_repo
        self.settings_repo = settings_repo
        self.cashier_repo = cashier_repo

        self.orders: List[Order] = []
        self.products: List[Product] = []
        self.categories: List[Category] = []
        self.settings: StoreSettings = StoreSettings()
        self.cashier_logs: List[CashierLog] = []
        self.version = 0
        self.last_error: Optional[str] = None

        self._lock = threading.RLock()
        self._unsubscribe = None
        if notifier is not None:
            self._unsubscribe = notifier.subscribe(ALL_CHANNELS, self._on_change)

    def _on_change(self, channel: str) -> None:
        self.refresh()

    def refresh(self) -> bool:
        """
        Vuelve a leer todo desde los repositorios.

        Returns:
            True si la vista se actualizó
        """
        try:
            orders = [Order.from_dict(o) for o in self.order_repo.get_orders()]
            products = [Product.from_dict(p) for p in self.catalog_repo.get_products()]
            categories = [Category.from_dict(c) for c in self.catalog_repo.get_categories()]
            settings = StoreSettings.from_dict(self.settings_repo.get_settings())
            logs = [CashierLog.from_dict(l) for l in self.cashier_repo.get_logs()]
        except PosError as e:
            log_error("No se pudo refrescar el estado", e)
            self.last_error = e.message
            return False

        with self._lock:
            self.orders = orders
            self.products = products
            self.categories = categories
            self.settings = settings
            self.cashier_logs = logs
            self.version += 1
            self.last_error = None
        log_debug(f"Estado actualizado (versión {self.version})")
        return True

    def close(self) -> None:
        """Cancela la suscripción (teardown)."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'version': self.version,
                'orders': [o.to_dict() for o in self.orders],
                'products': [p.to_dict() for p in self.products],
                'categories': [c.to_dict() for c in self.categories],
                'settings': self.settings.to_dict(include_pin=False),
                'cashier_logs': [l.to_dict() for l in self.cashier_logs],
            }
