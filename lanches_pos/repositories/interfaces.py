# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
#
# Contratos (protocolos) que cumple cualquier implementación de persistencia.
#
# 1. INDEPENDENCIA DE ALMACENAMIENTO
#    - Los servicios dependen de interfaces, NO de implementaciones concretas
#    - Cambiar JSON → SQL solo requiere nueva implementación
#
# 2. TESTING
#    - Fácil crear dobles que implementen estas interfaces
#    - Tests de servicios sin tocar archivos reales
#
# Todas las escrituras lanzan PersistenceError si el almacenamiento falla.
# Los registros se intercambian como diccionarios (formato to_dict()).
# ==============================================================================

from typing import Any, ContextManager, Dict, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class IRepository(Protocol):
    """Operaciones mínimas de cualquier repositorio."""

    def reload(self) -> None:
        ...

    def locked(self) -> ContextManager[None]:
        """Sección crítica: leer, decidir y escribir sin intercalarse."""
        ...


# ==============================================================================
# PEDIDOS
# ==============================================================================

@runtime_checkable
class IOrderRepository(IRepository, Protocol):
    """
    Repositorio de pedidos con numeración atómica.

    NOTA: create_order asigna id, number y created_at dentro de la misma
    sección crítica, así dos pedidos concurrentes nunca comparten número.
    """

    def get_orders(self) -> List[Dict[str, Any]]:
        """Todos los pedidos, más nuevos primero."""
        ...

    def get_order(self, order_id: str) -> Optional[Dict[str, Any]]:
        ...

    def next_order_number(self) -> int:
        """Reserva y devuelve el próximo número de pedido."""
        ...

    def create_order(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Guarda el pedido y devuelve el registro con id/number/created_at."""
        ...

    def update_order_status(self, order_id: str, status: str) -> Optional[Dict[str, Any]]:
        ...

    def update_payment_status(self, order_id: str, payment_status: str,
                              payment_method: Optional[str] = None) -> Optional[Dict[str, Any]]:
        ...

    def update_scheduled_time(self, order_id: str, scheduled_time: str) -> Optional[Dict[str, Any]]:
        ...

    def mark_order_as_printed(self, order_id: str) -> Optional[Dict[str, Any]]:
        ...

    def update_order(self, order_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Actualización genérica (ítems y total al propagar precios)."""
        ...


# ==============================================================================
# CARDÁPIO
# ==============================================================================

@runtime_checkable
class ICatalogRepository(IRepository, Protocol):

    def get_categories(self) -> List[Dict[str, Any]]:
        ...

    def upsert_category(self, record: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def delete_category(self, category_id: str) -> bool:
        """Lanza IntegrityError si algún producto la referencia."""
        ...

    def get_products(self) -> List[Dict[str, Any]]:
        ...

    def get_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        ...

    def upsert_product(self, record: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def delete_product(self, product_id: str) -> bool:
        ...


# ==============================================================================
# CONFIGURACIÓN DE LA TIENDA
# ==============================================================================

@runtime_checkable
class IStoreSettingsRepository(IRepository, Protocol):

    def get_settings(self) -> Dict[str, Any]:
        ...

    def update_settings(self, partial: Dict[str, Any]) -> Dict[str, Any]:
        """Mezcla los campos dados y devuelve la configuración completa."""
        ...

    def upsert_neighborhood(self, record: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def delete_neighborhood(self, neighborhood_id: str) -> bool:
        ...


# ==============================================================================
# CAJA
# ==============================================================================

@runtime_checkable
class ICashierRepository(IRepository, Protocol):

    def get_logs(self) -> List[Dict[str, Any]]:
        """Historial de caja, más nuevo primero."""
        ...

    def get_log(self, log_id: str) -> Optional[Dict[str, Any]]:
        ...

    def latest_log(self, log_type: Optional[str] = None) -> Optional[Dict[str, Any]]:
        ...

    def add_log(self, record: Dict[str, Any]) -> Dict[str, Any]:
        ...
