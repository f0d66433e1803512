# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula todo el acceso a la persistencia (actualmente JSON).
# Para pasar a una base SQL, solo hay que modificar esta capa.
#
# ESTRUCTURA:
# ├── interfaces.py            → Protocolos (contratos de cada repositorio)
# ├── base.py                  → Clases base para JSON (DictRepository, ListRepository)
# ├── order_repository.py      → orders.json + counters.json
# ├── catalog_repository.py    → catalog.json
# ├── settings_repository.py   → store_settings.json
# └── cashier_repository.py    → cashier_logs.json
# ==============================================================================

from lanches_pos.repositories.interfaces import (
    IRepository,
    IOrderRepository,
    ICatalogRepository,
    IStoreSettingsRepository,
    ICashierRepository,
)

from lanches_pos.repositories.base import BaseRepository, DictRepository, ListRepository
from lanches_pos.repositories.order_repository import CounterRepository, OrderRepository
from lanches_pos.repositories.catalog_repository import CatalogRepository
from lanches_pos.repositories.settings_repository import StoreSettingsRepository
from lanches_pos.repositories.cashier_repository import CashierRepository

__all__ = [
    # Interfaces
    'IRepository',
    'IOrderRepository',
    'ICatalogRepository',
    'IStoreSettingsRepository',
    'ICashierRepository',

    # Clases base
    'BaseRepository',
    'DictRepository',
    'ListRepository',

    # Implementaciones JSON
    'CounterRepository',
    'OrderRepository',
    'CatalogRepository',
    'StoreSettingsRepository',
    'CashierRepository',
]
