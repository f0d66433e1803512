# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Punto único donde se crean repositorios y servicios. Facilita:
#   - Inyección de dependencias
#   - Testing (un contenedor por carpeta temporal)
#   - Cambiar de almacenamiento sin tocar los servicios
#
# Para pasar de JSON a SQL: crear repositorios que implementen las
# interfaces de repositories/interfaces.py y cambiarlos aquí.
# ==============================================================================

from typing import Optional

from lanches_pos import config
from lanches_pos.repositories import (
    CashierRepository,
    CatalogRepository,
    OrderRepository,
    StoreSettingsRepository,
)
from lanches_pos.services import (
    CashierService,
    CatalogService,
    OrderService,
    ReportService,
    SchedulingService,
    SettingsService,
)
from lanches_pos.state import ChangeNotifier, StoreState


class AppContainer:
    """
    Contenedor de dependencias de la aplicación (singleton).

    Uso:
        container = AppContainer(base_path='/ruta/datos')
        container.order_service.create_order({...})
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, base_path: str = None, seed_demo: bool = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, base_path: str = None, seed_demo: bool = None):
        """
        Args:
            base_path: Carpeta de los archivos JSON (default: config.DATA_DIR)
            seed_demo: Crear el cardápio de ejemplo si no existe (default: config.SEED_DEMO)
        """
        if self._initialized:
            return

        self._base_path = base_path or config.DATA_DIR
        self._seed_demo = config.SEED_DEMO if seed_demo is None else seed_demo
        self.notifier = ChangeNotifier()

        self._order_repo: Optional[OrderRepository] = None
        self._catalog_repo: Optional[CatalogRepository] = None
        self._settings_repo: Optional[StoreSettingsRepository] = None
        self._cashier_repo: Optional[CashierRepository] = None

        self._settings_service: Optional[SettingsService] = None
        self._scheduling_service: Optional[SchedulingService] = None
        self._order_service: Optional[OrderService] = None
        self._cashier_service: Optional[CashierService] = None
        self._catalog_service: Optional[CatalogService] = None
        self._report_service: Optional[ReportService] = None
        self._state: Optional[StoreState] = None

        self._initialized = True

    @property
    def base_path(self) -> str:
        return self._base_path

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def order_repo(self) -> OrderRepository:
        if self._order_repo is None:
            self._order_repo = OrderRepository(self._base_path, self.notifier)
        return self._order_repo

    @property
    def catalog_repo(self) -> CatalogRepository:
        if self._catalog_repo is None:
            self._catalog_repo = CatalogRepository(self._base_path, self.notifier, seed=self._seed_demo)
        return self._catalog_repo

    @property
    def settings_repo(self) -> StoreSettingsRepository:
        if self._settings_repo is None:
            self._settings_repo = StoreSettingsRepository(self._base_path, self.notifier)
        return self._settings_repo

    @property
    def cashier_repo(self) -> CashierRepository:
        if self._cashier_repo is None:
            self._cashier_repo = CashierRepository(self._base_path, self.notifier)
        return self._cashier_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def settings_service(self) -> SettingsService:
        if self._settings_service is None:
            self._settings_service = SettingsService(self.settings_repo)
        return self._settings_service

    @property
    def scheduling_service(self) -> SchedulingService:
        if self._scheduling_service is None:
            self._scheduling_service = SchedulingService(self.settings_service)
        return self._scheduling_service

    @property
    def order_service(self) -> OrderService:
        if self._order_service is None:
            self._order_service = OrderService(self.order_repo, self.catalog_repo, self.settings_service)
        return self._order_service

    @property
    def cashier_service(self) -> CashierService:
        if self._cashier_service is None:
            self._cashier_service = CashierService(self.cashier_repo, self.order_repo, self.settings_service)
        return self._cashier_service

    @property
    def catalog_service(self) -> CatalogService:
        if self._catalog_service is None:
            self._catalog_service = CatalogService(self.catalog_repo, self.order_service)
        return self._catalog_service

    @property
    def report_service(self) -> ReportService:
        if self._report_service is None:
            self._report_service = ReportService(self.order_repo, self.catalog_repo)
        return self._report_service

    @property
    def state(self) -> StoreState:
        """Vista en memoria; se refresca sola con cada escritura."""
        if self._state is None:
            self._state = StoreState(
                self.order_repo, self.catalog_repo, self.settings_repo, self.cashier_repo,
                notifier=self.notifier,
            )
            self._state.refresh()
        return self._state

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        """Reinicia todas las instancias (testing / recarga de datos)."""
        if self._state is not None:
            self._state.close()
        self._order_repo = None
        self._catalog_repo = None
        self._settings_repo = None
        self._cashier_repo = None

        self._settings_service = None
        self._scheduling_service = None
        self._order_service = None
        self._cashier_service = None
        self._catalog_service = None
        self._report_service = None
        self._state = None

    @classmethod
    def get_instance(cls, base_path: str = None) -> 'AppContainer':
        """
        Args:
            base_path: Ruta de datos (solo se usa en la primera llamada)
        """
        if cls._instance is None:
            return cls(base_path)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


def get_container(base_path: str = None) -> AppContainer:
    """Contenedor de dependencias global."""
    return AppContainer.get_instance(base_path)
