# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Aplican reglas de negocio y validaciones
# 3. Las rutas (controllers) solo llaman a servicios
# 4. Los servicios NO conocen el tipo de almacenamiento
#
# ESTRUCTURA:
# ├── pricing_service.py      → Subtotal, tasa de entrega, total (funciones puras)
# ├── delivery_service.py     → Validación de calles atendidas
# ├── scheduling_service.py   → Horarios de retiro
# ├── order_service.py        → Creación de pedidos y máquina de estados
# ├── cashier_service.py      → Apertura/cierre de caja y resumen
# ├── catalog_service.py      → Categorías, productos, adicionales
# ├── settings_service.py     → Configuración, barrios, PIN
# ├── report_service.py       → Estadísticas y reporte de salida
# └── notification_service.py → Payload y link de WhatsApp
# ==============================================================================

from lanches_pos.services.settings_service import SettingsService
from lanches_pos.services.scheduling_service import SchedulingService
from lanches_pos.services.order_service import OrderService
from lanches_pos.services.cashier_service import CashierService
from lanches_pos.services.catalog_service import CatalogService
from lanches_pos.services.report_service import ReportService

__all__ = [
    'SettingsService',
    'SchedulingService',
    'OrderService',
    'CashierService',
    'CatalogService',
    'ReportService',
]
