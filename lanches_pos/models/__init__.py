# ==============================================================================
# MODELOS DEL DOMINIO
# ==============================================================================

from lanches_pos.models.money import ZERO, format_brl, money_str, money_sum, quantize, to_money
from lanches_pos.models.entities import (
    CANCELLABLE_STATUSES,
    NEXT_STATUS,
    STATUS_LABELS,
    TERMINAL_STATUSES,
    CartLineItem,
    CashierLog,
    CashierLogType,
    CashierSummary,
    Category,
    DeliveryInfo,
    Neighborhood,
    OpeningHours,
    Order,
    OrderOrigin,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PickupType,
    Product,
    ProductExtra,
    StoreSettings,
)

__all__ = [
    'ZERO', 'format_brl', 'money_str', 'money_sum', 'quantize', 'to_money',
    'CANCELLABLE_STATUSES', 'NEXT_STATUS', 'STATUS_LABELS', 'TERMINAL_STATUSES',
    'CartLineItem', 'CashierLog', 'CashierLogType', 'CashierSummary', 'Category',
    'DeliveryInfo', 'Neighborhood', 'OpeningHours', 'Order', 'OrderOrigin',
    'OrderStatus', 'PaymentMethod', 'PaymentStatus', 'PickupType', 'Product',
    'ProductExtra', 'StoreSettings',
]
