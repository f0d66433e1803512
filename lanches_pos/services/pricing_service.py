# ==============================================================================
# MOTOR DE PRECIOS
# ==============================================================================
# Funciones puras: subtotal, tasa de entrega, total y tiempo estimado.
# Aritmética en Decimal; ningún cálculo pasa por float.
# ==============================================================================

import math
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from lanches_pos.errors import ValidationError
from lanches_pos.models.entities import CartLineItem, Neighborhood, PickupType
from lanches_pos.models.money import ZERO, money_str, money_sum, quantize

# Minutos fijos de salida + minutos por km recorrido
DELIVERY_BASE_MINUTES = 20
DELIVERY_MINUTES_PER_KM = 5


def _check_quantity(item: CartLineItem) -> None:
    if not isinstance(item.quantity, int) or isinstance(item.quantity, bool) or item.quantity < 1:
        raise ValidationError(f"Cantidad inválida para '{item.product.name}': {item.quantity}")


def line_item_total(item: CartLineItem) -> Decimal:
    """
    (precio del producto + Σ adicionales) × cantidad

    Raises:
        ValidationError: Si la cantidad es menor a 1
    """
    _check_quantity(item)
    return item.total


def order_subtotal(items: Iterable[CartLineItem]) -> Decimal:
    return money_sum(line_item_total(item) for item in items)


def delivery_fee(pickup_type: PickupType, neighborhood: Optional[Neighborhood]) -> Decimal:
    """Tasa del barrio solo para delivery; cero en cualquier otro caso."""
    if pickup_type == PickupType.DELIVERY and neighborhood is not None:
        return quantize(neighborhood.delivery_fee)
    return ZERO


def grand_total(items: Iterable[CartLineItem], pickup_type: PickupType,
                neighborhood: Optional[Neighborhood]) -> Decimal:
    return quantize(order_subtotal(items) + delivery_fee(pickup_type, neighborhood))


def estimated_time(pickup_type: PickupType, neighborhood: Optional[Neighborhood], prep_time: int) -> int:
    """
    Minutos estimados hasta la entrega.

    Delivery: 20 + ceil(km × 5). Retiro: tiempo de preparación de la tienda.
    """
    if pickup_type == PickupType.DELIVERY and neighborhood is not None:
        return DELIVERY_BASE_MINUTES + math.ceil(neighborhood.estimated_distance_km * DELIVERY_MINUTES_PER_KM)
    return prep_time


def price_breakdown(items: Iterable[CartLineItem], pickup_type: PickupType,
                    neighborhood: Optional[Neighborhood]) -> Dict[str, Any]:
    """
    Resumen para la vista previa del carrito.

    Returns:
        {'subtotal', 'delivery_fee', 'total', 'item_count'} (montos como string)
    """
    items = list(items)
    subtotal = order_subtotal(items)
    fee = delivery_fee(pickup_type, neighborhood)
    return {
        'subtotal': money_str(subtotal),
        'delivery_fee': money_str(fee),
        'total': money_str(subtotal + fee),
        'item_count': sum(item.quantity for item in items),
    }
