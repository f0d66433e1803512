# ==============================================================================
# DATOS PARA NOTIFICACIÓN (WhatsApp)
# ==============================================================================
# Este módulo NO envía mensajes ni arma el texto final: entrega un payload
# estable con los datos del pedido y el armado del link wa.me.
# El texto lo compone el cliente (frontend / impresora).
# ==============================================================================

import re
from typing import Any, Dict, Optional
from urllib.parse import quote

from lanches_pos.models.entities import (
    ORIGIN_LABELS,
    PAYMENT_METHOD_LABELS,
    STATUS_LABELS,
    Order,
    PickupType,
    StoreSettings,
)
from lanches_pos.models.money import money_str

WHATSAPP_URL = 'https://wa.me/'
BRAZIL_COUNTRY_CODE = '55'


def format_whatsapp_number(phone: Optional[str]) -> str:
    """
    Solo dígitos; los números locales (DDD + número, 10 u 11 dígitos)
    reciben el prefijo 55.
    """
    digits = re.sub(r'\D', '', phone or '')
    if len(digits) in (10, 11):
        return BRAZIL_COUNTRY_CODE + digits
    return digits


def whatsapp_link(phone: str, text: str = '') -> str:
    """https://wa.me/<número>?text=<texto codificado>"""
    link = WHATSAPP_URL + format_whatsapp_number(phone)
    if text:
        link += '?text=' + quote(text, safe='')
    return link


def build_order_payload(order: Order, settings: StoreSettings) -> Dict[str, Any]:
    """
    Datos del pedido para armar la notificación.

    Returns:
        Diccionario con claves estables (number, customer, phone, pickup,
        items, delivery_fee, total, payment, tracking_id, store_name, ...)
    """
    pickup: Dict[str, Any] = {'type': order.pickup_type.value}
    if order.pickup_type == PickupType.SCHEDULED:
        pickup['scheduled_time'] = order.scheduled_time
    if order.pickup_type == PickupType.DELIVERY and order.delivery_info:
        info = order.delivery_info
        neighborhood = settings.get_neighborhood(info.neighborhood_id)
        pickup.update({
            'street': info.street,
            'number': info.number,
            'complement': info.complement,
            'reference': info.reference,
            'neighborhood': neighborhood.name if neighborhood else None,
            'estimated_time': info.estimated_time,
        })
    elif order.pickup_type != PickupType.DELIVERY:
        pickup['estimated_time'] = settings.prep_time

    method = order.payment_method
    return {
        'number': order.number,
        'tracking_id': order.id,
        'store_name': settings.name,
        'store_whatsapp': format_whatsapp_number(settings.whatsapp_number) or None,
        'customer': order.customer_name,
        'phone': format_whatsapp_number(order.customer_phone) or None,
        'table_number': order.table_number,
        'origin': ORIGIN_LABELS.get(order.origin, order.origin.value),
        'status': STATUS_LABELS.get(order.status, order.status.value),
        'pickup': pickup,
        'items': [
            {
                'quantity': item.quantity,
                'name': item.product.name,
                'extras': [e.name for e in item.selected_extras],
                'observation': item.observation or None,
                'total': money_str(item.total),
            }
            for item in order.items
        ],
        'observation': order.general_observation or None,
        'delivery_fee': money_str(order.delivery_fee),
        'total': money_str(order.total),
        'payment': {
            'method': method.value if method else None,
            'label': PAYMENT_METHOD_LABELS.get(method) if method else None,
            'status': order.payment_status.value,
        },
    }
