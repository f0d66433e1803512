# ==============================================================================
# SERVICIO DE PEDIDOS - Creación y máquina de estados
# ==============================================================================
# Estados: received → preparing → ready → completed ; cancelled es terminal.
#
# Cada comando sigue dos fases:
#   1. Validar y persistir en el repositorio
#   2. Solo si el repositorio confirma, devolver el pedido actualizado
# Si el almacenamiento falla se devuelve {'ok': False} y nada cambia.
# No se crean pedidos locales con ids temporales.
# ==============================================================================

import uuid
from typing import Any, Dict, List, Optional

from lanches_pos.errors import NotFoundError, PosError, TransitionError, ValidationError, failure
from lanches_pos.logger import log_error, log_event, profile_function
from lanches_pos.models.entities import (
    CANCELLABLE_STATUSES,
    OrderOrigin,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PickupType,
    CartLineItem,
    DeliveryInfo,
    Order,
    Product,
    parse_enum,
    parse_origin,
)
from lanches_pos.models.money import format_brl, to_money
from lanches_pos.repositories.interfaces import ICatalogRepository, IOrderRepository
from lanches_pos.services import pricing_service
from lanches_pos.services.delivery_service import is_street_eligible, require_delivery_fields
from lanches_pos.services.notification_service import format_whatsapp_number
from lanches_pos.services.scheduling_service import is_valid_slot_format


class OrderService:
    """
    Servicio de pedidos.

    Responsabilidades:
    - Validar y crear pedidos (precios calculados en el servidor)
    - Transiciones de estado, pago, reprogramación e impresión
    - Consultas para el kanban
    - Propagar cambios de precio a pedidos abiertos
    """

    def __init__(self, order_repo: IOrderRepository, catalog_repo: ICatalogRepository,
                 settings_service):
        self.order_repo = order_repo
        self.catalog_repo = catalog_repo
        self.settings_service = settings_service

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def list_orders(self) -> List[Order]:
        """Todos los pedidos, más nuevos primero."""
        return [Order.from_dict(o) for o in self.order_repo.get_orders()]

    def get_order(self, order_id: str) -> Optional[Order]:
        record = self.order_repo.get_order(order_id)
        return Order.from_dict(record) if record else None

    def active_orders(self) -> List[Order]:
        return [o for o in self.list_orders() if not o.is_terminal]

    def orders_by_status(self) -> Dict[str, List[Order]]:
        """Columnas del kanban (todas presentes aunque estén vacías)."""
        columns = {status.value: [] for status in OrderStatus}
        for order in self.list_orders():
            columns[order.status.value].append(order)
        return columns

    # =========================================================================
    # ARMADO DE ÍTEMS
    # =========================================================================

    def build_line_items(self, items_data: List[Dict[str, Any]],
                         origin: OrderOrigin = OrderOrigin.ONLINE) -> List[CartLineItem]:
        """
        Resuelve los ítems recibidos contra el cardápio.

        Cada ítem: {'product_id', 'quantity', 'extra_ids': [...], 'observation'}
        Los precios SIEMPRE salen del cardápio, nunca del cliente.

        Raises:
            ValidationError: Producto desconocido/inactivo, adicional ajeno o cantidad inválida
        """
        if not isinstance(items_data, list) or not items_data:
            raise ValidationError('El carrito está vacío')

        staff_sale = origin == OrderOrigin.COUNTER
        items = []
        for raw in items_data:
            if not isinstance(raw, dict):
                raise ValidationError('Ítem inválido')
            record = self.catalog_repo.get_product(str(raw.get('product_id') or ''))
            if record is None:
                raise ValidationError('Producto no encontrado')
            product = Product.from_dict(record)
            if not product.is_active and not staff_sale:
                raise ValidationError(f"'{product.name}' no está disponible")

            quantity = raw.get('quantity', 1)
            if isinstance(quantity, bool) or not isinstance(quantity, (int, str)):
                raise ValidationError(f"Cantidad inválida para '{product.name}'")
            try:
                quantity = int(quantity)
            except ValueError:
                raise ValidationError(f"Cantidad inválida para '{product.name}'")

            extras = []
            for extra_id in raw.get('extra_ids') or []:
                extra = product.get_extra(str(extra_id))
                if extra is None:
                    raise ValidationError(f"El adicional no pertenece a '{product.name}'")
                if not extra.is_active and not staff_sale:
                    raise ValidationError(f"'{extra.name}' no está disponible")
                extras.append(extra)

            item = CartLineItem(
                id=uuid.uuid4().hex,
                product=product,
                quantity=quantity,
                selected_extras=extras,
                observation=(raw.get('observation') or '').strip(),
            )
            pricing_service.line_item_total(item)  # valida cantidad
            items.append(item)
        return items

    def quote(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Vista previa de precios del carrito.

        Returns:
            Dict con resultado (ok, subtotal, delivery_fee, total, item_count)
        """
        try:
            origin = parse_origin(data.get('origin'))
            pickup_type = parse_enum(PickupType, data.get('pickup_type'), PickupType.IMMEDIATE)
            items = self.build_line_items(data.get('items'), origin)
            neighborhood = None
            if pickup_type == PickupType.DELIVERY:
                raw = data.get('delivery') or {}
                if not isinstance(raw, dict):
                    raise ValidationError('Datos de entrega inválidos')
                neighborhood_id = raw.get('neighborhood_id')
                neighborhood = self.settings_service.get_neighborhood(neighborhood_id) if neighborhood_id else None
        except PosError as e:
            return failure(e)
        breakdown = pricing_service.price_breakdown(items, pickup_type, neighborhood)
        breakdown['ok'] = True
        return breakdown

    # =========================================================================
    # CREACIÓN
    # =========================================================================

    @profile_function(name="Crear pedido")
    def create_order(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Valida y crea un pedido.

        Args:
            data: {
                origin, pickup_type, scheduled_time, customer_name, customer_phone,
                table_number, delivery: {neighborhood_id, street, number, complement, reference},
                items: [...], general_observation, payment_method, payment_status, change_for
            }

        Returns:
            Dict con resultado (ok, order, error)
        """
        try:
            order = self._build_order(data or {})
        except PosError as e:
            return failure(e)

        try:
            stored = self.order_repo.create_order(order.to_dict())
        except PosError as e:
            log_error("Error guardando pedido", e)
            return failure(e)

        created = Order.from_dict(stored)
        log_event(
            f"Pedido #{created.number} creado ({created.origin.value}, "
            f"{created.pickup_type.value}, total {created.total})"
        )
        return {'ok': True, 'order': created}

    def _build_order(self, data: Dict[str, Any]) -> Order:
        settings = self.settings_service.get_settings()

        origin = parse_origin(data.get('origin'))
        pickup_type = parse_enum(PickupType, data.get('pickup_type'))
        if pickup_type is None:
            raise ValidationError('Modalidad de entrega inválida')

        if origin == OrderOrigin.ONLINE and not settings.is_open:
            raise ValidationError('La tienda está cerrada')

        customer_name = (data.get('customer_name') or '').strip()
        if not customer_name:
            raise ValidationError('Falta el nombre del cliente')

        table_number = data.get('table_number')
        table_number = str(table_number).strip() if table_number not in (None, '') else None
        if origin == OrderOrigin.TABLE and not table_number:
            raise ValidationError('Falta el número de mesa')

        items = self.build_line_items(data.get('items'), origin)

        scheduled_time = None
        if pickup_type == PickupType.SCHEDULED:
            scheduled_time = (data.get('scheduled_time') or '').strip()
            if not is_valid_slot_format(scheduled_time):
                raise ValidationError('Horario de retiro inválido (HH:MM)')

        neighborhood = None
        delivery_info = None
        if pickup_type == PickupType.DELIVERY:
            raw = data.get('delivery') or {}
            delivery_info = DeliveryInfo.from_dict(raw) if isinstance(raw, dict) else None
            require_delivery_fields(delivery_info)
            neighborhood = settings.get_neighborhood(delivery_info.neighborhood_id)
            if neighborhood is None:
                raise ValidationError('Barrio no atendido')
            if not is_street_eligible(delivery_info.street, neighborhood,
                                      settings.is_street_validation_enabled, pickup_type):
                raise ValidationError(f"No entregamos en '{delivery_info.street}' ({neighborhood.name})")
            delivery_info.delivery_fee = pricing_service.delivery_fee(pickup_type, neighborhood)
            delivery_info.estimated_time = pricing_service.estimated_time(
                pickup_type, neighborhood, settings.prep_time)

        payment_method = None
        if data.get('payment_method'):
            payment_method = parse_enum(PaymentMethod, data.get('payment_method'))
            if payment_method is None:
                raise ValidationError('Método de pago inválido')
        payment_status = PaymentStatus.PAID if data.get('payment_status') == PaymentStatus.PAID.value \
            else PaymentStatus.PENDING

        total = pricing_service.grand_total(items, pickup_type, neighborhood)

        observation = (data.get('general_observation') or '').strip()
        change_for = data.get('change_for')
        if payment_method == PaymentMethod.CASH and change_for not in (None, ''):
            change = to_money(change_for, default=None)
            if change is None or change < total:
                raise ValidationError('El cambio debe ser mayor o igual al total')
            observation = f"{observation} | Troco para: {format_brl(change)}" if observation \
                else f"Troco para: {format_brl(change)}"

        phone = format_whatsapp_number(data.get('customer_phone')) or None

        return Order(
            id='',
            number=0,
            origin=origin,
            pickup_type=pickup_type,
            scheduled_time=scheduled_time,
            customer_name=customer_name,
            customer_phone=phone,
            table_number=table_number,
            delivery_info=delivery_info,
            items=items,
            general_observation=observation,
            internal_observation=(data.get('internal_observation') or '').strip() or None,
            status=OrderStatus.RECEIVED,
            payment_method=payment_method,
            payment_status=payment_status,
            total=total,
        )

    # =========================================================================
    # TRANSICIONES
    # =========================================================================

    def _load(self, order_id: str) -> Order:
        order = self.get_order(order_id)
        if order is None:
            raise NotFoundError('Pedido no encontrado')
        return order

    def _persist(self, description: str, write) -> Dict[str, Any]:
        """Ejecuta la escritura; el pedido devuelto es el que confirmó el repositorio."""
        try:
            record = write()
        except PosError as e:
            log_error(f"Error guardando pedido ({description})", e)
            return failure(e)
        if record is None:
            return failure(NotFoundError('Pedido no encontrado'))
        order = Order.from_dict(record)
        log_event(f"Pedido #{order.number}: {description}")
        return {'ok': True, 'order': order, 'changed': True}

    def advance(self, order_id: str) -> Dict[str, Any]:
        """
        Avanza al siguiente estado. En estados terminales no hace nada
        (ok=True, changed=False).
        """
        try:
            order = self._load(order_id)
        except PosError as e:
            return failure(e)
        next_status = order.next_status
        if next_status is None:
            return {'ok': True, 'order': order, 'changed': False}
        return self._persist(
            f"{order.status.value} → {next_status.value}",
            lambda: self.order_repo.update_order_status(order.id, next_status.value),
        )

    def cancel(self, order_id: str) -> Dict[str, Any]:
        """Cancela desde received/preparing/ready. Finalizados y cancelados se rechazan."""
        try:
            order = self._load(order_id)
            if order.status not in CANCELLABLE_STATUSES:
                raise TransitionError(f"No se puede cancelar un pedido en estado '{order.status.value}'")
        except PosError as e:
            return failure(e)
        return self._persist(
            "cancelado",
            lambda: self.order_repo.update_order_status(order.id, OrderStatus.CANCELLED.value),
        )

    def set_status(self, order_id: str, status: Any) -> Dict[str, Any]:
        """
        Movimiento explícito en el kanban. Solo se acepta el siguiente
        estado o 'cancelled'.
        """
        target = parse_enum(OrderStatus, status)
        if target is None:
            return failure(ValidationError('Estado inválido'))
        if target == OrderStatus.CANCELLED:
            return self.cancel(order_id)
        try:
            order = self._load(order_id)
            if order.next_status != target:
                raise TransitionError(
                    f"Transición no permitida: {order.status.value} → {target.value}"
                )
        except PosError as e:
            return failure(e)
        return self._persist(
            f"{order.status.value} → {target.value}",
            lambda: self.order_repo.update_order_status(order.id, target.value),
        )

    def set_payment_status(self, order_id: str, payment_status: Any,
                           payment_method: Any = None) -> Dict[str, Any]:
        """Pago independiente del estado; se permite en cualquier estado."""
        status = parse_enum(PaymentStatus, payment_status)
        if status is None:
            return failure(ValidationError('Estado de pago inválido'))
        method = None
        if payment_method:
            method = parse_enum(PaymentMethod, payment_method)
            if method is None:
                return failure(ValidationError('Método de pago inválido'))
        try:
            order = self._load(order_id)
        except PosError as e:
            return failure(e)
        return self._persist(
            f"pago {status.value}" + (f" ({method.value})" if method else ''),
            lambda: self.order_repo.update_payment_status(
                order.id, status.value, method.value if method else None),
        )

    def reschedule(self, order_id: str, new_time: str) -> Dict[str, Any]:
        """
        Cambia el horario de un pedido agendado.
        No verifica choques con otros pedidos.
        """
        new_time = (new_time or '').strip()
        if not is_valid_slot_format(new_time):
            return failure(ValidationError('Horario inválido (HH:MM)'))
        try:
            order = self._load(order_id)
            if order.pickup_type != PickupType.SCHEDULED:
                raise TransitionError('Solo se reprograman pedidos agendados')
        except PosError as e:
            return failure(e)
        return self._persist(
            f"reprogramado a {new_time}",
            lambda: self.order_repo.update_scheduled_time(order.id, new_time),
        )

    def mark_printed(self, order_id: str) -> Dict[str, Any]:
        try:
            order = self._load(order_id)
        except PosError as e:
            return failure(e)
        return self._persist("impreso", lambda: self.order_repo.mark_order_as_printed(order.id))

    # =========================================================================
    # PROPAGACIÓN DE PRECIOS
    # =========================================================================

    def propagate_product(self, product: Product) -> int:
        """
        Actualiza la copia del producto en los pedidos abiertos y recalcula
        sus totales (subtotal + su tasa de entrega guardada).
        Pedidos finalizados y cancelados no se tocan.

        Returns:
            Cantidad de pedidos actualizados

        Raises:
            PersistenceError: Si falla alguna escritura
        """
        updated = 0
        for order in self.active_orders():
            touched = False
            for item in order.items:
                if item.product.id != product.id:
                    continue
                item.product = Product.from_dict(product.to_dict())
                refreshed = []
                for extra in item.selected_extras:
                    current = product.get_extra(extra.id)
                    refreshed.append(current if current is not None else extra)
                item.selected_extras = refreshed
                touched = True
            if not touched:
                continue
            order.total = order.subtotal + order.delivery_fee
            self.order_repo.update_order(order.id, {
                'items': [item.to_dict() for item in order.items],
                'total': order.to_dict()['total'],
            })
            updated += 1
        if updated:
            log_event(f"Precio de '{product.name}' propagado a {updated} pedido(s) abierto(s)")
        return updated
