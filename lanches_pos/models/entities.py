# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio del restaurante.
# Diseñadas para ser independientes del mecanismo de persistencia.
# Los montos son Decimal y se serializan como string.
# ==============================================================================

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from lanches_pos.models.money import ZERO, money_str, money_sum, quantize, to_money


# ==============================================================================
# ENUMERACIONES - Estados y tipos válidos
# ==============================================================================

class OrderOrigin(str, Enum):
    """Canal por el que entró el pedido."""
    ONLINE = "online"      # Tienda online / WhatsApp
    COUNTER = "counter"    # Venta en mostrador cargada por el personal
    TABLE = "table"        # Autoservicio en mesa (QR)
    IFOOD = "ifood"        # Plataforma de delivery asociada


class PickupType(str, Enum):
    """Modalidad de entrega."""
    IMMEDIATE = "immediate"
    SCHEDULED = "scheduled"
    DELIVERY = "delivery"


class OrderStatus(str, Enum):
    """Estados del pedido (columnas del kanban)."""
    RECEIVED = "received"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    """Métodos de pago (auto-declarados, sin pasarela)."""
    PIX = "pix"
    CARD = "card"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    CASH = "cash"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class CashierLogType(str, Enum):
    OPEN = "open"
    CLOSE = "close"


# Tabla de transiciones del kanban: cada estado tiene un único siguiente
NEXT_STATUS = {
    OrderStatus.RECEIVED: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.COMPLETED,
}

TERMINAL_STATUSES = frozenset([OrderStatus.COMPLETED, OrderStatus.CANCELLED])
CANCELLABLE_STATUSES = frozenset([
    OrderStatus.RECEIVED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
])

STATUS_LABELS = {
    OrderStatus.RECEIVED: 'Recebido',
    OrderStatus.PREPARING: 'Em preparo',
    OrderStatus.READY: 'Pronto',
    OrderStatus.COMPLETED: 'Finalizado',
    OrderStatus.CANCELLED: 'Cancelado',
}

ORIGIN_LABELS = {
    OrderOrigin.ONLINE: 'WhatsApp',
    OrderOrigin.COUNTER: 'Balcão',
    OrderOrigin.TABLE: 'Mesa',
    OrderOrigin.IFOOD: 'iFood',
}

PAYMENT_METHOD_LABELS = {
    PaymentMethod.PIX: 'Pix',
    PaymentMethod.CASH: 'Dinheiro',
    PaymentMethod.CREDIT_CARD: 'Crédito',
    PaymentMethod.DEBIT_CARD: 'Débito',
    PaymentMethod.CARD: 'Cartão',
}

# Orígenes legacy que se guardaron con otro nombre
_ORIGIN_ALIASES = {'counter_qr': OrderOrigin.COUNTER}


# ==============================================================================
# HELPERS DE PARSEO
# ==============================================================================

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parsea un timestamp ISO (con o sin zona horaria).
    Los timestamps sin zona se asumen UTC.

    Returns:
        datetime con tzinfo o None si no se puede parsear
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value:
        try:
            dt = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_enum(enum_cls, value: Any, default=None):
    """Convierte un string a la enumeración; devuelve default si no es válido."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return default


def parse_origin(value: Any) -> OrderOrigin:
    if value in _ORIGIN_ALIASES:
        return _ORIGIN_ALIASES[value]
    return parse_enum(OrderOrigin, value, OrderOrigin.ONLINE)


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# ==============================================================================
# ENTIDADES DEL CARDÁPIO (MENÚ)
# ==============================================================================

@dataclass
class ProductExtra:
    """
    Adicional opcional de un producto (ej: Bacon, Ovo).

    Attributes:
        id: Identificador del adicional
        name: Nombre visible
        price: Precio que se suma al producto
        is_active: Si se ofrece actualmente
    """
    id: str
    name: str
    price: Decimal = ZERO
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'price': money_str(self.price),
            'is_active': self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProductExtra':
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            price=to_money(data.get('price')),
            is_active=bool(data.get('is_active', True)),
        )


@dataclass
class Product:
    """
    Producto del cardápio.

    Attributes:
        id: Identificador único
        name: Nombre del producto
        description: Descripción para el cliente
        price: Precio unitario de venta
        cost_price: Costo (opcional, para reportes)
        is_active: Si aparece en el menú
        category_id: Categoría a la que pertenece
        image: URL de la imagen (opcional)
        extras: Adicionales ofrecidos, en orden
    """
    id: str
    name: str
    description: str = ''
    price: Decimal = ZERO
    cost_price: Optional[Decimal] = None
    is_active: bool = True
    category_id: str = ''
    image: Optional[str] = None
    extras: List[ProductExtra] = field(default_factory=list)

    @property
    def active_extras(self) -> List[ProductExtra]:
        return [e for e in self.extras if e.is_active]

    def get_extra(self, extra_id: str) -> Optional[ProductExtra]:
        """Busca un adicional por su ID."""
        for extra in self.extras:
            if extra.id == extra_id:
                return extra
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia JSON."""
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'price': money_str(self.price),
            'cost_price': money_str(self.cost_price) if self.cost_price is not None else None,
            'is_active': self.is_active,
            'category_id': self.category_id,
            'image': self.image,
            'extras': [e.to_dict() for e in self.extras],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        """Crea instancia desde diccionario."""
        cost = data.get('cost_price')
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            description=data.get('description') or '',
            price=to_money(data.get('price')),
            cost_price=to_money(cost) if cost not in (None, '') else None,
            is_active=bool(data.get('is_active', True)),
            category_id=str(data.get('category_id') or ''),
            image=data.get('image'),
            extras=[ProductExtra.from_dict(e) for e in data.get('extras') or []],
        )


@dataclass
class Category:
    """Categoría del menú. `order` define la posición en la navegación."""
    id: str
    name: str
    order: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'order': self.order}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Category':
        try:
            order = int(data.get('order', 0) or 0)
        except (TypeError, ValueError):
            order = 0
        return cls(id=str(data.get('id', '')), name=data.get('name', ''), order=order)


# ==============================================================================
# ENTIDADES DE ENTREGA
# ==============================================================================

@dataclass
class Neighborhood:
    """
    Barrio atendido por el delivery.

    Attributes:
        id: Identificador
        name: Nombre del barrio
        delivery_fee: Tasa de entrega
        estimated_distance_km: Distancia estimada desde la tienda
        allowed_streets: Calles registradas (vacío = sin restricción)
    """
    id: str
    name: str
    delivery_fee: Decimal = ZERO
    estimated_distance_km: float = 0.0
    allowed_streets: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'delivery_fee': money_str(self.delivery_fee),
            'estimated_distance_km': self.estimated_distance_km,
            'allowed_streets': list(self.allowed_streets),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Neighborhood':
        try:
            distance = float(data.get('estimated_distance_km', 0) or 0)
        except (TypeError, ValueError):
            distance = 0.0
        streets = data.get('allowed_streets') or []
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            delivery_fee=to_money(data.get('delivery_fee')),
            estimated_distance_km=distance,
            allowed_streets=[s for s in streets if isinstance(s, str)],
        )


@dataclass
class DeliveryInfo:
    """Dirección de entrega y datos calculados al crear el pedido."""
    neighborhood_id: str
    street: str
    number: str
    complement: str = ''
    reference: str = ''
    delivery_fee: Decimal = ZERO
    estimated_time: int = 0  # minutos

    def to_dict(self) -> Dict[str, Any]:
        return {
            'neighborhood_id': self.neighborhood_id,
            'street': self.street,
            'number': self.number,
            'complement': self.complement,
            'reference': self.reference,
            'delivery_fee': money_str(self.delivery_fee),
            'estimated_time': self.estimated_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeliveryInfo':
        try:
            estimated = int(data.get('estimated_time', 0) or 0)
        except (TypeError, ValueError):
            estimated = 0
        return cls(
            neighborhood_id=str(data.get('neighborhood_id') or ''),
            street=data.get('street') or '',
            number=str(data.get('number') or ''),
            complement=data.get('complement') or '',
            reference=data.get('reference') or '',
            delivery_fee=to_money(data.get('delivery_fee')),
            estimated_time=estimated,
        )


# ==============================================================================
# ENTIDADES DE PEDIDO
# ==============================================================================

@dataclass
class CartLineItem:
    """
    Línea de pedido: un producto con sus adicionales y cantidad.
    El producto es una copia (snapshot) tomada al momento del pedido.
    """
    id: str
    product: Product
    quantity: int = 1
    selected_extras: List[ProductExtra] = field(default_factory=list)
    observation: str = ''

    @property
    def unit_price(self) -> Decimal:
        """Precio del producto más sus adicionales."""
        return money_sum([self.product.price] + [e.price for e in self.selected_extras])

    @property
    def total(self) -> Decimal:
        return quantize(self.unit_price * self.quantity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'product': self.product.to_dict(),
            'quantity': self.quantity,
            'selected_extras': [e.to_dict() for e in self.selected_extras],
            'observation': self.observation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CartLineItem':
        try:
            quantity = int(data.get('quantity', 1))
        except (TypeError, ValueError):
            quantity = 1
        return cls(
            id=str(data.get('id', '')),
            product=Product.from_dict(data.get('product') or {}),
            quantity=quantity,
            selected_extras=[ProductExtra.from_dict(e) for e in data.get('selected_extras') or []],
            observation=data.get('observation') or '',
        )


@dataclass
class Order:
    """
    Pedido completo.

    Attributes:
        id: Identificador asignado por el almacenamiento
        number: Número secuencial visible (único y creciente)
        origin: Canal de entrada
        pickup_type: Modalidad de entrega
        scheduled_time: Horario "HH:MM" para retiro agendado
        customer_name: Nombre del cliente
        customer_phone: Teléfono del cliente
        table_number: Mesa (origen table)
        delivery_info: Datos de entrega (solo delivery)
        items: Líneas del pedido
        general_observation: Observación del cliente
        internal_observation: Observación interna del personal
        status: Estado en el kanban
        payment_method: Método de pago declarado
        payment_status: pending / paid
        total: Subtotal + tasa de entrega
        created_at: Momento de creación (UTC)
        is_printed: Si ya se imprimió la comanda
    """
    id: str
    number: int
    origin: OrderOrigin = OrderOrigin.ONLINE
    pickup_type: PickupType = PickupType.IMMEDIATE
    scheduled_time: Optional[str] = None
    customer_name: str = ''
    customer_phone: Optional[str] = None
    table_number: Optional[str] = None
    delivery_info: Optional[DeliveryInfo] = None
    items: List[CartLineItem] = field(default_factory=list)
    general_observation: str = ''
    internal_observation: Optional[str] = None
    status: OrderStatus = OrderStatus.RECEIVED
    payment_method: Optional[PaymentMethod] = None
    payment_status: PaymentStatus = PaymentStatus.PENDING
    total: Decimal = ZERO
    created_at: datetime = field(default_factory=utcnow)
    is_printed: bool = False

    @property
    def is_terminal(self) -> bool:
        """Completado o cancelado: ya no admite transiciones."""
        return self.status in TERMINAL_STATUSES

    @property
    def next_status(self) -> Optional[OrderStatus]:
        return NEXT_STATUS.get(self.status)

    @property
    def delivery_fee(self) -> Decimal:
        if self.pickup_type == PickupType.DELIVERY and self.delivery_info:
            return self.delivery_info.delivery_fee
        return ZERO

    @property
    def subtotal(self) -> Decimal:
        return money_sum(item.total for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia JSON."""
        return {
            'id': self.id,
            'number': self.number,
            'origin': _enum_value(self.origin),
            'pickup_type': _enum_value(self.pickup_type),
            'scheduled_time': self.scheduled_time,
            'customer_name': self.customer_name,
            'customer_phone': self.customer_phone,
            'table_number': self.table_number,
            'delivery_info': self.delivery_info.to_dict() if self.delivery_info else None,
            'items': [item.to_dict() for item in self.items],
            'general_observation': self.general_observation,
            'internal_observation': self.internal_observation,
            'status': _enum_value(self.status),
            'payment_method': _enum_value(self.payment_method),
            'payment_status': _enum_value(self.payment_status),
            'total': money_str(self.total),
            'created_at': self.created_at.isoformat(),
            'is_printed': self.is_printed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Order':
        """Crea instancia desde diccionario (formato JSON persistido)."""
        delivery = None
        if data.get('delivery_info'):
            delivery = DeliveryInfo.from_dict(data['delivery_info'])
        try:
            number = int(data.get('number', 0) or 0)
        except (TypeError, ValueError):
            number = 0
        return cls(
            id=str(data.get('id', '')),
            number=number,
            origin=parse_origin(data.get('origin')),
            pickup_type=parse_enum(PickupType, data.get('pickup_type'), PickupType.IMMEDIATE),
            scheduled_time=data.get('scheduled_time'),
            customer_name=data.get('customer_name') or '',
            customer_phone=data.get('customer_phone'),
            table_number=data.get('table_number'),
            delivery_info=delivery,
            items=[CartLineItem.from_dict(i) for i in data.get('items') or []],
            general_observation=data.get('general_observation') or '',
            internal_observation=data.get('internal_observation'),
            status=parse_enum(OrderStatus, data.get('status'), OrderStatus.RECEIVED),
            payment_method=parse_enum(PaymentMethod, data.get('payment_method')),
            payment_status=parse_enum(PaymentStatus, data.get('payment_status'), PaymentStatus.PENDING),
            total=to_money(data.get('total')),
            created_at=parse_timestamp(data.get('created_at')) or utcnow(),
            is_printed=bool(data.get('is_printed', False)),
        )


# ==============================================================================
# ENTIDADES DE CAJA
# ==============================================================================

@dataclass
class CashierSummary:
    """
    Resumen de una sesión de caja.

    Los métodos de pago (pix/cash/credit/debit) son una partición de las
    ventas con método conocido. Los canales NO: delivery se superpone con
    online y counter (online + counter == total_sales).
    """
    pix: Decimal = ZERO
    cash: Decimal = ZERO
    credit: Decimal = ZERO
    debit: Decimal = ZERO
    delivery: Decimal = ZERO
    counter: Decimal = ZERO
    online: Decimal = ZERO
    total_orders: int = 0
    total_sales: Decimal = ZERO

    _MONEY_FIELDS = ('pix', 'cash', 'credit', 'debit', 'delivery', 'counter', 'online', 'total_sales')

    def to_dict(self) -> Dict[str, Any]:
        d = {name: money_str(getattr(self, name)) for name in self._MONEY_FIELDS}
        d['total_orders'] = self.total_orders
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CashierSummary':
        kwargs = {name: to_money(data.get(name)) for name in cls._MONEY_FIELDS}
        try:
            kwargs['total_orders'] = int(data.get('total_orders', 0) or 0)
        except (TypeError, ValueError):
            kwargs['total_orders'] = 0
        return cls(**kwargs)


@dataclass
class CashierLog:
    """
    Entrada del libro de caja (solo se agregan, nunca se modifican).

    Attributes:
        id: Identificador
        type: open / close
        timestamp: Momento del evento
        value: Fondo inicial (open) o total vendido en la sesión (close)
        responsible: Quién abrió/cerró
        note: Observación opcional
        summary: Desglose de la sesión (solo close)
    """
    id: str
    type: CashierLogType
    timestamp: datetime = field(default_factory=utcnow)
    value: Decimal = ZERO
    responsible: str = ''
    note: Optional[str] = None
    summary: Optional[CashierSummary] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {
            'id': self.id,
            'type': _enum_value(self.type),
            'timestamp': self.timestamp.isoformat(),
            'value': money_str(self.value),
            'responsible': self.responsible,
            'note': self.note,
        }
        if self.summary is not None:
            d['summary'] = self.summary.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CashierLog':
        summary = data.get('summary')
        return cls(
            id=str(data.get('id', '')),
            type=parse_enum(CashierLogType, data.get('type'), CashierLogType.OPEN),
            timestamp=parse_timestamp(data.get('timestamp')) or utcnow(),
            value=to_money(data.get('value')),
            responsible=data.get('responsible') or '',
            note=data.get('note'),
            summary=CashierSummary.from_dict(summary) if summary else None,
        )


# ==============================================================================
# CONFIGURACIÓN DE LA TIENDA
# ==============================================================================

@dataclass
class OpeningHours:
    day_of_week: int   # 0 = domingo
    open_time: str     # "HH:MM"
    close_time: str

    def to_dict(self) -> Dict[str, Any]:
        return {'day_of_week': self.day_of_week, 'open_time': self.open_time, 'close_time': self.close_time}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OpeningHours':
        return cls(
            day_of_week=int(data.get('day_of_week', 0)),
            open_time=str(data.get('open_time', '')),
            close_time=str(data.get('close_time', '')),
        )


DEFAULT_STORE_NAME = 'Thita Lanches'
DEFAULT_ADMIN_PIN = '1234'


@dataclass
class StoreSettings:
    """
    Configuración global de la tienda (singleton persistido).
    Los campos inválidos en el almacenamiento caen a estos defaults.
    """
    name: str = DEFAULT_STORE_NAME
    is_open: bool = True
    is_cashier_open: bool = False
    prep_time: int = 30
    neighborhoods: List[Neighborhood] = field(default_factory=list)
    delivery_radius: float = 10.0
    opening_hours: List[OpeningHours] = field(default_factory=list)
    whatsapp_number: Optional[str] = None
    scheduling_interval: int = 15
    admin_pin: Optional[str] = DEFAULT_ADMIN_PIN
    is_street_validation_enabled: bool = False

    def get_neighborhood(self, neighborhood_id: str) -> Optional[Neighborhood]:
        for n in self.neighborhoods:
            if n.id == neighborhood_id:
                return n
        return None

    def to_dict(self, include_pin: bool = True) -> Dict[str, Any]:
        d = {
            'name': self.name,
            'is_open': self.is_open,
            'is_cashier_open': self.is_cashier_open,
            'prep_time': self.prep_time,
            'neighborhoods': [n.to_dict() for n in self.neighborhoods],
            'delivery_radius': self.delivery_radius,
            'opening_hours': [h.to_dict() for h in self.opening_hours],
            'whatsapp_number': self.whatsapp_number,
            'scheduling_interval': self.scheduling_interval,
            'is_street_validation_enabled': self.is_street_validation_enabled,
        }
        if include_pin:
            d['admin_pin'] = self.admin_pin
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any], problems: Optional[List[str]] = None) -> 'StoreSettings':
        """
        Crea la configuración tolerando datos corruptos.

        Args:
            data: Diccionario persistido (puede estar incompleto)
            problems: Si se pasa, recibe los nombres de campos que cayeron al default

        Returns:
            StoreSettings siempre válido
        """
        defaults = cls()
        problems = problems if problems is not None else []
        if not isinstance(data, dict):
            problems.append('settings')
            return defaults

        def pick(name, caster, predicate=None):
            default = getattr(defaults, name)
            if name not in data or data[name] is None:
                return default
            try:
                value = caster(data[name])
            except (TypeError, ValueError):
                problems.append(name)
                return default
            if predicate is not None and not predicate(value):
                problems.append(name)
                return default
            return value

        def as_bool(value):
            if isinstance(value, bool):
                return value
            raise TypeError(value)

        def as_list(caster):
            def inner(value):
                if not isinstance(value, list):
                    raise TypeError(value)
                return [caster(v) for v in value if isinstance(v, dict)]
            return inner

        return cls(
            name=pick('name', str, lambda v: bool(v.strip())),
            is_open=pick('is_open', as_bool),
            is_cashier_open=pick('is_cashier_open', as_bool),
            prep_time=pick('prep_time', int, lambda v: v > 0),
            neighborhoods=pick('neighborhoods', as_list(Neighborhood.from_dict)),
            delivery_radius=pick('delivery_radius', float, lambda v: v >= 0),
            opening_hours=pick('opening_hours', as_list(OpeningHours.from_dict)),
            whatsapp_number=pick('whatsapp_number', str),
            scheduling_interval=pick('scheduling_interval', int, lambda v: v > 0),
            admin_pin=pick('admin_pin', str, lambda v: bool(v)),
            is_street_validation_enabled=pick('is_street_validation_enabled', as_bool),
        )
