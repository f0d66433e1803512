# ==============================================================================
# SERVICIO DE CAJA - Apertura, cierre y resumen de sesión
# ==============================================================================
# La sesión actual = pedidos FINALIZADOS creados después de la última apertura
# (todos los finalizados si nunca hubo apertura).
#
# Resumen:
#   - Por método de pago: pix / cash / credit / debit (partición)
#   - Por canal: online + counter = total_sales
#   - delivery se SUPERPONE con online y counter (no suma con ellos)
# ==============================================================================

from typing import Any, Dict, Iterable, List, Optional

from lanches_pos.errors import PosError, TransitionError, ValidationError, failure
from lanches_pos.logger import log_error, log_event
from lanches_pos.models.entities import (
    CashierLog,
    CashierLogType,
    CashierSummary,
    Order,
    OrderOrigin,
    OrderStatus,
    PaymentMethod,
    PickupType,
    utcnow,
)
from lanches_pos.models.money import ZERO, format_brl, quantize, to_money
from lanches_pos.repositories.interfaces import ICashierRepository, IOrderRepository

# Bucket del resumen para cada método de pago.
# "card" (máquina sin especificar) se registra como crédito.
METHOD_BUCKETS = {
    PaymentMethod.PIX: 'pix',
    PaymentMethod.CASH: 'cash',
    PaymentMethod.CREDIT_CARD: 'credit',
    PaymentMethod.CARD: 'credit',
    PaymentMethod.DEBIT_CARD: 'debit',
}

RESPONSIBLE_LABELS = {
    'admin': 'Administrador',
    'employee': 'Funcionário',
}


def summarize(orders: Iterable[Order]) -> CashierSummary:
    """
    Agrega los pedidos de una sesión.

    Args:
        orders: Pedidos ya filtrados (finalizados de la sesión)

    Returns:
        CashierSummary con montos por método, por canal y totales
    """
    totals = {name: ZERO for name in ('pix', 'cash', 'credit', 'debit', 'delivery', 'counter', 'online')}
    total_sales = ZERO
    count = 0

    for order in orders:
        count += 1
        total_sales += order.total

        bucket = METHOD_BUCKETS.get(order.payment_method)
        if bucket:
            totals[bucket] += order.total

        if order.pickup_type == PickupType.DELIVERY:
            totals['delivery'] += order.total
        if order.origin == OrderOrigin.ONLINE:
            totals['online'] += order.total
        else:
            totals['counter'] += order.total

    return CashierSummary(
        total_orders=count,
        total_sales=quantize(total_sales),
        **{name: quantize(value) for name, value in totals.items()}
    )


class CashierService:
    """
    Servicio de caja.

    Responsabilidades:
    - Abrir y cerrar sesiones (rechaza doble apertura / cierre sin apertura)
    - Calcular el resumen de la sesión en curso
    - Generar el texto del reporte de cierre
    """

    def __init__(self, cashier_repo: ICashierRepository, order_repo: IOrderRepository,
                 settings_service):
        self.cashier_repo = cashier_repo
        self.order_repo = order_repo
        self.settings_service = settings_service

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def list_logs(self) -> List[CashierLog]:
        """Historial de caja, más nuevo primero."""
        return [CashierLog.from_dict(l) for l in self.cashier_repo.get_logs()]

    def get_log(self, log_id: str) -> Optional[CashierLog]:
        record = self.cashier_repo.get_log(log_id)
        return CashierLog.from_dict(record) if record else None

    def last_open_log(self) -> Optional[CashierLog]:
        record = self.cashier_repo.latest_log(CashierLogType.OPEN.value)
        return CashierLog.from_dict(record) if record else None

    def current_session_orders(self) -> List[Order]:
        last_open = self.last_open_log()
        orders = []
        for record in self.order_repo.get_orders():
            order = Order.from_dict(record)
            if order.status != OrderStatus.COMPLETED:
                continue
            if last_open is not None and not order.created_at > last_open.timestamp:
                continue
            orders.append(order)
        return orders

    def session_status(self) -> Dict[str, Any]:
        """
        Estado de la caja para el panel.

        Returns:
            {'is_open', 'last_open', 'summary'}
        """
        settings = self.settings_service.get_settings()
        return {
            'is_open': settings.is_cashier_open,
            'last_open': self.last_open_log(),
            'summary': summarize(self.current_session_orders()),
        }

    # =========================================================================
    # APERTURA / CIERRE
    # =========================================================================

    def open_session(self, initial_float: Any, responsible: str, note: Optional[str] = None) -> Dict[str, Any]:
        """
        Abre la caja con un fondo inicial.

        Returns:
            Dict con resultado (ok, log, error)
        """
        amount = to_money(initial_float, default=None)
        if amount is None or amount < 0:
            return failure(ValidationError('Fondo inicial inválido'))
        responsible = (responsible or '').strip()
        if not responsible:
            return failure(ValidationError('Falta el responsable'))

        try:
            with self.cashier_repo.locked():
                if self.settings_service.get_settings().is_cashier_open:
                    raise TransitionError('La caja ya está abierta')
                log = CashierLog(
                    id='',
                    type=CashierLogType.OPEN,
                    timestamp=utcnow(),
                    value=amount,
                    responsible=responsible,
                    note=(note or '').strip() or None,
                )
                stored = self._record(log, is_open=True)
        except PosError as e:
            if not isinstance(e, TransitionError):
                log_error("Error abriendo caja", e)
            return failure(e)

        log_event(f"Caja abierta por {responsible} con {format_brl(amount)}")
        return {'ok': True, 'log': CashierLog.from_dict(stored)}

    def close_session(self, responsible: str, note: Optional[str] = None) -> Dict[str, Any]:
        """
        Cierra la caja guardando el resumen de la sesión.
        El valor del registro es el total vendido en la sesión.

        Returns:
            Dict con resultado (ok, log, error)
        """
        responsible = (responsible or '').strip()
        if not responsible:
            return failure(ValidationError('Falta el responsable'))

        try:
            with self.cashier_repo.locked():
                if not self.settings_service.get_settings().is_cashier_open:
                    raise TransitionError('La caja no está abierta')
                summary = summarize(self.current_session_orders())
                log = CashierLog(
                    id='',
                    type=CashierLogType.CLOSE,
                    timestamp=utcnow(),
                    value=summary.total_sales,
                    responsible=responsible,
                    note=(note or '').strip() or None,
                    summary=summary,
                )
                stored = self._record(log, is_open=False)
        except PosError as e:
            if not isinstance(e, TransitionError):
                log_error("Error cerrando caja", e)
            return failure(e)

        log_event(
            f"Caja cerrada por {responsible}: {summary.total_orders} pedido(s), "
            f"{format_brl(summary.total_sales)}"
        )
        return {'ok': True, 'log': CashierLog.from_dict(stored)}

    def _record(self, log: CashierLog, is_open: bool) -> Dict[str, Any]:
        """
        Cambia el estado de la caja y agrega el registro al historial.
        Si el historial no se puede escribir, el estado vuelve al anterior.

        Raises:
            PersistenceError: Si falla alguna de las escrituras
        """
        self.settings_service.set_cashier_open(is_open)
        try:
            return self.cashier_repo.add_log(log.to_dict())
        except PosError:
            self.settings_service.set_cashier_open(not is_open)
            raise

    # =========================================================================
    # REPORTE
    # =========================================================================

    @staticmethod
    def render_close_report(log: CashierLog) -> str:
        """
        Texto plano del reporte de cierre para la impresora térmica.

        Raises:
            ValidationError: Si el registro no es un cierre con resumen
        """
        if log.type != CashierLogType.CLOSE or log.summary is None:
            raise ValidationError('Solo los cierres tienen reporte')
        s = log.summary
        local = log.timestamp.astimezone()
        line = '=' * 32
        sep = '-' * 32
        rows = [
            line,
            'RELATÓRIO DE FECHAMENTO',
            line,
            f"DATA: {local.strftime('%d/%m/%Y')}",
            f"HORA: {local.strftime('%H:%M:%S')}",
            f"RESP: {log.responsible}",
            sep,
            'VENDAS POR PAGAMENTO:',
            f"PIX:      {format_brl(s.pix)}",
            f"DINHEIRO: {format_brl(s.cash)}",
            f"CRÉDITO:  {format_brl(s.credit)}",
            f"DÉBITO:   {format_brl(s.debit)}",
            sep,
            'VENDAS POR ORIGEM:',
            f"SITE/WHATS: {format_brl(s.online)}",
            f"BALCÃO:     {format_brl(s.counter)}",
            f"DELIVERY:   {format_brl(s.delivery)}",
            sep,
            'RESUMO:',
            f"PEDIDOS:    {s.total_orders}",
            f"TOTAL:      {format_brl(s.total_sales)}",
            line,
        ]
        if log.note:
            rows.insert(-1, f"OBS: {log.note}")
        return '\n'.join(rows) + '\n'
