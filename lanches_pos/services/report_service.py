# ==============================================================================
# SERVICIO DE REPORTES
# ==============================================================================
# - dashboard_stats: contadores del panel (pedidos activos, pendientes, etc.)
# - sales_overview: ventas FINALIZADAS por canal y por método de pago
# - product_sales_report: salida de productos y adicionales por período
#
# REGLA: los reportes de ventas cuentan SOLO pedidos finalizados (completed).
# ==============================================================================

import csv
import io
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from lanches_pos.errors import ValidationError
from lanches_pos.models.entities import Category, Order, OrderOrigin, OrderStatus, PaymentMethod
from lanches_pos.models.money import ZERO, money_str, quantize

PERIODS = ('today', 'week', 'month', 'all')

CARD_METHODS = frozenset([PaymentMethod.CARD, PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD])


def _brl_number(value) -> str:
    """Número con coma decimal para planillas en pt-BR ("45,80")."""
    return money_str(value).replace('.', ',')


class ReportService:
    """
    Servicio de reportes (solo lectura).

    Recibe el repositorio de pedidos y el de cardápio; no modifica nada.
    """

    def __init__(self, order_repo, catalog_repo):
        self.order_repo = order_repo
        self.catalog_repo = catalog_repo

    def _orders(self) -> List[Order]:
        return [Order.from_dict(o) for o in self.order_repo.get_orders()]

    def _completed(self) -> List[Order]:
        return [o for o in self._orders() if o.status == OrderStatus.COMPLETED]

    # =========================================================================
    # PANEL
    # =========================================================================

    def dashboard_stats(self) -> Dict[str, Any]:
        """
        Returns:
            {'active', 'pending', 'completed', 'revenue'}
            revenue = suma de todos los pedidos NO cancelados
        """
        orders = self._orders()
        revenue = sum((o.total for o in orders if o.status != OrderStatus.CANCELLED), ZERO)
        return {
            'active': sum(1 for o in orders if not o.is_terminal),
            'pending': sum(1 for o in orders if o.status == OrderStatus.RECEIVED),
            'completed': sum(1 for o in orders if o.status == OrderStatus.COMPLETED),
            'revenue': money_str(revenue),
        }

    def sales_overview(self) -> Dict[str, Any]:
        """
        Ventas finalizadas por canal (web/mostrador) y por método.
        Los pedidos sin método se cuentan como dinero.
        """
        completed = self._completed()
        web = sum((o.total for o in completed if o.origin == OrderOrigin.ONLINE), ZERO)
        counter = sum((o.total for o in completed if o.origin != OrderOrigin.ONLINE), ZERO)

        by_method = {method.value: ZERO for method in PaymentMethod}
        for order in completed:
            method = order.payment_method or PaymentMethod.CASH
            by_method[method.value] += order.total
        cards = sum((by_method[m.value] for m in CARD_METHODS), ZERO)

        return {
            'total_sales': money_str(web + counter),
            'total_orders': len(completed),
            'web_sales': money_str(web),
            'web_orders': sum(1 for o in completed if o.origin == OrderOrigin.ONLINE),
            'counter_sales': money_str(counter),
            'counter_orders': sum(1 for o in completed if o.origin != OrderOrigin.ONLINE),
            'by_method': {k: money_str(v) for k, v in by_method.items()},
            'cards_total': money_str(cards),
        }

    # =========================================================================
    # SALIDA DE PRODUCTOS
    # =========================================================================

    @staticmethod
    def _in_period(order: Order, period: str, now: datetime) -> bool:
        created = order.created_at.astimezone(now.tzinfo)
        if period == 'today':
            return created.date() == now.date()
        if period == 'week':
            return created >= now - timedelta(days=7)
        if period == 'month':
            return created.year == now.year and created.month == now.month
        return True

    def product_sales_report(self, period: str = 'today', search: str = '',
                             now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Cantidad vendida y facturación de cada producto y adicional.

        Args:
            period: 'today', 'week' (últimos 7 días), 'month' (mes calendario) o 'all'
            search: Filtro por nombre de producto (sin distinguir mayúsculas)
            now: Momento de referencia (default: ahora, hora local)

        Returns:
            {'period', 'orders', 'products': [...], 'extras': [...], 'total_items', 'total_revenue'}
            Productos: base = precio × cantidad (sin adicionales)

        Raises:
            ValidationError: Período desconocido
        """
        if period not in PERIODS:
            raise ValidationError(f"Período inválido: {period}")
        now = now or datetime.now()
        if now.tzinfo is None:
            # Hora local del servidor
            now = now.astimezone()
        term = (search or '').strip().lower()

        categories = {c.id: c.name for c in (Category.from_dict(r) for r in self.catalog_repo.get_categories())}
        orders = [o for o in self._completed() if self._in_period(o, period, now)]

        products: Dict[str, Dict[str, Any]] = OrderedDict()
        extras: Dict[str, Dict[str, Any]] = OrderedDict()
        for order in orders:
            for item in order.items:
                product = item.product
                if term and term not in product.name.lower():
                    continue
                entry = products.setdefault(product.id, {
                    'id': product.id,
                    'name': product.name,
                    'category': categories.get(product.category_id, 'Sem categoria'),
                    'qty': 0,
                    'total': ZERO,
                })
                entry['qty'] += item.quantity
                entry['total'] += product.price * item.quantity

                for extra in item.selected_extras:
                    e_entry = extras.setdefault(extra.name, {'name': extra.name, 'qty': 0, 'total': ZERO})
                    e_entry['qty'] += item.quantity
                    e_entry['total'] += extra.price * item.quantity

        product_list = sorted(products.values(), key=lambda p: p['qty'], reverse=True)
        extra_list = sorted(extras.values(), key=lambda e: e['qty'], reverse=True)
        for entry in product_list + extra_list:
            entry['total'] = quantize(entry['total'])

        return {
            'period': period,
            'orders': len(orders),
            'products': product_list,
            'extras': extra_list,
            'total_items': sum(p['qty'] for p in product_list),
            'total_revenue': quantize(sum((p['total'] for p in product_list), ZERO)),
        }

    def export_product_report_csv(self, period: str = 'today', search: str = '',
                                  now: Optional[datetime] = None) -> str:
        """
        Reporte de salida en CSV (separador ';', coma decimal, BOM UTF-8
        para que Excel lo abra con acentos).
        """
        report = self.product_sales_report(period, search, now)
        si = io.StringIO()
        writer = csv.writer(si, delimiter=';', lineterminator='\n')
        writer.writerow(['Produto', 'Categoria', 'Quantidade Saida', 'Total Bruto (R$)'])
        for p in report['products']:
            writer.writerow([p['name'], p['category'], p['qty'], _brl_number(p['total'])])
        writer.writerow([])
        writer.writerow(['ADICIONAIS MAIS PEDIDOS'])
        writer.writerow(['Adicional', 'Quantidade', 'Total (R$)'])
        for e in report['extras']:
            writer.writerow([e['name'], e['qty'], _brl_number(e['total'])])
        return '\ufeff' + si.getvalue()
