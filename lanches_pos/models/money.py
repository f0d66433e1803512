# ==============================================================================
# HELPERS MONETARIOS - Aritmética decimal para valores en R$
# ==============================================================================
# NUNCA usar float para dinero. Todos los montos se representan como Decimal
# cuantizado a 2 decimales y se persisten como string ("45.80").
# ==============================================================================

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import Any, Iterable

CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def quantize(value: Decimal) -> Decimal:
    """Redondea a centavos con redondeo bancario."""
    return value.quantize(CENT, rounding=ROUND_HALF_EVEN)


def to_money(value: Any, default: Decimal = ZERO) -> Decimal:
    """
    Convierte cualquier valor persistido (str, int, float, Decimal) a Decimal.

    Los float se pasan por str() para no arrastrar el error binario
    (18.9 → Decimal('18.90') y no Decimal('18.899999...')).

    Args:
        value: Valor a convertir
        default: Valor si no se puede interpretar

    Returns:
        Decimal cuantizado a 2 decimales
    """
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return default
    try:
        if isinstance(value, str):
            value = value.strip().replace('R$', '').strip()
            # Formato brasileño: "18,90" y "1.234,56"
            if ',' in value:
                value = value.replace('.', '').replace(',', '.')
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
        if not amount.is_finite():
            return default
        return quantize(amount)
    except (InvalidOperation, ValueError, TypeError):
        return default


def money_str(value: Decimal) -> str:
    """Serializa un monto para JSON ("45.80")."""
    return str(quantize(value))


def money_sum(values: Iterable[Decimal]) -> Decimal:
    # Empieza en ZERO para que el resultado siempre sea Decimal
    return quantize(sum(values, ZERO))


def format_brl(value: Decimal) -> str:
    """Formato de moneda brasileño: R$ 1.234,56"""
    q = quantize(value)
    sign = '-' if q < 0 else ''
    integer, _, cents = f"{abs(q):.2f}".partition('.')
    groups = []
    while len(integer) > 3:
        groups.insert(0, integer[-3:])
        integer = integer[:-3]
    groups.insert(0, integer)
    return f"{sign}R$ {'.'.join(groups)},{cents}"
