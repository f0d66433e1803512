# ==============================================================================
# VALIDACIÓN DE ENTREGA
# ==============================================================================
# Decide si una calle está dentro del área atendida por el delivery.
# Es un filtro de conveniencia, NO una garantía: la comparación es por
# subcadena en ambos sentidos y sin normalizar acentos.
# ==============================================================================

from typing import List, Optional

from lanches_pos.errors import ValidationError
from lanches_pos.models.entities import DeliveryInfo, Neighborhood, PickupType

# Con menos caracteres la búsqueda por subcadena no discrimina nada
MIN_STREET_LENGTH = 3


def is_street_eligible(street: str, neighborhood: Optional[Neighborhood],
                       validation_enabled: bool, pickup_type: PickupType) -> bool:
    """
    Verifica si la calle es atendida.

    Args:
        street: Calle escrita por el cliente
        neighborhood: Barrio elegido (None si todavía no eligió)
        validation_enabled: Flag de la tienda
        pickup_type: Modalidad del pedido

    Returns:
        True si la calle se acepta
    """
    if not validation_enabled:
        return True
    if pickup_type != PickupType.DELIVERY:
        return True
    if neighborhood is None:
        return True

    typed = (street or '').strip().lower()
    if len(typed) < MIN_STREET_LENGTH:
        return True

    allowed = [s.strip().lower() for s in neighborhood.allowed_streets if s and s.strip()]
    if not allowed:
        return True

    return any(typed in candidate or candidate in typed for candidate in allowed)


def validate_delivery_fields(info: Optional[DeliveryInfo]) -> List[str]:
    """
    Campos obligatorios de la dirección.

    Returns:
        Lista de errores (vacía si está completa)
    """
    if info is None:
        return ['Falta la dirección de entrega']
    errors = []
    if not info.neighborhood_id:
        errors.append('Selecciona el barrio')
    if not info.street.strip():
        errors.append('Falta la calle')
    if not str(info.number).strip():
        errors.append('Falta el número')
    return errors


def require_delivery_fields(info: Optional[DeliveryInfo]) -> None:
    """
    Raises:
        ValidationError: Con todos los campos faltantes
    """
    errors = validate_delivery_fields(info)
    if errors:
        raise ValidationError('; '.join(errors))
