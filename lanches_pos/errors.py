# ==============================================================================
# EXCEPCIONES DEL DOMINIO
# ==============================================================================
# Taxonomía de errores del sistema:
#   - ValidationError  → datos inválidos, se rechaza antes de crear/modificar
#   - PersistenceError → falla al leer/escribir en el almacenamiento
#   - IntegrityError   → operación que rompería una referencia (ej: categoría en uso)
#
# Ningún error es fatal: los servicios los traducen a {'ok': False, 'error': ...}
# ==============================================================================


class PosError(Exception):
    """Error base de la aplicación."""

    http_status = 400

    def __init__(self, message: str = ''):
        super().__init__(message)
        self.message = message


class ValidationError(PosError):
    """Entrada inválida (cantidad, campos de entrega, calle no atendida, etc.)."""
    http_status = 400


class NotFoundError(PosError):
    """Registro inexistente."""
    http_status = 404


class IntegrityError(PosError):
    """La operación dejaría referencias rotas; no se aplica ningún cambio."""
    http_status = 409


class TransitionError(PosError):
    """Transición de estado no permitida por la máquina de estados del pedido."""
    http_status = 409


class PersistenceError(PosError):
    """Falla del almacenamiento. El estado en memoria NO se modifica."""
    http_status = 503


def failure(exc: PosError) -> dict:
    """Resultado de error estándar de los servicios (code = estado HTTP sugerido)."""
    return {'ok': False, 'error': exc.message, 'code': exc.http_status}
