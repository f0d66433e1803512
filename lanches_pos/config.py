# ==============================================================================
# CONFIGURACIÓN DEL PROCESO - Variables de entorno
# ==============================================================================
# Solo parámetros de infraestructura (rutas, puerto, claves).
# La configuración del negocio (horarios, barrios, PIN) vive en StoreSettings.
#
#   POS_DATA_DIR          → Carpeta de los archivos JSON
#   POS_LOG_DIR           → Carpeta de logs
#   POS_SECRET_KEY        → Clave de sesión de Flask
#   POS_PRODUCTION_MODE   → 1 = producción
#   POS_ENABLE_PROFILING  → 0 = desactiva el profiling de rutas
#   POS_SEED_DEMO         → 1 = carga el cardápio de ejemplo al crear el almacenamiento
#   POS_HOST / POS_PORT   → Dirección del servidor de desarrollo
# ==============================================================================

import os

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def env_flag(name: str, default: bool = False) -> bool:
    """Lee una variable de entorno booleana ('1', 'true', 'yes', 'on')."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


DATA_DIR = os.environ.get('POS_DATA_DIR') or os.path.join(PACKAGE_DIR, 'data')
LOG_DIR = os.environ.get('POS_LOG_DIR') or os.path.join(PACKAGE_DIR, 'logs')

PRODUCTION_MODE = env_flag('POS_PRODUCTION_MODE')
ENABLE_PROFILING = env_flag('POS_ENABLE_PROFILING', True)
SEED_DEMO = env_flag('POS_SEED_DEMO')

HOST = os.environ.get('POS_HOST', '0.0.0.0')
try:
    PORT = int(os.environ.get('POS_PORT', 5000))
except ValueError:
    PORT = 5000

_DEFAULT_SECRET = 'lanches_pos_dev_secret_key_change_in_production'
SECRET_KEY = os.environ.get('POS_SECRET_KEY') or _DEFAULT_SECRET
SECRET_KEY_FROM_ENV = bool(os.environ.get('POS_SECRET_KEY'))

# Sesión del personal (PIN): 12 horas, un turno
SESSION_LIFETIME = 12 * 60 * 60
