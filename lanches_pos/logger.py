# ==============================================================================
# LOGGING Y PROFILING
# ==============================================================================
# - setup_logging(): archivo diario + consola, formato común
# - log_event / log_warning / log_error / log_debug: helpers de una línea
# - init_profiling(app): mide cada request de Flask
# - profile_function: decorador para funciones críticas (estadísticas en memoria)
#
# Umbrales: WARNING > 300 ms, CRITICAL > 700 ms
# ==============================================================================

import logging
import os
import threading
import time
from collections import defaultdict
from datetime import datetime
from functools import wraps

from lanches_pos import config

LOGGER_NAME = 'lanches_pos'
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'

THRESHOLD_WARNING = 300   # ms
THRESHOLD_CRITICAL = 700  # ms

logger = logging.getLogger(LOGGER_NAME)

_setup_lock = threading.Lock()
_configured = False


# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════

def setup_logging(log_dir: str = None, level: int = logging.INFO) -> str:
    """
    Configura el logger de la aplicación (una sola vez por proceso).

    Args:
        log_dir: Carpeta de logs (default: config.LOG_DIR)
        level: Nivel mínimo

    Returns:
        Ruta del archivo de log del día
    """
    global _configured
    log_dir = log_dir or config.LOG_DIR
    log_path = os.path.join(log_dir, f'lanches_pos_{datetime.now().strftime("%Y%m%d")}.log')

    with _setup_lock:
        if _configured:
            return log_path
        os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, '%Y-%m-%d %H:%M:%S'))

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, '%H:%M:%S'))

        logger.setLevel(level)
        logger.addHandler(file_handler)
        logger.addHandler(console_handler)
        _configured = True

    logger.info("=" * 60)
    logger.info("LANCHES POS - SISTEMA INICIADO")
    logger.info(f"Archivo de log: {log_path}")
    logger.info("=" * 60)
    return log_path


def log_event(msg: str):
    """Registra evento informativo"""
    logger.info(msg)


def log_warning(msg: str):
    logger.warning(msg)


def log_error(msg: str, exc: Exception = None):
    """Registra error con traceback opcional"""
    if exc:
        logger.error(f"{msg}: {exc}", exc_info=exc)
    else:
        logger.error(msg)


def log_debug(msg: str):
    logger.debug(msg)


# ═══════════════════════════════════════════════════════════════════════════
# PROFILING DE RUTAS (hooks de Flask)
# ═══════════════════════════════════════════════════════════════════════════

def init_profiling(app, enabled: bool = None):
    """
    Registra hooks before_request / after_request que miden cada petición.

    Uso:
        init_profiling(app)
    """
    if enabled is None:
        enabled = config.ENABLE_PROFILING
    if not enabled:
        return

    @app.before_request
    def _start_timer():
        from flask import g
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        from flask import g, request, session

        if not hasattr(g, 'start_time'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000
        role = session.get('role') or 'público'
        detail = f"{request.method} {request.path} → {response.status_code} ({elapsed:.0f} ms, {role})"

        if elapsed >= THRESHOLD_CRITICAL:
            logger.critical(f"Ruta MUY LENTA: {detail}")
        elif elapsed >= THRESHOLD_WARNING:
            logger.warning(f"Ruta lenta: {detail}")
        else:
            logger.debug(detail)
        return response


# ═══════════════════════════════════════════════════════════════════════════
# DECORADOR PARA FUNCIONES CLAVE
# ═══════════════════════════════════════════════════════════════════════════

# {nombre_funcion: {calls, total_time, max_time}}
_function_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0})
_stats_lock = threading.Lock()


def profile_function(func=None, name=None):
    """
    Decorador para medir funciones críticas.

    Uso:
        @profile_function
        def mi_funcion():
            ...

        @profile_function(name="Crear pedido")
        def create_order():
            ...
    """
    def decorator(fn):
        func_name = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000
                with _stats_lock:
                    stats = _function_stats[func_name]
                    stats['calls'] += 1
                    stats['total_time'] += elapsed_ms
                    if elapsed_ms > stats['max_time']:
                        stats['max_time'] = elapsed_ms

                if elapsed_ms >= THRESHOLD_CRITICAL:
                    logger.critical(f"Función CRÍTICA: {func_name} ({elapsed_ms:.0f} ms)")
                elif elapsed_ms >= THRESHOLD_WARNING:
                    logger.warning(f"Función lenta: {func_name} ({elapsed_ms:.0f} ms)")

        return wrapper

    # Permitir uso sin paréntesis: @profile_function
    if func is not None:
        return decorator(func)
    return decorator


def get_function_stats():
    """
    Obtiene estadísticas de las funciones perfiladas.

    Returns:
        dict: {nombre: {calls, avg_time, max_time}}
    """
    with _stats_lock:
        result = {}
        for func_name, stats in _function_stats.items():
            calls = stats['calls']
            avg = stats['total_time'] / calls if calls > 0 else 0
            result[func_name] = {
                'calls': calls,
                'avg_time': round(avg, 2),
                'max_time': round(stats['max_time'], 2),
            }
        return result
