# ==============================================================================
# LANCHES POS - Punto de venta y pedidos online de una lanchonete
# ==============================================================================
# Capas:
#   models/        → entidades y dinero (Decimal)
#   repositories/  → acceso a los archivos JSON
#   services/      → reglas de negocio
#   main.py        → API HTTP (Flask)
# ==============================================================================

__version__ = '1.0.0'
