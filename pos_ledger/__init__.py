# ==============================================================================
# pos_ledger - Inventario y ventas para un punto de venta
# ==============================================================================
# Punto de entrada de la aplicación: pos_ledger.main.create_app()
# ==============================================================================

__version__ = '1.0.0'
