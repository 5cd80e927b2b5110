# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Entidades del dominio como dataclasses, independientes del mecanismo
# de persistencia.
# ==============================================================================

from .entities import (
    # Productos
    Category,
    Product,

    # Ventas
    Sale,
    SaleItem,

    # Preferencias / autenticación
    Currency,
    AuthUser,

    # Utilidades de fechas
    parse_timestamp,
    format_timestamp,
)

__all__ = [
    'Category',
    'Product',
    'Sale',
    'SaleItem',
    'Currency',
    'AuthUser',
    'parse_timestamp',
    'format_timestamp',
]
