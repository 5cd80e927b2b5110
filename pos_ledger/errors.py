# ==============================================================================
# EXCEPCIONES DEL DOMINIO
# ==============================================================================
# Taxonomía mínima de errores del ledger de inventario y ventas.
# ==============================================================================

from typing import Dict, Optional


class LedgerError(Exception):
    """Clase base para todos los errores del ledger."""


class ValidationError(LedgerError):
    """
    Datos de entrada inválidos (campos requeridos, rangos).

    La validación es responsabilidad del llamador: los stores confían
    en lo que reciben y nunca lanzan este error.
    """

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or {}


class PersistenceError(LedgerError):
    """Fallo de lectura/escritura del almacenamiento o datos corruptos."""


class NotFound(LedgerError):
    """Registro inexistente. update/remove lo tratan como no-op."""
