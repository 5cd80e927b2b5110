# ==============================================================================
# LOGGING Y MEDICIÓN DE RENDIMIENTO
# ==============================================================================
# Configura el logging estándar del paquete y mide el tiempo de cada
# request. Las rutas lentas se registran con nombre legible.
#
# UMBRALES: SLOW_REQUEST_MS en la configuración (advertencia), el doble
# se registra como crítico.
# ==============================================================================

import logging
import os
import time
from logging.handlers import RotatingFileHandler
from typing import Optional

from flask import Flask, g, request

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

LOG_FILENAME = 'pos_ledger.log'

# Mapeo de rutas a nombres legibles (para logs más humanos)
ROUTE_NAMES = {
    'GET /api/products': 'Listar productos',
    'POST /api/products': 'Crear producto',
    'PUT /api/products/<product_id>': 'Editar producto',
    'DELETE /api/products/<product_id>': 'Eliminar producto',
    'GET /api/sales': 'Ver ventas',
    'POST /api/sales': 'Registrar venta',
    'POST /api/cart/checkout': 'Confirmar venta',
    'GET /api/reports': 'Ver reportes',
    'GET /api/dashboard': 'Ver panel principal',
    'GET /api/sales/export': 'Exportar ventas CSV',
    'POST /api/data/import': 'Importar datos',
    'POST /api/data/clear': 'Borrar todos los datos',
}

logger = logging.getLogger('pos_ledger')


def configure_logging(level: str = 'INFO', log_dir: Optional[str] = None) -> logging.Logger:
    """
    Configura el logger raíz del paquete.

    Args:
        level: Nivel mínimo (DEBUG, INFO, WARNING...)
        log_dir: Directorio para el archivo rotativo; None = solo consola

    Returns:
        Logger 'pos_ledger'
    """
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, RotatingFileHandler)
               for h in logger.handlers):
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        logger.addHandler(stream)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        path = os.path.join(log_dir, LOG_FILENAME)
        already = any(isinstance(h, RotatingFileHandler) and h.baseFilename == os.path.abspath(path)
                      for h in logger.handlers)
        if not already:
            file_handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=5, encoding='utf-8')
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def _get_route_name(method: str, rule: Optional[str], path: str) -> str:
    """Nombre legible de la ruta, o la ruta cruda si no está mapeada."""
    if rule:
        name = ROUTE_NAMES.get(f"{method} {rule}")
        if name:
            return name
    return ROUTE_NAMES.get(f"{method} {path}", f"{method} {path}")


def init_request_timing(app: Flask) -> None:
    """Registra hooks before/after_request que miden cada request."""
    threshold_ms = app.config.get('SLOW_REQUEST_MS', 300)
    request_logger = logging.getLogger('pos_ledger.requests')

    @app.before_request
    def _start_timer():
        g._request_started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        started = g.pop('_request_started', None)
        if started is None:
            return response
        elapsed_ms = (time.perf_counter() - started) * 1000
        rule = request.url_rule.rule if request.url_rule else None
        name = _get_route_name(request.method, rule, request.path)
        if elapsed_ms >= threshold_ms * 2:
            request_logger.error("CRÍTICO %s tardó %.0f ms (%s)", name, elapsed_ms, response.status_code)
        elif elapsed_ms >= threshold_ms:
            request_logger.warning("LENTO %s tardó %.0f ms (%s)", name, elapsed_ms, response.status_code)
        else:
            request_logger.debug("%s %.0f ms (%s)", name, elapsed_ms, response.status_code)
        return response
