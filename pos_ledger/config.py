# ==============================================================================
# CONFIGURACIÓN
# ==============================================================================
# Toda la configuración se lee de variables de entorno (POS_*).
# create_app() acepta un diccionario que sobrescribe estos valores,
# útil para testing.
#
# Ejemplo:
#   export POS_DATA_DIR=/var/lib/pos
#   export POS_SECRET_KEY="clave_larga_y_aleatoria"
# ==============================================================================

import os
from typing import Any, Dict, Mapping, Optional

_DEFAULT_SECRET = "pos_ledger_dev_secret_key_change_me"

_TRUE_VALUES = frozenset(['1', 'true', 'yes', 'on'])


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


def load_config(overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Construye el diccionario de configuración de la aplicación.

    Args:
        overrides: Valores que reemplazan a los del entorno

    Returns:
        Diccionario listo para app.config.update()
    """
    config = {
        'SECRET_KEY': os.environ.get('POS_SECRET_KEY') or _DEFAULT_SECRET,
        'DATA_DIR': os.environ.get('POS_DATA_DIR') or os.path.join(os.getcwd(), 'data'),
        'LOG_DIR': os.environ.get('POS_LOG_DIR') or None,
        'LOG_LEVEL': (os.environ.get('POS_LOG_LEVEL') or 'INFO').upper(),
        'SLOW_REQUEST_MS': _env_int('POS_SLOW_REQUEST_MS', 300),
        'TIMEZONE': os.environ.get('POS_TIMEZONE') or 'UTC',
        'LOW_STOCK_THRESHOLD': _env_int('POS_LOW_STOCK_THRESHOLD', 5),
        'SEED_CATALOG': _env_bool('POS_SEED_CATALOG', True),
        'MAGIC_LINK_MAX_AGE': _env_int('POS_MAGIC_LINK_MAX_AGE', 900),
        'HOST': os.environ.get('FLASK_HOST') or '127.0.0.1',
        'PORT': _env_int('FLASK_PORT', 5000),
        'DEBUG': _env_bool('FLASK_DEBUG', False),
        # Cookies de sesión (el carrito vive en la sesión)
        'SESSION_COOKIE_HTTPONLY': True,
        'SESSION_COOKIE_SAMESITE': 'Lax',
    }
    if overrides:
        config.update(overrides)
    return config


def uses_default_secret(config: Mapping[str, Any]) -> bool:
    """Indica si la app corre con la clave de desarrollo."""
    return config.get('SECRET_KEY') == _DEFAULT_SECRET
