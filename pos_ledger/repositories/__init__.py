# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula todo el acceso a la persistencia (archivos JSON).
#
# ESTRUCTURA:
# ├── interfaces.py           → Protocolos (contratos)
# ├── base.py                 → JSONStore, IdGenerator, ListRepository
# ├── product_repository.py   → Registro pos_products
# ├── sales_repository.py     → Registro pos_sales
# └── settings_repository.py  → Registro pos_currency
# ==============================================================================

from pos_ledger.repositories.interfaces import (
    IKeyValueStore,
    IProductRepository,
    ISalesRepository,
    ISettingsRepository,
)

from pos_ledger.repositories.base import JSONStore, IdGenerator, ListRepository
from pos_ledger.repositories.product_repository import ProductRepository
from pos_ledger.repositories.sales_repository import SalesRepository
from pos_ledger.repositories.settings_repository import SettingsRepository

__all__ = [
    # Interfaces
    'IKeyValueStore',
    'IProductRepository',
    'ISalesRepository',
    'ISettingsRepository',

    # Base
    'JSONStore',
    'IdGenerator',
    'ListRepository',

    # Implementaciones JSON
    'ProductRepository',
    'SalesRepository',
    'SettingsRepository',
]
