# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Las rutas (controllers) solo llaman a servicios
# 3. Los servicios NO conocen el tipo de almacenamiento
#
# ESTRUCTURA:
# ├── product_service.py   → ProductStore + validación de productos
# ├── sales_service.py     → SaleLedger (registro de ventas, descuento de stock)
# ├── report_service.py    → ReportAggregator (reportes y panel)
# ├── cart_service.py      → Carrito de compras (sesión)
# ├── currency_service.py  → Preferencia de moneda
# ├── auth_service.py      → Proveedor de identidad (enlace mágico)
# └── data_service.py      → Exportar / importar / borrar datos
# ==============================================================================

from pos_ledger.services.product_service import ProductStore, validate_product_data
from pos_ledger.services.sales_service import SaleLedger
from pos_ledger.services.report_service import ReportAggregator
from pos_ledger.services.cart_service import CartService
from pos_ledger.services.currency_service import CurrencyService, CURRENCIES
from pos_ledger.services.auth_service import IdentityProvider, MagicLinkAuthService
from pos_ledger.services.data_service import DataService

__all__ = [
    'ProductStore',
    'validate_product_data',
    'SaleLedger',
    'ReportAggregator',
    'CartService',
    'CurrencyService',
    'CURRENCIES',
    'IdentityProvider',
    'MagicLinkAuthService',
    'DataService',
]
