# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
# Contratos que deben cumplir el almacén y los repositorios. Los servicios
# dependen de estas interfaces, no de la implementación JSON, así que un
# backend distinto (SQLite, Redis...) solo necesita implementarlas.
# ==============================================================================

from contextlib import AbstractContextManager
from typing import Any, List, Optional, Protocol, runtime_checkable

from pos_ledger.models import Currency, Product, Sale


@runtime_checkable
class IKeyValueStore(Protocol):
    """Almacén clave/valor compartido por todos los repositorios."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> bool:
        ...

    def has(self, key: str) -> bool:
        ...

    def locked(self) -> AbstractContextManager:
        """Sección crítica para ciclos leer-modificar-escribir."""
        ...

    def flush(self) -> None:
        ...

    def close(self) -> None:
        ...

    @property
    def closed(self) -> bool:
        ...


@runtime_checkable
class IProductRepository(Protocol):
    """Interfaz para el repositorio del catálogo."""

    store: IKeyValueStore

    def exists(self) -> bool:
        ...

    def load(self) -> List[Product]:
        ...

    def save(self, products: List[Product]) -> None:
        ...

    def get_product(self, product_id: str) -> Optional[Product]:
        ...

    def clear(self) -> bool:
        ...


@runtime_checkable
class ISalesRepository(Protocol):
    """Interfaz para el repositorio de ventas."""

    store: IKeyValueStore

    def load(self) -> List[Sale]:
        ...

    def save(self, sales: List[Sale]) -> None:
        ...

    def create_sale(self, sale: Sale) -> str:
        ...

    def get_ids(self) -> List[str]:
        ...

    def get_by_id(self, sale_id: str) -> Optional[Sale]:
        ...

    def clear(self) -> bool:
        ...


@runtime_checkable
class ISettingsRepository(Protocol):
    """Interfaz para el repositorio de preferencias."""

    def get_currency(self) -> Optional[Currency]:
        ...

    def set_currency(self, currency: Currency) -> None:
        ...
