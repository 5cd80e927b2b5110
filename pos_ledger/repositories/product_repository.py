# ==============================================================================
# REPOSITORIO DE PRODUCTOS
# ==============================================================================
# Encapsula el acceso al registro pos_products.
# El catálogo se almacena como lista en orden de inserción.
# ==============================================================================

from typing import List, Optional

from pos_ledger.errors import PersistenceError
from pos_ledger.models import Product
from pos_ledger.repositories.base import ListRepository


class ProductRepository(ListRepository):
    """
    Repositorio del catálogo de productos.

    Formato de datos en pos_products:
    [
        {"id": "1", "name": "Pen", "price": 1.5, "buyingPrice": 0.8,
         "sellingPrice": 1.5, "stock": 50, "category": "stationaries"},
        ...
    ]
    """

    KEY = 'pos_products'

    def load(self) -> List[Product]:
        """
        Carga el catálogo completo.

        Raises:
            PersistenceError: Si algún registro está corrupto
        """
        products = []
        for raw in self.get_all():
            try:
                products.append(Product.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                raise PersistenceError(f"Producto corrupto en '{self.KEY}': {raw!r} ({e})") from e
        return products

    def save(self, products: List[Product]) -> None:
        """Guarda el catálogo completo."""
        self.save_all([p.to_dict() for p in products])

    def get_product(self, product_id: str) -> Optional[Product]:
        for product in self.load():
            if product.id == product_id:
                return product
        return None
