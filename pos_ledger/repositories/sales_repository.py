# ==============================================================================
# REPOSITORIO DE VENTAS
# ==============================================================================
# Encapsula el acceso al registro pos_sales.
# Las ventas se almacenan como lista: [{venta1}, {venta2}, ...]
# Solo se agregan al final, por lo que el orden es cronológico.
# ==============================================================================

from typing import List, Optional

from pos_ledger.errors import PersistenceError
from pos_ledger.models import Sale
from pos_ledger.repositories.base import ListRepository


class SalesRepository(ListRepository):
    """
    Repositorio del historial de ventas.

    Formato de datos en pos_sales:
    [
        {
            "id": "1718000000000",
            "items": [{"productId": "1", "productName": "Pen",
                       "quantity": 3, "price": 1.5}],
            "total": 4.5,
            "timestamp": "2024-06-10T06:13:20+00:00"
        }
    ]
    """

    KEY = 'pos_sales'

    def load(self) -> List[Sale]:
        """
        Carga todas las ventas con el timestamp como datetime.

        Raises:
            PersistenceError: Si algún registro está corrupto
        """
        sales = []
        for raw in self.get_all():
            try:
                sales.append(Sale.from_dict(raw))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise PersistenceError(f"Venta corrupta en '{self.KEY}': {e}") from e
        return sales

    def save(self, sales: List[Sale]) -> None:
        self.save_all([s.to_dict() for s in sales])

    def create_sale(self, sale: Sale) -> str:
        """
        Agrega una venta al final del historial.

        Returns:
            Id de la venta
        """
        self.append(sale.to_dict())
        return sale.id

    def get_by_id(self, sale_id: str) -> Optional[Sale]:
        for sale in self.load():
            if sale.id == sale_id:
                return sale
        return None

    def get_ids(self) -> List[str]:
        return [str(raw.get('id')) for raw in self.get_all() if isinstance(raw, dict)]
