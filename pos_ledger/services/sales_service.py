# ==============================================================================
# SERVICIO DE VENTAS (SaleLedger)
# ==============================================================================
# Registro append-only de ventas completadas. Registrar una venta descuenta
# el stock de los productos vendidos.
#
# CONCURRENCIA:
# record() ejecuta su ciclo leer-modificar-escribir (catálogo + ventas)
# dentro de store.locked(), así que dos llamadas simultáneas se serializan
# en lugar de pisarse el stock.
# ==============================================================================

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from pos_ledger.errors import PersistenceError
from pos_ledger.models import Sale, SaleItem, parse_timestamp
from pos_ledger.repositories.base import IdGenerator
from pos_ledger.repositories.interfaces import IProductRepository, ISalesRepository

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SaleLedger:
    """
    Servicio para registro de ventas.

    Responsabilidades:
    - Registrar ventas desde el carrito
    - Descontar stock (excepto servicios)
    - Consultar el historial
    """

    def __init__(
        self,
        sales_repo: ISalesRepository,
        product_repo: IProductRepository,
        id_generator: IdGenerator = None,
        clock: Callable[[], datetime] = None
    ):
        """
        Args:
            sales_repo: Repositorio de ventas
            product_repo: Repositorio del catálogo (para descontar stock)
            id_generator: Generador de ids (compartido con ProductStore)
            clock: Función que retorna el instante actual (para testing)
        """
        self.sales_repo = sales_repo
        self.product_repo = product_repo
        self.id_generator = id_generator or IdGenerator()
        self.clock = clock or utc_now

    @property
    def store(self):
        return self.sales_repo.store

    def list(self) -> List[Sale]:
        """Todas las ventas en orden de inserción (cronológico)."""
        return self.sales_repo.load()

    def get(self, sale_id: str) -> Optional[Sale]:
        return self.sales_repo.get_by_id(str(sale_id))

    def record(self, cart: Iterable[SaleItem]) -> Sale:
        """
        Registra una venta y descuenta el stock de los productos vendidos.

        Se asume (por convención, sin verificar) que el carrito no está vacío
        y que cada cantidad es > 0. Los ítems traen la foto de nombre y precio.

        Args:
            cart: Ítems vendidos

        Returns:
            Venta creada
        """
        items = [self._as_item(item) for item in cart]

        with self.store.locked():
            original = self.product_repo.load()
            products = self.product_repo.load()
            by_id = {p.id: p for p in products}
            for item in items:
                product = by_id.get(item.product_id)
                if product is None or product.is_service:
                    continue
                product.stock = max(0, product.stock - item.quantity)

            sale = Sale(
                id=self.id_generator.next_id(self.sales_repo.get_ids()),
                items=items,
                total=Sale.compute_total(items),
                timestamp=parse_timestamp(self.clock()),
            )
            self.product_repo.save(products)
            try:
                self.sales_repo.create_sale(sale)
            except PersistenceError:
                # Sin venta registrada el stock vuelve a su estado anterior
                self.product_repo.save(original)
                logger.error("No se pudo registrar la venta %s, stock restaurado", sale.id)
                raise

        logger.info("Venta %s registrada: %d unidades, total %.2f", sale.id, sale.item_count, sale.total)
        return sale

    def clear(self) -> None:
        """Borra el historial completo (acción de borrado masivo)."""
        with self.store.locked():
            self.sales_repo.clear()

    @staticmethod
    def _as_item(item) -> SaleItem:
        if isinstance(item, SaleItem):
            return item
        return SaleItem.from_dict(item)
