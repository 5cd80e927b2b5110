# ==============================================================================
# SERVICIO DE DATOS - Exportar / importar / borrar
# ==============================================================================
# Acciones de la pantalla de configuración sobre los registros completos.
# clear_all() es la ÚNICA operación que elimina ventas del historial.
# ==============================================================================

import csv
import io
import logging
from typing import Any, Dict, Iterable, List

from pos_ledger.errors import ValidationError
from pos_ledger.models import Product, Sale
from pos_ledger.services.product_service import ProductStore
from pos_ledger.services.sales_service import SaleLedger

logger = logging.getLogger(__name__)

CSV_HEADER = ['sale_id', 'timestamp', 'product_id', 'product_name', 'quantity', 'price', 'line_total', 'sale_total']

# Diferencia admitida entre total importado y suma de ítems (redondeo)
TOTAL_TOLERANCE = 0.005


def _duplicated_ids(ids: Iterable[str]) -> List[str]:
    seen, duplicated = set(), []
    for item_id in ids:
        if item_id in seen and item_id not in duplicated:
            duplicated.append(item_id)
        seen.add(item_id)
    return duplicated


class DataService:
    """Exportación, importación y borrado masivo de productos y ventas."""

    def __init__(self, product_store: ProductStore, sale_ledger: SaleLedger):
        self.product_store = product_store
        self.sale_ledger = sale_ledger

    @property
    def store(self):
        return self.product_store.store

    def export_data(self) -> Dict[str, Any]:
        """
        Returns:
            {'products': [...], 'sales': [...]} en formato persistido
        """
        return {
            'products': [p.to_dict() for p in self.product_store.list()],
            'sales': [s.to_dict() for s in self.sale_ledger.list()],
        }

    def import_data(self, payload: Any) -> Dict[str, int]:
        """
        Reemplaza catálogo y ventas con los datos importados.

        Se valida todo antes de escribir: un payload inválido no modifica
        nada.

        Returns:
            {'products': n, 'sales': m}

        Raises:
            ValidationError: Si el payload no tiene la forma esperada
        """
        if not isinstance(payload, dict):
            raise ValidationError("El archivo importado debe ser un objeto JSON")

        errors = {}
        products, sales = [], []
        for key in ('products', 'sales'):
            if not isinstance(payload.get(key, []), list):
                errors[key] = 'Debe ser una lista'
        if errors:
            raise ValidationError("Datos importados inválidos", errors)

        try:
            products = [Product.from_dict(p) for p in payload.get('products', [])]
        except (KeyError, TypeError, ValueError) as e:
            errors['products'] = f'Producto inválido: {e}'
        try:
            sales = [Sale.from_dict(s) for s in payload.get('sales', [])]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            errors['sales'] = f'Venta inválida: {e}'

        duplicated = _duplicated_ids(p.id for p in products)
        if duplicated and 'products' not in errors:
            errors['products'] = f'Ids de producto repetidos: {", ".join(duplicated)}'

        if 'sales' not in errors:
            duplicated = _duplicated_ids(s.id for s in sales)
            mismatched = [s.id for s in sales if abs(s.total - Sale.compute_total(s.items)) > TOTAL_TOLERANCE]
            if duplicated:
                errors['sales'] = f'Ids de venta repetidos: {", ".join(duplicated)}'
            elif mismatched:
                errors['sales'] = f'Total distinto a la suma de los ítems: {", ".join(mismatched)}'
        if errors:
            raise ValidationError("Datos importados inválidos", errors)

        with self.store.locked():
            self.product_store.product_repo.save(products)
            self.sale_ledger.sales_repo.save(sales)

        logger.info("Datos importados: %d productos, %d ventas", len(products), len(sales))
        return {'products': len(products), 'sales': len(sales)}

    def clear_all(self) -> None:
        """Elimina catálogo e historial de ventas."""
        with self.store.locked():
            self.product_store.clear()
            self.sale_ledger.clear()
        logger.warning("Todos los datos fueron borrados")

    def sales_csv(self) -> str:
        """Historial de ventas en CSV, una fila por ítem vendido."""
        si = io.StringIO()
        writer = csv.writer(si)
        writer.writerow(CSV_HEADER)
        for sale in self.sale_ledger.list():
            for item in sale.items:
                writer.writerow([
                    sale.id, sale.to_dict()['timestamp'],
                    item.product_id, item.product_name,
                    item.quantity, f"{item.price:.2f}", f"{item.line_total:.2f}", f"{sale.total:.2f}",
                ])
        return si.getvalue()
