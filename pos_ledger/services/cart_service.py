# ==============================================================================
# SERVICIO DE CARRITO
# ==============================================================================
# Flujo de cobro de la pantalla de ventas. El carrito se almacena en la
# sesión de Flask; cada ítem guarda la foto de nombre y precio del producto
# al momento de agregarlo.
# ==============================================================================

import logging
from typing import Any, Dict, List

from flask import session

from pos_ledger.models import SaleItem
from pos_ledger.services.product_service import ProductStore
from pos_ledger.services.sales_service import SaleLedger

logger = logging.getLogger(__name__)

# Umbral de aviso después de una venta
LOW_STOCK_ALERT = 2


class CartService:
    """
    Servicio para gestión del carrito de compras.

    Responsabilidades:
    - Agregar/eliminar ítems del carrito
    - Respetar el stock disponible (los servicios no tienen límite)
    - Calcular totales
    - Confirmar la venta contra el SaleLedger

    El carrito se almacena en session['cart'].
    """

    SESSION_KEY = 'cart'

    def __init__(self, product_store: ProductStore):
        """
        Args:
            product_store: Catálogo de productos
        """
        self.product_store = product_store

    def _get_cart(self) -> List[Dict[str, Any]]:
        return list(session.get(self.SESSION_KEY, []))

    def _save_cart(self, cart: List[Dict[str, Any]]) -> None:
        session[self.SESSION_KEY] = cart
        session.modified = True

    @staticmethod
    def _find(cart: List[Dict[str, Any]], product_id: str):
        for item in cart:
            if item.get('productId') == product_id:
                return item
        return None

    def get_cart(self) -> Dict[str, Any]:
        """
        Obtiene el carrito con totales calculados.

        Returns:
            Dict con items, total_items, total, items_count
        """
        cart = self._get_cart()
        return {
            'items': cart,
            'total_items': sum(item.get('quantity', 0) for item in cart),
            'total': sum(item.get('quantity', 0) * item.get('price', 0) for item in cart),
            'items_count': len(cart),
        }

    def add_item(self, product_id: str) -> Dict[str, Any]:
        """
        Agrega una unidad del producto al carrito.

        Args:
            product_id: ID del producto

        Returns:
            Dict con resultado (ok, error, cart)
        """
        product = self.product_store.get(str(product_id))
        if product is None:
            return {'ok': False, 'error': 'Producto no encontrado'}

        cart = self._get_cart()
        existing = self._find(cart, product.id)

        if not product.is_service:
            if product.stock <= 0:
                return {'ok': False, 'error': f'{product.name} está agotado'}
            if existing and existing['quantity'] >= product.stock:
                return {'ok': False, 'error': f'Solo hay {product.stock} unidades de {product.name}'}

        if existing:
            existing['quantity'] += 1
        else:
            cart.append(SaleItem(
                product_id=product.id,
                product_name=product.name,
                quantity=1,
                price=product.price,
            ).to_dict())

        self._save_cart(cart)
        return {'ok': True, 'cart': self.get_cart()}

    def update_quantity(self, product_id: str, quantity: int) -> Dict[str, Any]:
        """
        Cambia la cantidad de un ítem. Cantidad <= 0 lo elimina.

        Returns:
            Dict con resultado (ok, error, cart)
        """
        product_id = str(product_id)
        if quantity <= 0:
            return self.remove_item(product_id)

        cart = self._get_cart()
        existing = self._find(cart, product_id)
        if existing is None:
            return {'ok': False, 'error': 'El producto no está en el carrito'}

        product = self.product_store.get(product_id)
        if product is not None and not product.is_service and quantity > product.stock:
            return {'ok': False, 'error': f'Solo hay {product.stock} unidades de {product.name}'}

        existing['quantity'] = quantity
        self._save_cart(cart)
        return {'ok': True, 'cart': self.get_cart()}

    def remove_item(self, product_id: str) -> Dict[str, Any]:
        cart = [item for item in self._get_cart() if item.get('productId') != str(product_id)]
        self._save_cart(cart)
        return {'ok': True, 'cart': self.get_cart()}

    def clear_cart(self) -> Dict[str, Any]:
        """Vacía el carrito completamente."""
        self._save_cart([])
        return {'ok': True, 'cart': self.get_cart()}

    def checkout(self, sale_ledger: SaleLedger) -> Dict[str, Any]:
        """
        Confirma el carrito y registra la venta.

        El carrito solo se vacía si la venta se registró.

        Returns:
            Dict con ok, sale y low_stock (productos con stock <= 2)
        """
        cart = self._get_cart()
        if not cart:
            return {'ok': False, 'error': 'El carrito está vacío'}

        sale = sale_ledger.record(SaleItem.from_dict(item) for item in cart)
        self._save_cart([])

        low_stock = [
            {'id': p.id, 'name': p.name, 'stock': p.stock}
            for p in self.product_store.list()
            if not p.is_service and p.stock <= LOW_STOCK_ALERT
        ]
        if low_stock:
            logger.warning("Stock bajo después de la venta %s: %s",
                           sale.id, ', '.join(p['name'] for p in low_stock))

        return {'ok': True, 'sale': sale.to_dict(), 'low_stock': low_stock}
