# ==============================================================================
# SERVICIO DE PRODUCTOS (ProductStore)
# ==============================================================================
# CRUD sobre el catálogo. Cada operación que modifica persiste el catálogo
# completo de forma síncrona.
#
# REGLAS:
# - El store NO valida: confía en los datos recibidos. La validación vive en
#   validate_product_data() y la invoca el llamador (rutas HTTP).
# - update/remove con un id inexistente son no-op silenciosos.
# - list() nunca siembra datos: initialize(seed) lo hace explícitamente.
# ==============================================================================

import logging
from typing import Any, Dict, Iterable, List, Optional

from pos_ledger.errors import ValidationError
from pos_ledger.models import Category, Product
from pos_ledger.repositories.base import IdGenerator
from pos_ledger.repositories.interfaces import IProductRepository

logger = logging.getLogger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 5


class ProductStore:
    """
    Servicio para gestión del catálogo de productos.

    Responsabilidades:
    - Listar, crear, reemplazar y eliminar productos
    - Asignar ids únicos
    - Sembrar el catálogo inicial (una sola vez)
    """

    def __init__(self, product_repo: IProductRepository, id_generator: IdGenerator = None):
        """
        Args:
            product_repo: Repositorio del catálogo
            id_generator: Generador de ids (compartido con el ledger)
        """
        self.product_repo = product_repo
        self.id_generator = id_generator or IdGenerator()

    @property
    def store(self):
        return self.product_repo.store

    # =========================================================================
    # INICIALIZACIÓN
    # =========================================================================

    def initialize(self, seed_catalog: Iterable[Dict[str, Any]]) -> bool:
        """
        Persiste el catálogo inicial si el registro nunca existió.

        Args:
            seed_catalog: Productos iniciales (con id)

        Returns:
            True si se sembró, False si ya había datos
        """
        with self.store.locked():
            if self.product_repo.exists():
                return False
            products = [Product.from_dict(p) for p in seed_catalog]
            self.product_repo.save(products)
        logger.info("Catálogo inicial sembrado con %d productos", len(products))
        return True

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def list(self) -> List[Product]:
        """Catálogo completo en orden de almacenamiento."""
        return self.product_repo.load()

    def get(self, product_id: str) -> Optional[Product]:
        return self.product_repo.get_product(str(product_id))

    def by_category(self, category: Any) -> List[Product]:
        category = Category(category)
        return [p for p in self.list() if p.category is category]

    def search(self, term: str, category: Any = None) -> List[Product]:
        """
        Busca por nombre (subcadena, sin distinguir mayúsculas).

        Un término vacío devuelve todo el catálogo (o la categoría).
        """
        products = self.by_category(category) if category else self.list()
        needle = (term or '').strip().casefold()
        if not needle:
            return products
        return [p for p in products if needle in p.name.casefold()]

    def low_stock(self, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> List[Product]:
        """Productos con stock <= umbral (los servicios no cuentan)."""
        return [p for p in self.list() if not p.is_service and p.stock <= threshold]

    # =========================================================================
    # OPERACIONES DE ESCRITURA
    # =========================================================================

    def add(self, data: Dict[str, Any]) -> Product:
        """
        Crea un producto con un id nuevo y lo agrega al final.

        Args:
            data: Campos del producto (sin id)

        Returns:
            Producto creado
        """
        with self.store.locked():
            products = self.product_repo.load()
            new_id = self.id_generator.next_id(p.id for p in products)
            product = Product.from_data(new_id, data)
            products.append(product)
            self.product_repo.save(products)
        logger.info("Producto creado: %s (%s)", product.name, product.id)
        return product

    def update(self, product_id: str, data: Dict[str, Any]) -> None:
        """
        Reemplaza todos los campos del producto excepto el id.
        No hace nada si el id no existe.
        """
        product_id = str(product_id)
        with self.store.locked():
            products = self.product_repo.load()
            for index, product in enumerate(products):
                if product.id == product_id:
                    products[index] = Product.from_data(product_id, data)
                    self.product_repo.save(products)
                    logger.info("Producto actualizado: %s", product_id)
                    return
        logger.debug("update ignorado, producto inexistente: %s", product_id)

    def remove(self, product_id: str) -> None:
        """Elimina el producto. No hace nada si el id no existe."""
        product_id = str(product_id)
        with self.store.locked():
            products = self.product_repo.load()
            remaining = [p for p in products if p.id != product_id]
            if len(remaining) == len(products):
                logger.debug("remove ignorado, producto inexistente: %s", product_id)
                return
            self.product_repo.save(remaining)
        logger.info("Producto eliminado: %s", product_id)

    def clear(self) -> None:
        """Borra el catálogo completo (acción de borrado masivo)."""
        with self.store.locked():
            self.product_repo.clear()


# ==============================================================================
# VALIDACIÓN (responsabilidad del llamador)
# ==============================================================================

def parse_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number in (float('inf'), float('-inf')):
        return None
    return number


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_product_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Valida y normaliza los datos de un producto antes de add/update.

    Reglas:
    - name y price son obligatorios; stock también salvo para servicios
    - price > 0
    - stock entero >= 0 (los servicios se guardan con stock 0)
    - category dentro del enum
    - buyingPrice / sellingPrice opcionales, números >= 0

    Args:
        data: Datos crudos (formulario o JSON)

    Returns:
        Diccionario normalizado listo para ProductStore

    Raises:
        ValidationError: Con el detalle campo -> mensaje
    """
    if not isinstance(data, dict):
        raise ValidationError("Datos de producto inválidos")

    errors: Dict[str, str] = {}

    raw_category = data.get('category') or Category.STATIONARIES.value
    try:
        category = Category(raw_category)
    except ValueError:
        category = None
        errors['category'] = f"Categoría inválida: {raw_category}"

    missing = [f for f in ('name', 'price') if _is_blank(data.get(f))]
    if category is not None and not category.is_service and _is_blank(data.get('stock')):
        missing.append('stock')
    for field_name in missing:
        errors[field_name] = 'Campo requerido'

    name = str(data.get('name') or '').strip()

    price = None
    if 'price' not in errors:
        price = parse_number(data.get('price'))
        if price is None or price <= 0:
            errors['price'] = 'Ingrese un precio válido mayor a 0'

    stock = 0
    if category is not None and not category.is_service and 'stock' not in errors:
        parsed = parse_number(data.get('stock'))
        if parsed is None or parsed < 0 or parsed != int(parsed):
            errors['stock'] = 'Ingrese un stock entero mayor o igual a 0'
        else:
            stock = int(parsed)

    optional_prices = {}
    for key in ('buyingPrice', 'sellingPrice'):
        value = data.get(key)
        if _is_blank(value):
            continue
        parsed = parse_number(value)
        if parsed is None or parsed < 0:
            errors[key] = 'Ingrese un número mayor o igual a 0'
        else:
            optional_prices[key] = parsed

    if errors:
        raise ValidationError("Datos de producto inválidos", errors)

    result = {
        'name': name,
        'price': price,
        'stock': stock,
        'category': category.value,
    }
    result.update(optional_prices)
    return result
