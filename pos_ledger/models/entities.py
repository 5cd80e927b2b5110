# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio y sabe convertirse
# desde/hacia el formato persistido (claves camelCase del registro
# pos_products / pos_sales).
# ==============================================================================

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


# ==============================================================================
# ENUMERACIONES
# ==============================================================================

class Category(str, Enum):
    """Categorías del catálogo."""
    STATIONARIES = "stationaries"
    ACCESSORIES = "accessories"
    TOOLS = "tools"
    GAMES = "games"          # Servicios: sin control de stock

    @property
    def is_service(self) -> bool:
        """Los juegos son servicios: su stock no se descuenta."""
        return self is Category.GAMES


def parse_timestamp(value: Any) -> datetime:
    """
    Convierte un timestamp persistido (texto ISO) en datetime con zona.

    Acepta el sufijo 'Z'. Los valores sin zona se asumen UTC.

    Raises:
        ValueError: Si el texto no es una fecha ISO válida
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    else:
        raise ValueError(f"timestamp inválido: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Serializa un datetime como texto ISO en UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


# ==============================================================================
# ENTIDADES DE INVENTARIO
# ==============================================================================

@dataclass
class Product:
    """
    Producto del catálogo.

    Attributes:
        id: Identificador único (texto)
        name: Nombre del producto
        price: Precio de venta vigente (> 0)
        stock: Unidades en inventario (>= 0)
        category: Categoría; GAMES = servicio
        buying_price: Costo de compra (opcional)
        selling_price: Precio de venta sugerido (opcional)
    """
    id: str
    name: str
    price: float
    stock: int = 0
    category: Category = Category.STATIONARIES
    buying_price: Optional[float] = None
    selling_price: Optional[float] = None

    @property
    def is_service(self) -> bool:
        return self.category.is_service

    @property
    def reported_stock(self) -> int:
        """Stock a mostrar: los servicios siempre reportan 0."""
        return 0 if self.is_service else self.stock

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        d = {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'stock': self.stock,
            'category': self.category.value,
        }
        if self.buying_price is not None:
            d['buyingPrice'] = self.buying_price
        if self.selling_price is not None:
            d['sellingPrice'] = self.selling_price
        return d

    def to_public_dict(self) -> Dict[str, Any]:
        """Como to_dict, pero con el stock reportado."""
        d = self.to_dict()
        d['stock'] = self.reported_stock
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        """
        Crea instancia desde diccionario persistido.

        Raises:
            KeyError, ValueError, TypeError: Si el registro está corrupto
        """
        return cls(
            id=str(data['id']),
            name=str(data['name']),
            price=float(data['price']),
            stock=int(data.get('stock', 0) or 0),
            category=Category(data.get('category', Category.STATIONARIES.value)),
            buying_price=_optional_float(data.get('buyingPrice')),
            selling_price=_optional_float(data.get('sellingPrice')),
        )

    @classmethod
    def from_data(cls, product_id: str, data: Dict[str, Any]) -> 'Product':
        """Construye un producto a partir de datos sin id (add/update)."""
        return cls.from_dict({**data, 'id': product_id})


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == '':
        return None
    return float(value)


# ==============================================================================
# ENTIDADES DE VENTA
# ==============================================================================

@dataclass
class SaleItem:
    """
    Ítem individual dentro de una venta.

    El nombre y el precio son una foto del catálogo al momento de la
    venta; ediciones posteriores del producto no los alteran.
    """
    product_id: str
    product_name: str
    quantity: int
    price: float

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            'productId': self.product_id,
            'productName': self.product_name,
            'quantity': self.quantity,
            'price': self.price,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SaleItem':
        return cls(
            product_id=str(data['productId']),
            product_name=str(data.get('productName', '')),
            quantity=int(data['quantity']),
            price=float(data['price']),
        )


@dataclass
class Sale:
    """
    Venta registrada. Inmutable una vez creada.

    Attributes:
        id: Identificador único derivado del tiempo
        items: Ítems vendidos (en orden)
        total: Suma de price * quantity de los ítems
        timestamp: Instante de la venta (con zona)
    """
    id: str
    items: List[SaleItem] = field(default_factory=list)
    total: float = 0.0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def compute_total(items: List[SaleItem]) -> float:
        """Total sin impuestos ni descuentos."""
        return sum(item.line_total for item in items)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia JSON."""
        return {
            'id': self.id,
            'items': [item.to_dict() for item in self.items],
            'total': self.total,
            'timestamp': format_timestamp(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sale':
        """Crea instancia desde diccionario; el timestamp vuelve a ser datetime."""
        return cls(
            id=str(data['id']),
            items=[SaleItem.from_dict(i) for i in data.get('items', [])],
            total=float(data.get('total', 0) or 0),
            timestamp=parse_timestamp(data.get('timestamp')),
        )


# ==============================================================================
# PREFERENCIAS Y AUTENTICACIÓN
# ==============================================================================

@dataclass(frozen=True)
class Currency:
    """Moneda seleccionable para mostrar montos."""
    code: str
    symbol: str
    name: str

    def format(self, amount: float) -> str:
        """Formatea un monto con dos decimales: $4.50"""
        return f"{self.symbol}{float(amount):.2f}"

    def to_dict(self) -> Dict[str, Any]:
        return {'code': self.code, 'symbol': self.symbol, 'name': self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Currency':
        return cls(code=str(data['code']), symbol=str(data['symbol']), name=str(data['name']))


@dataclass
class AuthUser:
    """Usuario autenticado por enlace mágico."""
    email: str
    signed_in_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {'email': self.email, 'signed_in_at': format_timestamp(self.signed_in_at)}
