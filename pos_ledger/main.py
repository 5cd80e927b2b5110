# ==============================================================================
# APLICACIÓN FLASK - Rutas JSON sobre los servicios
# ==============================================================================
# create_app() arma la aplicación:
#   1. Configuración (entorno + overrides)
#   2. Logging y medición de requests
#   3. Contenedor de dependencias (un solo almacén por aplicación)
#   4. Siembra explícita del catálogo
#   5. Rutas, manejadores de error y comandos CLI
#
# Las rutas son delgadas: leen el request, llaman al servicio y devuelven
# JSON. La validación de productos y ventas ocurre aquí, antes de llamar a
# los stores.
#
# USO LOCAL:
#   python -m pos_ledger.main
#   flask --app pos_ledger.main:create_app run
# ==============================================================================

import atexit
import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from flask import Blueprint, Flask, Response, current_app, request
from werkzeug.exceptions import HTTPException
from werkzeug.utils import secure_filename

from pos_ledger import __version__
from pos_ledger.app_container import AppContainer
from pos_ledger.config import load_config, uses_default_secret
from pos_ledger.errors import NotFound, PersistenceError, ValidationError
from pos_ledger.logging_setup import configure_logging, init_request_timing
from pos_ledger.models import SaleItem
from pos_ledger.seed import DEFAULT_CATALOG
from pos_ledger.services import validate_product_data
from pos_ledger.services.product_service import parse_number

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'pos_ledger'

api = Blueprint('api', __name__)


def get_container() -> AppContainer:
    """Contenedor de la aplicación activa."""
    return current_app.extensions[EXTENSION_KEY]


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Se esperaba un objeto JSON")
    return data


# ==============================================================================
# VALIDACIÓN DE VENTAS DIRECTAS
# ==============================================================================

def parse_sale_items(raw_items: Any, product_store) -> List[SaleItem]:
    """
    Convierte los ítems de POST /api/sales en SaleItem.

    Nombre y precio se toman del catálogo cuando no vienen en el request.

    Raises:
        ValidationError: Lista vacía, cantidades inválidas o producto desconocido
    """
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("La venta debe tener al menos un ítem", {'items': 'Campo requerido'})

    items = []
    errors = {}
    for index, raw in enumerate(raw_items):
        key = f'items[{index}]'
        if not isinstance(raw, dict) or not raw.get('productId'):
            errors[key] = 'productId requerido'
            continue

        quantity = raw.get('quantity')
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            errors[key] = 'La cantidad debe ser un entero mayor a 0'
            continue

        product = product_store.get(str(raw['productId']))
        name = raw.get('productName') or (product.name if product else None)
        price = raw.get('price', product.price if product else None)
        if name is None or price is None:
            errors[key] = 'Producto no encontrado'
            continue
        price = parse_number(price)
        if price is None or price <= 0:
            errors[key] = 'Ingrese un precio válido mayor a 0'
            continue

        items.append(SaleItem(
            product_id=str(raw['productId']),
            product_name=str(name),
            quantity=quantity,
            price=price,
        ))

    if errors:
        raise ValidationError("Ítems de venta inválidos", errors)
    return items


# ==============================================================================
# PRODUCTOS
# ==============================================================================

@api.route('/api/products', methods=['GET'])
def list_products():
    """Catálogo, filtrable por ?category= y por nombre con ?q="""
    store = get_container().product_store
    category = request.args.get('category')
    try:
        products = store.search(request.args.get('q', ''), category or None)
    except ValueError:
        raise ValidationError(f"Categoría inválida: {category}", {'category': 'Categoría inválida'})
    return {'success': True, 'products': [p.to_public_dict() for p in products]}


@api.route('/api/products/<product_id>', methods=['GET'])
def get_product(product_id):
    product = get_container().product_store.get(product_id)
    if product is None:
        raise NotFound(f"Producto {product_id} no encontrado")
    return {'success': True, 'product': product.to_public_dict()}


@api.route('/api/products', methods=['POST'])
def create_product():
    data = validate_product_data(_json_body())
    product = get_container().product_store.add(data)
    return {'success': True, 'product': product.to_public_dict()}, 201


@api.route('/api/products/<product_id>', methods=['PUT'])
def update_product(product_id):
    data = validate_product_data(_json_body())
    get_container().product_store.update(product_id, data)
    return {'success': True}


@api.route('/api/products/<product_id>', methods=['DELETE'])
def delete_product(product_id):
    get_container().product_store.remove(product_id)
    return {'success': True}


# ==============================================================================
# VENTAS
# ==============================================================================

@api.route('/api/sales', methods=['GET'])
def list_sales():
    sales = get_container().sale_ledger.list()
    return {'success': True, 'sales': [s.to_dict() for s in sales]}


@api.route('/api/sales', methods=['POST'])
def record_sale():
    """Registra una venta directa: {"items": [{"productId", "quantity"}, ...]}"""
    container = get_container()
    items = parse_sale_items(_json_body().get('items'), container.product_store)
    sale = container.sale_ledger.record(items)
    return {'success': True, 'sale': sale.to_dict()}, 201


@api.route('/api/sales/export', methods=['GET'])
def export_sales_csv():
    output = get_container().data_service.sales_csv()
    filename = f"ventas_{datetime.now(timezone.utc):%Y-%m-%d}.csv"
    return Response(output, mimetype='text/csv',
                    headers={'Content-Disposition': f'attachment;filename={filename}'})


# ==============================================================================
# CARRITO
# ==============================================================================

def _cart_response(result: Dict[str, Any]):
    if not result.get('ok'):
        return {'success': False, 'error': result.get('error')}, 400
    return {'success': True, **{k: v for k, v in result.items() if k != 'ok'}}


@api.route('/api/cart', methods=['GET'])
def view_cart():
    return {'success': True, 'cart': get_container().cart_service.get_cart()}


@api.route('/api/cart/add', methods=['POST'])
def add_to_cart():
    product_id = _json_body().get('productId')
    if not product_id:
        return {'success': False, 'error': 'productId requerido'}, 400
    return _cart_response(get_container().cart_service.add_item(str(product_id)))


@api.route('/api/cart/update', methods=['POST'])
def update_cart():
    data = _json_body()
    product_id = data.get('productId')
    quantity = data.get('quantity')
    if not product_id or isinstance(quantity, bool) or not isinstance(quantity, int):
        return {'success': False, 'error': 'productId y quantity (entero) requeridos'}, 400
    return _cart_response(get_container().cart_service.update_quantity(str(product_id), quantity))


@api.route('/api/cart/remove', methods=['POST'])
def remove_from_cart():
    product_id = _json_body().get('productId')
    if not product_id:
        return {'success': False, 'error': 'productId requerido'}, 400
    return _cart_response(get_container().cart_service.remove_item(str(product_id)))


@api.route('/api/cart/clear', methods=['POST'])
def clear_cart():
    return _cart_response(get_container().cart_service.clear_cart())


@api.route('/api/cart/checkout', methods=['POST'])
def checkout_cart():
    container = get_container()
    result = container.cart_service.checkout(container.sale_ledger)
    if not result.get('ok'):
        return {'success': False, 'error': result.get('error')}, 400
    return {'success': True, 'sale': result['sale'], 'low_stock': result['low_stock']}, 201


# ==============================================================================
# REPORTES Y PANEL
# ==============================================================================

@api.route('/api/reports', methods=['GET'])
def reports():
    return {'success': True, 'report': get_container().report_aggregator.full_report()}


@api.route('/api/dashboard', methods=['GET'])
def dashboard():
    threshold = current_app.config.get('LOW_STOCK_THRESHOLD', 5)
    return {'success': True, 'dashboard': get_container().report_aggregator.dashboard(threshold)}


# ==============================================================================
# CONFIGURACIÓN: MONEDA Y DATOS
# ==============================================================================

@api.route('/api/settings/currency', methods=['GET'])
def get_currency():
    service = get_container().currency_service
    return {
        'success': True,
        'currency': service.current().to_dict(),
        'available': [c.to_dict() for c in service.available()],
    }


@api.route('/api/settings/currency', methods=['PUT'])
def set_currency():
    currency = get_container().currency_service.set_currency(_json_body().get('code'))
    return {'success': True, 'currency': currency.to_dict()}


@api.route('/api/data/export', methods=['GET'])
def export_data():
    payload = get_container().data_service.export_data()
    filename = f"pos-data-{datetime.now(timezone.utc):%Y-%m-%d}.json"
    return Response(json.dumps(payload, ensure_ascii=False, indent=2), mimetype='application/json',
                    headers={'Content-Disposition': f'attachment;filename={filename}'})


@api.route('/api/data/import', methods=['POST'])
def import_data():
    """Acepta el JSON en el cuerpo o como archivo subido en el campo 'file'."""
    upload = request.files.get('file')
    if upload is not None:
        filename = secure_filename(upload.filename or '') or 'import.json'
        try:
            payload = json.loads(upload.read().decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ValidationError(f"Archivo inválido: {filename}", {'file': str(e)}) from e
        logger.info("Importando datos desde %s", filename)
    else:
        payload = request.get_json(silent=True)
        if payload is None:
            raise ValidationError("No se recibieron datos para importar")

    counts = get_container().data_service.import_data(payload)
    return {'success': True, 'imported': counts}


@api.route('/api/data/clear', methods=['POST'])
def clear_data():
    if _json_body().get('confirm') is not True:
        raise ValidationError("Confirme el borrado con {\"confirm\": true}", {'confirm': 'Campo requerido'})
    get_container().data_service.clear_all()
    return {'success': True}


# ==============================================================================
# AUTENTICACIÓN
# ==============================================================================

@api.route('/api/auth/user', methods=['GET'])
def current_user():
    user = get_container().auth_service.get_current_user()
    return {'success': True, 'user': user.to_dict() if user else None}


@api.route('/api/auth/sign-in', methods=['POST'])
def sign_in():
    auth = get_container().auth_service
    token = auth.sign_in_with_email(_json_body().get('email'))
    response = {'success': True, 'message': 'Revise su email para el enlace de acceso'}
    # Sin envío de emails: en desarrollo el enlace se devuelve directamente
    if current_app.debug or current_app.testing:
        response['link'] = f"{auth.link_base}?token={token}"
    return response


@api.route('/api/auth/verify', methods=['GET'])
def verify_sign_in():
    user = get_container().auth_service.verify(request.args.get('token', ''))
    return {'success': True, 'user': user.to_dict()}


@api.route('/api/auth/sign-out', methods=['POST'])
def sign_out():
    get_container().auth_service.sign_out()
    return {'success': True}


@api.route('/health', methods=['GET'])
def health():
    return {'status': 'ok', 'version': __version__}


# ==============================================================================
# MANEJO DE ERRORES
# ==============================================================================

def _register_error_handlers(app: Flask) -> None:

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return {'success': False, 'error': e.message, 'errors': e.errors}, 400

    @app.errorhandler(NotFound)
    def handle_not_found(e):
        return {'success': False, 'error': str(e)}, 404

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(e):
        logger.exception("Error de persistencia en %s %s", request.method, request.path)
        return {'success': False, 'error': 'Error de almacenamiento'}, 500

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return {'success': False, 'error': e.description}, e.code


# ==============================================================================
# COMANDOS CLI (flask --app pos_ledger.main:create_app <comando>)
# ==============================================================================

def _register_cli(app: Flask) -> None:

    @app.cli.command('seed')
    def seed_command():
        """Siembra el catálogo inicial si nunca se guardó uno."""
        seeded = app.extensions[EXTENSION_KEY].product_store.initialize(DEFAULT_CATALOG)
        print("Catálogo sembrado" if seeded else "El catálogo ya existe, no se modificó")

    @app.cli.command('report')
    def report_command():
        """Imprime el reporte completo como JSON."""
        report = app.extensions[EXTENSION_KEY].report_aggregator.full_report()
        print(json.dumps(report, ensure_ascii=False, indent=2))

    @app.cli.command('clear-data')
    def clear_data_command():
        """Borra catálogo e historial de ventas."""
        app.extensions[EXTENSION_KEY].data_service.clear_all()
        print("Datos borrados")


# ==============================================================================
# FÁBRICA DE LA APLICACIÓN
# ==============================================================================

def create_app(
    config_overrides: Optional[Mapping[str, Any]] = None,
    container: Optional[AppContainer] = None,
    clock: Optional[Callable[[], datetime]] = None
) -> Flask:
    """
    Construye la aplicación Flask.

    Args:
        config_overrides: Valores que reemplazan la configuración del entorno
        container: Contenedor ya armado (por defecto uno nuevo sobre DATA_DIR)
        clock: Reloj para ledger y reportes (para testing)

    Returns:
        Aplicación lista para servir
    """
    config = load_config(config_overrides)
    configure_logging(config['LOG_LEVEL'], config['LOG_DIR'])

    app = Flask(__name__)
    app.config.update(config)

    if uses_default_secret(config):
        logger.warning("POS_SECRET_KEY no está definida: usando la clave de desarrollo")

    if container is None:
        container = AppContainer(config, clock=clock)
    container.bootstrap()
    app.extensions[EXTENSION_KEY] = container
    atexit.register(container.close)

    init_request_timing(app)
    app.register_blueprint(api)
    _register_error_handlers(app)
    _register_cli(app)

    logger.info("Aplicación iniciada con datos en %s", config['DATA_DIR'])
    return app


if __name__ == '__main__':
    application = create_app()
    host = application.config['HOST']
    port = application.config['PORT']
    if not application.debug:
        print(f"\n{'=' * 50}")
        print(f"  Servidor iniciado en http://{host}:{port}")
        print(f"{'=' * 50}\n")
    application.run(debug=application.config['DEBUG'], host=host, port=port)
