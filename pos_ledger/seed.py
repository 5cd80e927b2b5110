# ==============================================================================
# CATÁLOGO INICIAL
# ==============================================================================
# Datos de arranque. Se persisten una sola vez, cuando el registro
# pos_products todavía no existe (ver ProductStore.initialize).
# ==============================================================================

DEFAULT_CATALOG = [
    {'id': '1', 'name': 'Pen', 'price': 1.50, 'buyingPrice': 0.80, 'sellingPrice': 1.50,
     'stock': 50, 'category': 'stationaries'},
    {'id': '2', 'name': 'Notebook', 'price': 3.20, 'buyingPrice': 2.00, 'sellingPrice': 3.20,
     'stock': 25, 'category': 'stationaries'},
    {'id': '3', 'name': 'Phone Case', 'price': 15.99, 'buyingPrice': 10.00, 'sellingPrice': 15.99,
     'stock': 12, 'category': 'accessories'},
    {'id': '4', 'name': 'Hammer', 'price': 22.50, 'buyingPrice': 15.00, 'sellingPrice': 22.50,
     'stock': 8, 'category': 'tools'},
    {'id': '5', 'name': 'Screwdriver Set', 'price': 18.75, 'buyingPrice': 12.00, 'sellingPrice': 18.75,
     'stock': 15, 'category': 'tools'},
    {'id': '6', 'name': 'Chess Tournament', 'price': 29.99, 'stock': 0, 'category': 'games'},
]
