# -*- coding: utf-8 -*-
"""
Tests de las rutas JSON con el cliente de prueba de Flask.
"""
import io
import json

import pytest

from pos_ledger.main import EXTENSION_KEY


def test_health(client):
    r = client.get('/health')
    assert r.status_code == 200
    assert r.get_json()['status'] == 'ok'


def test_list_products_is_seeded(client):
    r = client.get('/api/products')
    assert r.status_code == 200
    products = r.get_json()['products']
    assert len(products) == 6
    assert products[-1]['category'] == 'games'
    assert products[-1]['stock'] == 0


def test_filter_by_category(client):
    r = client.get('/api/products?category=tools')
    assert [p['name'] for p in r.get_json()['products']] == ['Hammer', 'Screwdriver Set']
    assert client.get('/api/products?category=food').status_code == 400


def test_get_single_product(client):
    assert client.get('/api/products/1').get_json()['product']['name'] == 'Pen'
    r = client.get('/api/products/999')
    assert r.status_code == 404
    assert r.get_json()['success'] is False


def test_create_product_validates(client):
    r = client.post('/api/products', json={'name': '', 'price': 0, 'category': 'tools'})
    assert r.status_code == 400
    body = r.get_json()
    assert body['success'] is False
    assert {'name', 'price', 'stock'} <= set(body['errors'])

    r = client.post('/api/products', json={'name': 'Saw', 'price': '12.5', 'stock': '4', 'category': 'tools'})
    assert r.status_code == 201
    created = r.get_json()['product']
    assert created['price'] == 12.5
    assert created['stock'] == 4
    assert client.get(f"/api/products/{created['id']}").status_code == 200


def test_update_and_delete(client):
    r = client.put('/api/products/2', json={'name': 'Notebook A4', 'price': 4, 'stock': 10})
    assert r.status_code == 200
    product = client.get('/api/products/2').get_json()['product']
    assert product['name'] == 'Notebook A4'
    assert product['category'] == 'stationaries'

    assert client.delete('/api/products/2').get_json()['success'] is True
    assert client.get('/api/products/2').status_code == 404


def test_update_and_delete_unknown_ids_succeed(client):
    r = client.put('/api/products/nope', json={'name': 'X', 'price': 1, 'stock': 1})
    assert r.status_code == 200
    assert client.delete('/api/products/nope').status_code == 200
    assert len(client.get('/api/products').get_json()['products']) == 6


def test_update_still_validates(client):
    r = client.put('/api/products/1', json={'name': 'Pen', 'price': -3, 'stock': 1})
    assert r.status_code == 400
    assert 'price' in r.get_json()['errors']


def test_record_sale(client):
    r = client.post('/api/sales', json={'items': [{'productId': '1', 'quantity': 3}]})
    assert r.status_code == 201
    sale = r.get_json()['sale']
    assert sale['total'] == pytest.approx(4.5)
    assert sale['items'][0]['productName'] == 'Pen'

    assert client.get('/api/products/1').get_json()['product']['stock'] == 47
    assert len(client.get('/api/sales').get_json()['sales']) == 1


@pytest.mark.parametrize('body', [
    {},
    {'items': []},
    {'items': [{'productId': '1', 'quantity': 0}]},
    {'items': [{'productId': '1', 'quantity': 'dos'}]},
    {'items': [{'productId': '999', 'quantity': 1}]},
])
def test_record_sale_rejects_bad_items(client, body):
    r = client.post('/api/sales', json=body)
    assert r.status_code == 400
    assert client.get('/api/sales').get_json()['sales'] == []


def test_cart_checkout_flow(client):
    assert client.post('/api/cart/add', json={'productId': '4'}).status_code == 200
    r = client.post('/api/cart/update', json={'productId': '4', 'quantity': 7})
    assert r.get_json()['cart']['total_items'] == 7

    cart = client.get('/api/cart').get_json()['cart']
    assert cart['total'] == pytest.approx(7 * 22.5)

    r = client.post('/api/cart/checkout')
    assert r.status_code == 201
    body = r.get_json()
    assert body['low_stock'] == [{'id': '4', 'name': 'Hammer', 'stock': 1}]
    assert client.get('/api/cart').get_json()['cart']['items'] == []
    assert client.post('/api/cart/checkout').status_code == 400


def test_cart_errors(client):
    assert client.post('/api/cart/add', json={}).status_code == 400
    assert client.post('/api/cart/add', json={'productId': '999'}).status_code == 400
    assert client.post('/api/cart/update', json={'productId': '1'}).status_code == 400


def test_dashboard_and_reports(client):
    client.post('/api/sales', json={'items': [{'productId': '1', 'quantity': 2}]})

    dashboard = client.get('/api/dashboard').get_json()['dashboard']
    assert dashboard['todays_sales'] == 1
    assert dashboard['total_products'] == 6

    report = client.get('/api/reports').get_json()['report']
    assert report['summary']['weekly_revenue'] == pytest.approx(3.0)
    assert report['top_products'][0]['product_id'] == '1'
    assert report['daily_revenue']['2024-06-15'] == pytest.approx(3.0)


def test_currency_settings(client):
    body = client.get('/api/settings/currency').get_json()
    assert body['currency']['code'] == 'USD'
    assert len(body['available']) == 10

    r = client.put('/api/settings/currency', json={'code': 'ksh'})
    assert r.get_json()['currency']['symbol'] == 'KSh'
    assert client.put('/api/settings/currency', json={'code': 'BTC'}).status_code == 400


def test_export_import_and_clear(client):
    client.post('/api/sales', json={'items': [{'productId': '1', 'quantity': 1}]})

    r = client.get('/api/data/export')
    assert r.mimetype == 'application/json'
    assert 'attachment' in r.headers['Content-Disposition']
    exported = json.loads(r.get_data(as_text=True))
    assert len(exported['sales']) == 1

    assert client.post('/api/data/clear', json={}).status_code == 400
    assert client.post('/api/data/clear', json={'confirm': True}).status_code == 200
    assert client.get('/api/products').get_json()['products'] == []

    upload = io.BytesIO(json.dumps(exported).encode('utf-8'))
    r = client.post('/api/data/import', data={'file': (upload, 'backup.json')},
                    content_type='multipart/form-data')
    assert r.status_code == 200
    assert r.get_json()['imported'] == {'products': 6, 'sales': 1}
    assert len(client.get('/api/sales').get_json()['sales']) == 1


def test_import_rejects_bad_payload(client):
    assert client.post('/api/data/import', json={'products': 'x'}).status_code == 400
    upload = io.BytesIO(b'{broken')
    r = client.post('/api/data/import', data={'file': (upload, 'broken.json')},
                    content_type='multipart/form-data')
    assert r.status_code == 400


def test_sales_csv_export(client):
    client.post('/api/sales', json={'items': [{'productId': '3', 'quantity': 1}]})
    r = client.get('/api/sales/export')
    assert r.mimetype == 'text/csv'
    lines = r.get_data(as_text=True).strip().splitlines()
    assert lines[0].startswith('sale_id,timestamp')
    assert 'Phone Case' in lines[1]


def test_magic_link_sign_in(client):
    assert client.get('/api/auth/user').get_json()['user'] is None
    assert client.post('/api/auth/sign-in', json={'email': 'bad'}).status_code == 400

    link = client.post('/api/auth/sign-in', json={'email': 'owner@shop.com'}).get_json()['link']
    r = client.get(link)
    assert r.status_code == 200
    assert client.get('/api/auth/user').get_json()['user']['email'] == 'owner@shop.com'

    client.post('/api/auth/sign-out')
    assert client.get('/api/auth/user').get_json()['user'] is None
    assert client.get('/api/auth/verify?token=garbage').status_code == 400


def test_persistence_error_returns_500(app, client, config):
    container = app.extensions[EXTENSION_KEY]
    with open(f"{config['DATA_DIR']}/pos_products.json", 'w', encoding='utf-8') as f:
        f.write('{corrupt')
    container.store.reload()

    r = client.get('/api/products')
    assert r.status_code == 500
    assert r.get_json()['success'] is False


def test_unknown_route_returns_json(client):
    r = client.get('/api/nothing')
    assert r.status_code == 404
    assert r.get_json()['success'] is False


def test_search_products_by_name(client):
    r = client.get('/api/products?q=note')
    assert [p['name'] for p in r.get_json()['products']] == ['Notebook']

    r = client.get('/api/products?q=case&category=accessories')
    assert [p['name'] for p in r.get_json()['products']] == ['Phone Case']
    assert client.get('/api/products?q=case&category=food').status_code == 400


def test_dashboard_lists_recent_sales(client):
    for pid in ('1', '2'):
        client.post('/api/sales', json={'items': [{'productId': pid, 'quantity': 1}]})
    recent = client.get('/api/dashboard').get_json()['dashboard']['recent_sales']
    assert [s['items'][0]['productName'] for s in recent] == ['Notebook', 'Pen']


@pytest.mark.parametrize('price', [-1, 0, True, 'NaN', 'gratis', float('inf')])
def test_record_sale_rejects_bad_prices(client, price):
    r = client.post('/api/sales', data=json.dumps({'items': [{'productId': '1', 'quantity': 1, 'price': price}]}),
                    content_type='application/json')
    assert r.status_code == 400
    assert 'items[0]' in r.get_json()['errors']
    assert client.get('/api/products/1').get_json()['product']['stock'] == 50


def test_record_sale_accepts_price_override(client):
    r = client.post('/api/sales', json={'items': [{'productId': '1', 'quantity': 2, 'price': '1.25'}]})
    assert r.status_code == 201
    assert r.get_json()['sale']['total'] == pytest.approx(2.5)
