# -*- coding: utf-8 -*-
"""
Tests de exportación, importación y borrado de datos.
"""
import csv
import io

import pytest

from pos_ledger.errors import ValidationError
from pos_ledger.models import SaleItem
from pos_ledger.services.data_service import CSV_HEADER


def test_export_uses_persisted_format(seeded):
    seeded.sale_ledger.record([SaleItem('1', 'Pen', 3, 1.5)])
    data = seeded.data_service.export_data()

    assert len(data['products']) == 6
    assert data['products'][0]['buyingPrice'] == 0.8
    assert 'buyingPrice' not in data['products'][5]
    assert data['sales'][0]['timestamp'] == '2024-06-15T12:00:00+00:00'
    assert data['sales'][0]['items'][0]['productName'] == 'Pen'


def test_import_replaces_records(seeded):
    payload = {
        'products': [{'id': 'x1', 'name': 'Stapler', 'price': 6.0, 'stock': 4, 'category': 'stationaries'}],
        'sales': [{
            'id': 's1', 'total': 12.0, 'timestamp': '2024-06-01T10:00:00Z',
            'items': [{'productId': 'x1', 'productName': 'Stapler', 'quantity': 2, 'price': 6.0}],
        }],
    }
    assert seeded.data_service.import_data(payload) == {'products': 1, 'sales': 1}

    assert [p.name for p in seeded.product_store.list()] == ['Stapler']
    sale = seeded.sale_ledger.get('s1')
    assert sale.timestamp.year == 2024
    assert sale.timestamp.utcoffset().total_seconds() == 0


@pytest.mark.parametrize('payload', [
    [],
    {'products': 'nope'},
    {'products': [{'name': 'No id'}]},
    {'sales': [{'id': '1', 'items': [], 'timestamp': 'nunca'}]},
])
def test_invalid_import_changes_nothing(seeded, payload):
    before = seeded.data_service.export_data()
    with pytest.raises(ValidationError):
        seeded.data_service.import_data(payload)
    assert seeded.data_service.export_data() == before


def test_clear_all_then_bootstrap_reseeds(seeded):
    seeded.sale_ledger.record([SaleItem('1', 'Pen', 1, 1.5)])
    seeded.data_service.clear_all()

    assert seeded.product_store.list() == []
    assert seeded.sale_ledger.list() == []
    assert seeded.bootstrap() is True
    assert len(seeded.product_store.list()) == 6


def test_sales_csv_has_one_row_per_item(seeded):
    seeded.sale_ledger.record([SaleItem('1', 'Pen', 3, 1.5), SaleItem('2', 'Notebook', 1, 3.2)])
    rows = list(csv.reader(io.StringIO(seeded.data_service.sales_csv())))

    assert rows[0] == CSV_HEADER
    assert len(rows) == 3
    assert rows[1][3:] == ['Pen', '3', '1.50', '4.50', '7.70']


def _sale(sale_id, total, quantity=2, price=6.0):
    return {
        'id': sale_id, 'total': total, 'timestamp': '2024-06-01T10:00:00Z',
        'items': [{'productId': 'x1', 'productName': 'Stapler', 'quantity': quantity, 'price': price}],
    }


@pytest.mark.parametrize('payload,field', [
    ({'products': [
        {'id': 'x1', 'name': 'Stapler', 'price': 6.0, 'stock': 4, 'category': 'stationaries'},
        {'id': 'x1', 'name': 'Clips', 'price': 1.0, 'stock': 9, 'category': 'stationaries'},
    ]}, 'products'),
    ({'sales': [_sale('s1', 99.0)]}, 'sales'),
    ({'sales': [_sale('s1', 12.0), _sale('s1', 12.0)]}, 'sales'),
])
def test_import_rejects_inconsistent_records(seeded, payload, field):
    before = seeded.data_service.export_data()
    with pytest.raises(ValidationError) as exc:
        seeded.data_service.import_data(payload)
    assert field in exc.value.errors
    assert seeded.data_service.export_data() == before


def test_import_accepts_rounded_totals(seeded):
    counts = seeded.data_service.import_data({'sales': [_sale('s1', 0.3, quantity=3, price=0.1)]})
    assert counts == {'products': 0, 'sales': 1}
