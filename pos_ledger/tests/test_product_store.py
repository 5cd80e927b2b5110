# -*- coding: utf-8 -*-
"""
Tests del catálogo (ProductStore) y de validate_product_data.
"""
import pytest

from pos_ledger.app_container import AppContainer
from pos_ledger.errors import ValidationError
from pos_ledger.models import Category
from pos_ledger.seed import DEFAULT_CATALOG
from pos_ledger.services import validate_product_data

PEN_DATA = {'name': 'Marker', 'price': 2.0, 'stock': 10, 'category': 'stationaries'}


def test_list_without_initialize_is_empty_and_does_not_seed(container):
    assert container.product_store.list() == []
    assert not container.store.has('pos_products')


def test_initialize_seeds_once(container):
    store = container.product_store

    assert store.initialize(DEFAULT_CATALOG) is True
    assert [p.name for p in store.list()] == [
        'Pen', 'Notebook', 'Phone Case', 'Hammer', 'Screwdriver Set', 'Chess Tournament',
    ]

    store.remove('1')
    assert store.initialize(DEFAULT_CATALOG) is False
    assert len(store.list()) == 5


def test_initialize_respects_empty_saved_catalog(container):
    container.product_repo.save([])
    assert container.product_store.initialize(DEFAULT_CATALOG) is False
    assert container.product_store.list() == []


def test_bootstrap_honours_seed_flag(config, clock):
    config['SEED_CATALOG'] = False
    c = AppContainer(config, clock=clock)
    try:
        assert c.bootstrap() is False
        assert c.product_store.list() == []
    finally:
        c.close()


def test_add_appends_with_unique_ids(seeded):
    store = seeded.product_store
    first = store.add(PEN_DATA)
    second = store.add(dict(PEN_DATA, name='Eraser'))

    products = store.list()
    assert [p.id for p in products[-2:]] == [first.id, second.id]
    assert len({p.id for p in products}) == len(products)
    assert first.id not in {p['id'] for p in DEFAULT_CATALOG}


def test_update_replaces_all_fields_but_id(seeded):
    store = seeded.product_store
    store.update('1', {'name': 'Blue Pen', 'price': 2.0, 'stock': 40, 'category': 'stationaries'})

    pen = store.get('1')
    assert pen.id == '1'
    assert pen.name == 'Blue Pen'
    assert pen.price == 2.0
    assert pen.stock == 40
    # Campos opcionales no enviados desaparecen
    assert pen.buying_price is None
    assert [p.id for p in store.list()][:2] == ['1', '2']


def test_update_and_remove_unknown_id_are_noops(seeded):
    store = seeded.product_store
    before = [p.to_dict() for p in store.list()]

    store.update('does-not-exist', PEN_DATA)
    store.remove('does-not-exist')

    assert [p.to_dict() for p in store.list()] == before


def test_remove(seeded):
    seeded.product_store.remove('3')
    assert seeded.product_store.get('3') is None
    assert len(seeded.product_store.list()) == 5


def test_changes_survive_a_new_container(seeded, config):
    added = seeded.product_store.add(PEN_DATA)
    seeded.close()

    reopened = AppContainer(config)
    try:
        assert reopened.product_store.get(added.id).name == 'Marker'
    finally:
        reopened.close()


def test_by_category_and_low_stock(seeded):
    store = seeded.product_store
    assert [p.name for p in store.by_category('tools')] == ['Hammer', 'Screwdriver Set']
    assert [p.name for p in store.by_category(Category.GAMES)] == ['Chess Tournament']
    # El servicio tiene stock 0 pero no cuenta como stock bajo
    assert [p.name for p in store.low_stock(8)] == ['Hammer']


def test_service_reports_zero_stock(seeded):
    chess = seeded.product_store.get('6')
    assert chess.is_service
    assert chess.to_public_dict()['stock'] == 0


# ==============================================================================
# VALIDACIÓN
# ==============================================================================

def test_validate_normalizes_values():
    data = validate_product_data({
        'name': '  Ruler ', 'price': '2.5', 'stock': '3', 'category': 'stationaries',
        'buyingPrice': '1', 'sellingPrice': '',
    })
    assert data == {'name': 'Ruler', 'price': 2.5, 'stock': 3, 'category': 'stationaries', 'buyingPrice': 1.0}


def test_validate_requires_name_price_and_stock():
    with pytest.raises(ValidationError) as exc:
        validate_product_data({'category': 'tools'})
    assert set(exc.value.errors) == {'name', 'price', 'stock'}


def test_validate_services_do_not_need_stock():
    data = validate_product_data({'name': 'Tournament', 'price': 10, 'stock': 7, 'category': 'games'})
    assert data['stock'] == 0

    data = validate_product_data({'name': 'Tournament', 'price': 10, 'category': 'games'})
    assert data['stock'] == 0


@pytest.mark.parametrize('field,value', [
    ('price', 0),
    ('price', -1),
    ('price', 'abc'),
    ('stock', -1),
    ('stock', 1.5),
    ('category', 'food'),
    ('buyingPrice', -2),
    ('sellingPrice', 'x'),
])
def test_validate_rejects_bad_values(field, value):
    data = dict(PEN_DATA)
    data[field] = value
    with pytest.raises(ValidationError) as exc:
        validate_product_data(data)
    assert field in exc.value.errors


def test_search_by_name_ignores_case(seeded):
    store = seeded.product_store
    assert [p.name for p in store.search('PEN')] == ['Pen']
    assert [p.name for p in store.search('  scr ')] == ['Screwdriver Set']
    assert [p.name for p in store.search('e', category='tools')] == ['Hammer', 'Screwdriver Set']
    assert len(store.search('')) == 6
    assert store.search('zzz') == []
