# -*- coding: utf-8 -*-
"""
Tests del almacén clave/valor JSON y del generador de ids.
"""
import copy
import os
import threading
from contextlib import contextmanager

import pytest

from pos_ledger.app_container import AppContainer
from pos_ledger.errors import PersistenceError
from pos_ledger.repositories import (
    IdGenerator,
    IKeyValueStore,
    IProductRepository,
    ISalesRepository,
    ISettingsRepository,
    JSONStore,
    ProductRepository,
    SalesRepository,
    SettingsRepository,
)


@pytest.fixture
def store(tmp_path):
    s = JSONStore(str(tmp_path))
    yield s
    s.close()


def test_set_writes_file_and_get_returns_copy(store, tmp_path):
    store.set('pos_products', [{'id': '1', 'name': 'Pen'}])

    assert os.path.exists(tmp_path / 'pos_products.json')
    value = store.get('pos_products')
    value.append({'id': '2'})
    assert store.get('pos_products') == [{'id': '1', 'name': 'Pen'}]


def test_missing_key_returns_default(store):
    assert store.get('pos_sales') is None
    assert store.get('pos_sales', []) == []
    assert not store.has('pos_sales')


def test_new_store_reads_persisted_values(store, tmp_path):
    store.set('pos_currency', {'code': 'EUR'})

    other = JSONStore(str(tmp_path))
    assert other.get('pos_currency') == {'code': 'EUR'}
    assert other.keys() == ['pos_currency']


def test_no_temp_file_left_after_write(store, tmp_path):
    store.set('pos_sales', [])
    assert not any(name.endswith('.tmp') for name in os.listdir(tmp_path))


def test_corrupt_json_raises_persistence_error(tmp_path):
    (tmp_path / 'pos_products.json').write_text('{not json', encoding='utf-8')
    store = JSONStore(str(tmp_path))

    with pytest.raises(PersistenceError):
        store.get('pos_products')


def test_non_list_record_raises_persistence_error(store):
    store.set('pos_products', {'id': '1'})
    with pytest.raises(PersistenceError):
        ProductRepository(store).load()


def test_malformed_sale_raises_persistence_error(store):
    store.set('pos_sales', [{'id': '1', 'items': [], 'total': 1, 'timestamp': 'ayer'}])
    with pytest.raises(PersistenceError):
        SalesRepository(store).load()


def test_unserializable_value_raises_persistence_error(store):
    with pytest.raises(PersistenceError):
        store.set('pos_sales', [object()])
    assert not store.has('pos_sales')


def test_delete(store):
    store.set('pos_currency', {'code': 'USD'})
    assert store.delete('pos_currency') is True
    assert store.delete('pos_currency') is False
    assert store.get('pos_currency') is None


def test_closed_store_rejects_operations(store):
    store.close()
    assert store.closed
    with pytest.raises(PersistenceError):
        store.get('pos_products')
    with pytest.raises(PersistenceError):
        store.set('pos_products', [])


def test_reload_discards_cache(store, tmp_path):
    store.set('pos_currency', {'code': 'USD'})
    (tmp_path / 'pos_currency.json').write_text('{"code": "GBP"}', encoding='utf-8')

    assert store.get('pos_currency') == {'code': 'USD'}
    store.reload()
    assert store.get('pos_currency') == {'code': 'GBP'}


def test_id_generator_is_strictly_increasing():
    gen = IdGenerator(clock=lambda: 1000.0)
    first = gen.next_id()
    second = gen.next_id()
    assert first == '1000000'
    assert second == '1000001'


def test_id_generator_skips_taken_ids():
    gen = IdGenerator(clock=lambda: 1000.0)
    assert gen.next_id(taken=['1000000', '1000001']) == '1000002'


def test_implementations_satisfy_interfaces(store):
    assert isinstance(store, IKeyValueStore)
    assert isinstance(ProductRepository(store), IProductRepository)
    assert isinstance(SalesRepository(store), ISalesRepository)
    assert isinstance(SettingsRepository(store), ISettingsRepository)


class InMemoryStore:
    """Almacén en memoria que cumple IKeyValueStore."""

    def __init__(self):
        self._data = {}
        self._lock = threading.RLock()
        self.closed = False

    def get(self, key, default=None):
        return copy.deepcopy(self._data.get(key, default))

    def set(self, key, value):
        self._data[key] = copy.deepcopy(value)

    def delete(self, key):
        return self._data.pop(key, None) is not None

    def has(self, key):
        return key in self._data

    @contextmanager
    def locked(self):
        with self._lock:
            yield self

    def flush(self):
        pass

    def close(self):
        self.closed = True


def test_services_run_over_another_store_backend(config, clock):
    memory = InMemoryStore()
    assert isinstance(memory, IKeyValueStore)

    container = AppContainer(config, clock=clock, store=memory)
    container.bootstrap()
    sale = container.sale_ledger.record([{'productId': '1', 'productName': 'Pen', 'quantity': 2, 'price': 1.5}])

    assert container.product_store.get('1').stock == 48
    assert container.report_aggregator.summary()['total_revenue'] == sale.total
    assert memory.has('pos_sales')
    assert not os.path.exists(config['DATA_DIR'])
    container.close()
    assert memory.closed
