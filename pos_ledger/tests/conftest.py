# -*- coding: utf-8 -*-
"""
Fixtures compartidas: cada test trabaja sobre un directorio de datos propio
(tmp_path) y un reloj fijo.
"""
from datetime import datetime, timedelta, timezone

import pytest

from pos_ledger.app_container import AppContainer
from pos_ledger.config import load_config
from pos_ledger.main import EXTENSION_KEY, create_app

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Reloj controlable desde el test."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def config(tmp_path):
    return load_config({
        'DATA_DIR': str(tmp_path / 'data'),
        'LOG_DIR': None,
        'SECRET_KEY': 'test-secret-key',
        'SEED_CATALOG': True,
        'TIMEZONE': 'UTC',
        'TESTING': True,
    })


@pytest.fixture
def container(config, clock):
    """Contenedor sin sembrar (catálogo inexistente)."""
    c = AppContainer(config, clock=clock)
    yield c
    c.close()


@pytest.fixture
def seeded(container):
    """Contenedor con el catálogo inicial."""
    container.bootstrap()
    return container


@pytest.fixture
def app(config, clock):
    application = create_app(config, clock=clock)
    yield application
    application.extensions[EXTENSION_KEY].close()


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c
