# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Construye UNA vez el almacén y, a partir de él, los repositorios y
# servicios. create_app() crea un contenedor por aplicación y lo pasa a las
# rutas; no hay estado global.
#
# CICLO DE VIDA:
#   AppContainer(config)  → al iniciar la aplicación
#   container.bootstrap() → siembra el catálogo si corresponde
#   container.close()     → al apagar (cierra el almacén)
#
# Para cambiar el backend de persistencia basta con construir otro almacén
# que cumpla IKeyValueStore: los servicios no cambian.
# ==============================================================================

import logging
from datetime import timezone, tzinfo
from typing import Any, Callable, Dict, Optional
from zoneinfo import ZoneInfo

from pos_ledger.repositories import (
    IKeyValueStore,
    IdGenerator,
    JSONStore,
    ProductRepository,
    SalesRepository,
    SettingsRepository,
)
from pos_ledger.seed import DEFAULT_CATALOG
from pos_ledger.services import (
    CartService,
    CurrencyService,
    DataService,
    MagicLinkAuthService,
    ProductStore,
    ReportAggregator,
    SaleLedger,
)

logger = logging.getLogger(__name__)


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Convierte el nombre configurado en tzinfo (UTC si está vacío)."""
    if not name or name.upper() == 'UTC':
        return timezone.utc
    return ZoneInfo(name)


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Uso:
        container = AppContainer({'DATA_DIR': '/path/to/data'})
        container.bootstrap()
        sale = container.sale_ledger.record(cart)
    """

    def __init__(self, config: Dict[str, Any], clock: Callable = None, store: IKeyValueStore = None):
        """
        Args:
            config: Configuración (ver pos_ledger.config.load_config)
            clock: Reloj compartido por ledger y reportes (para testing)
            store: Almacén ya construido (por defecto JSONStore en DATA_DIR)
        """
        self.config = config
        self.clock = clock
        self.store = store or JSONStore(config['DATA_DIR'])
        self.id_generator = IdGenerator()

        # Repositorios
        self.product_repo = ProductRepository(self.store)
        self.sales_repo = SalesRepository(self.store)
        self.settings_repo = SettingsRepository(self.store)

        # Servicios (lazy loading)
        self._product_store: Optional[ProductStore] = None
        self._sale_ledger: Optional[SaleLedger] = None
        self._report_aggregator: Optional[ReportAggregator] = None
        self._cart_service: Optional[CartService] = None
        self._currency_service: Optional[CurrencyService] = None
        self._auth_service: Optional[MagicLinkAuthService] = None
        self._data_service: Optional[DataService] = None

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def product_store(self) -> ProductStore:
        if self._product_store is None:
            self._product_store = ProductStore(self.product_repo, self.id_generator)
        return self._product_store

    @property
    def sale_ledger(self) -> SaleLedger:
        if self._sale_ledger is None:
            self._sale_ledger = SaleLedger(
                self.sales_repo,
                self.product_repo,
                self.id_generator,
                self.clock
            )
        return self._sale_ledger

    @property
    def report_aggregator(self) -> ReportAggregator:
        if self._report_aggregator is None:
            self._report_aggregator = ReportAggregator(
                self.product_store,
                self.sale_ledger,
                self.clock,
                resolve_timezone(self.config.get('TIMEZONE'))
            )
        return self._report_aggregator

    @property
    def cart_service(self) -> CartService:
        if self._cart_service is None:
            self._cart_service = CartService(self.product_store)
        return self._cart_service

    @property
    def currency_service(self) -> CurrencyService:
        if self._currency_service is None:
            self._currency_service = CurrencyService(self.settings_repo)
        return self._currency_service

    @property
    def auth_service(self) -> MagicLinkAuthService:
        if self._auth_service is None:
            self._auth_service = MagicLinkAuthService(
                self.config['SECRET_KEY'],
                max_age=self.config.get('MAGIC_LINK_MAX_AGE', 900)
            )
        return self._auth_service

    @property
    def data_service(self) -> DataService:
        if self._data_service is None:
            self._data_service = DataService(self.product_store, self.sale_ledger)
        return self._data_service

    # =========================================================================
    # CICLO DE VIDA
    # =========================================================================

    def bootstrap(self) -> bool:
        """
        Inicialización explícita al arrancar: siembra el catálogo por
        defecto si SEED_CATALOG está activo y nunca se guardó uno.

        Returns:
            True si se sembró el catálogo
        """
        if not self.config.get('SEED_CATALOG', True):
            return False
        return self.product_store.initialize(DEFAULT_CATALOG)

    def close(self) -> None:
        """Vacía y cierra el almacén."""
        if self.store.closed:
            return
        self.store.flush()
        self.store.close()
        logger.info("Contenedor cerrado")
