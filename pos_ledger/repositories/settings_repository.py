# ==============================================================================
# REPOSITORIO DE PREFERENCIAS
# ==============================================================================
# Encapsula el acceso al registro pos_currency (moneda seleccionada).
# ==============================================================================

from typing import Optional

from pos_ledger.errors import PersistenceError
from pos_ledger.models import Currency
from pos_ledger.repositories.base import JSONStore


class SettingsRepository:
    """
    Repositorio de preferencias locales.

    Formato de datos en pos_currency:
    {"code": "USD", "symbol": "$", "name": "US Dollar"}
    """

    CURRENCY_KEY = 'pos_currency'

    def __init__(self, store: JSONStore):
        self.store = store

    def get_currency(self) -> Optional[Currency]:
        """
        Obtiene la moneda guardada.

        Returns:
            Currency o None si nunca se eligió una
        """
        raw = self.store.get(self.CURRENCY_KEY)
        if raw is None:
            return None
        try:
            return Currency.from_dict(raw)
        except (KeyError, TypeError) as e:
            raise PersistenceError(f"Preferencia de moneda corrupta: {raw!r}") from e

    def set_currency(self, currency: Currency) -> None:
        self.store.set(self.CURRENCY_KEY, currency.to_dict())
