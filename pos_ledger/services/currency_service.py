# ==============================================================================
# SERVICIO DE MONEDA
# ==============================================================================
# Preferencia de moneda para mostrar montos. Solo afecta la presentación:
# los montos se guardan sin moneda.
# ==============================================================================

from typing import List

from pos_ledger.errors import ValidationError
from pos_ledger.models import Currency
from pos_ledger.repositories.interfaces import ISettingsRepository

CURRENCIES = (
    Currency('USD', '$', 'US Dollar'),
    Currency('KSH', 'KSh', 'Kenyan Shilling'),
    Currency('EUR', '€', 'Euro'),
    Currency('GBP', '£', 'British Pound'),
    Currency('JPY', '¥', 'Japanese Yen'),
    Currency('CAD', 'C$', 'Canadian Dollar'),
    Currency('AUD', 'A$', 'Australian Dollar'),
    Currency('INR', '₹', 'Indian Rupee'),
    Currency('ZAR', 'R', 'South African Rand'),
    Currency('NGN', '₦', 'Nigerian Naira'),
)

DEFAULT_CURRENCY = CURRENCIES[0]


class CurrencyService:
    """Selección de moneda persistida en pos_currency."""

    def __init__(self, settings_repo: ISettingsRepository):
        self.settings_repo = settings_repo

    @staticmethod
    def available() -> List[Currency]:
        return list(CURRENCIES)

    def current(self) -> Currency:
        """Moneda elegida, USD si nunca se eligió una."""
        return self.settings_repo.get_currency() or DEFAULT_CURRENCY

    def set_currency(self, code: str) -> Currency:
        """
        Cambia la moneda por su código.

        Raises:
            ValidationError: Si el código no es una moneda soportada
        """
        if not isinstance(code, str):
            raise ValidationError("Código de moneda inválido", {'code': 'Debe ser texto'})
        normalized = code.strip().upper()
        for currency in CURRENCIES:
            if currency.code == normalized:
                self.settings_repo.set_currency(currency)
                return currency
        raise ValidationError(f"Moneda no soportada: {code}", {'code': 'Moneda no soportada'})

    def format(self, amount: float) -> str:
        return self.current().format(amount)
