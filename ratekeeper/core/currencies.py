from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict

from .exceptions import CurrencyNotFoundError

# Код, курс которого приходит из CoinMarketCap (с инверсией).
# Остальные поддерживаемые коды обновляются из OpenExchangeRates.
ETH_SYMBOL = "ETH"


@dataclass(frozen=True)
class Currency(ABC):
    """Абстрактная базовая валюта."""

    name: str
    code: str

    def __post_init__(self) -> None:
        name = self.name.strip()
        if not name:
            raise ValueError("Currency name cannot be empty.")

        code = self.code.strip()
        if not (2 <= len(code) <= 5):
            raise ValueError("Currency code must be 2–5 characters long.")
        if code != code.upper() or " " in code:
            raise ValueError("Currency code must be uppercase without spaces.")

        object.__setattr__(self, "name", name)

    @abstractmethod
    def get_display_info(self) -> str:
        """Человекочитаемое представление валюты для CLI/логов."""


@dataclass(frozen=True)
class FiatCurrency(Currency):
    """Фиатная валюта."""

    issuing_country: str

    def get_display_info(self) -> str:
        return (
            f"[FIAT] {self.code} — {self.name} "
            f"(Issuing: {self.issuing_country})"
        )


@dataclass(frozen=True)
class CryptoCurrency(Currency):
    """Криптовалюта."""

    algorithm: str

    def get_display_info(self) -> str:
        return f"[CRYPTO] {self.code} — {self.name} (Algo: {self.algorithm})"


# ---------- Реестр поддерживаемых валют ----------

_CURRENCY_REGISTRY: Dict[str, Currency] = {
    "USD": FiatCurrency(
        name="US Dollar",
        code="USD",
        issuing_country="United States",
    ),
    "BRL": FiatCurrency(
        name="Brazilian Real",
        code="BRL",
        issuing_country="Brazil",
    ),
    "EUR": FiatCurrency(
        name="Euro",
        code="EUR",
        issuing_country="Eurozone",
    ),
    "BTC": CryptoCurrency(
        name="Bitcoin",
        code="BTC",
        algorithm="SHA-256",
    ),
    ETH_SYMBOL: CryptoCurrency(
        name="Ethereum",
        code=ETH_SYMBOL,
        algorithm="Ethash",
    ),
}

SUPPORTED_CURRENCIES: tuple[str, ...] = tuple(_CURRENCY_REGISTRY)


def is_supported(code: str) -> bool:
    """Код входит в список поддерживаемых (с учётом регистра)."""
    return code in _CURRENCY_REGISTRY


def get_currency(code: str) -> Currency:
    """Вернуть объект Currency по её коду.

    Коды чувствительны к регистру: 'usd' не то же самое, что 'USD'.
    Если код неизвестен — бросаем CurrencyNotFoundError.
    """
    if not isinstance(code, str):
        raise TypeError("Currency code must be a string.")

    try:
        return _CURRENCY_REGISTRY[code]
    except KeyError as exc:
        raise CurrencyNotFoundError(
            f"Неподдерживаемая валюта '{code}'. "
            f"Доступны: {', '.join(SUPPORTED_CURRENCIES)}.",
        ) from exc


def invert_price(price: float) -> float:
    """Перевести «USD за 1 единицу» в «единиц за 1 USD».

    Ноль и нечисловые значения (nan, inf) отвергаются: результат
    инверсии был бы бесконечным или NaN. Отрицательные значения
    инвертируются как есть.
    """
    if not math.isfinite(price):
        raise ValueError(f"Нельзя инвертировать нечисловую цену: {price}")
    if price == 0:
        raise ValueError("Нельзя инвертировать нулевую цену.")
    return 1.0 / price
