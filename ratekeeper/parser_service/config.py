from __future__ import annotations

import os
from dataclasses import dataclass

from ..core.currencies import ETH_SYMBOL, SUPPORTED_CURRENCIES
from ..infra.settings import SettingsLoader


@dataclass(frozen=True)
class ParserConfig:
    """Конфигурация Parser Service.

    Здесь фиксируем:
    - OPENEXCHANGERATES_APP_ID: ключ OpenExchangeRates (берём из окружения);
    - rates_url / crypto_url: адреса внешних API (из SettingsLoader);
    - update_interval_ms: пауза между циклами обновления;
    - request_timeout: таймаут одного HTTP-запроса, секунды;
    - rates_currencies: какие коды забираем из OpenExchangeRates;
    - crypto_currency: код, который приходит из CoinMarketCap.
    """

    # default="" гарантирует, что тип всегда str, без None.
    OPENEXCHANGERATES_APP_ID: str = os.getenv("OPENEXCHANGERATES_APP_ID", "")

    rates_url: str = SettingsLoader().get("rates_url")
    crypto_url: str = SettingsLoader().get("crypto_url")

    update_interval_ms: int = SettingsLoader().get("update_interval_ms")
    request_timeout: float = SettingsLoader().get("request_timeout")

    # ETH не запрашиваем у OpenExchangeRates: источники пишут
    # непересекающиеся наборы ключей.
    rates_currencies: tuple[str, ...] = tuple(
        code for code in SUPPORTED_CURRENCIES if code != ETH_SYMBOL
    )
    crypto_currency: str = ETH_SYMBOL
