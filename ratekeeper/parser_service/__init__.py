"""Parser Service: обновление кеша курсов из внешних API.

Состоит из:
- config: конфигурация API и параметров обновления
- api_clients: клиенты OpenExchangeRates и CoinMarketCap
- updater: один цикл параллельного опроса источников
- scheduler: планировщик периодического обновления
"""
from __future__ import annotations

__all__ = [
    "config",
    "api_clients",
    "updater",
    "scheduler",
]
