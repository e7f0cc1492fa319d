from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict

import requests

from ..core.currencies import invert_price
from ..core.exceptions import DataError, DecodeError, TransportError
from ..core.store import PriceStore
from .config import ParserConfig


@dataclass(frozen=True)
class FetchResult:
    """Результат одного опроса источника.

    prices уже приведены к единой конвенции «единиц валюты за 1 USD»;
    inverted отмечает, что для этого пришлось перевернуть значения источника.
    """

    source: str
    prices: Dict[str, float] = field(default_factory=dict)
    inverted: bool = False


class BaseApiClient(ABC):
    """Базовый клиент внешнего источника курсов.

    Наследники реализуют fetch(): сначала весь ответ проверяется,
    и только потом возвращается FetchResult. Поэтому update()
    либо сохраняет весь набор курсов, либо не сохраняет ничего.
    """

    name: str = "base"

    def __init__(self, config: ParserConfig | None = None) -> None:
        self.config = config or ParserConfig()

    @abstractmethod
    def fetch(self) -> FetchResult:
        """Получить курсы из источника или бросить ApiRequestError."""

    def update(self, store: PriceStore) -> FetchResult:
        """Опросить источник и записать полученные курсы в store."""
        result = self.fetch()
        store.save_many(result.prices)
        return result

    def _get_json(self, url: str, **params: str) -> Any:
        """GET-запрос с разбором JSON; ошибки переводятся в ApiRequestError."""
        try:
            response = requests.get(
                url,
                params=params or None,
                timeout=self.config.request_timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise TransportError(
                f"Ошибка при обращении к {self.name}: {exc}",
            ) from exc

        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"Ошибка {self.name}: HTTP "
                f"{response.status_code} — {response.text[:200]}",
            )

        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(
                f"Некорректный JSON-ответ от {self.name}.",
            ) from exc


class OpenExchangeRatesClient(BaseApiClient):
    """Клиент OpenExchangeRates: стоимость 1 USD в каждой валюте."""

    name = "OpenExchangeRates"

    def fetch(self) -> FetchResult:
        cfg = self.config
        payload = self._get_json(
            cfg.rates_url,
            app_id=cfg.OPENEXCHANGERATES_APP_ID,
        )

        if not isinstance(payload, dict):
            raise DecodeError(
                "Неожиданный формат ответа OpenExchangeRates: "
                "ожидался объект JSON.",
            )

        rates = payload.get("rates")
        if not isinstance(rates, dict):
            raise DecodeError(
                "Неожиданный формат ответа OpenExchangeRates: "
                "отсутствует секция 'rates'.",
            )

        # Проверяем всю секцию целиком: одна битая запись
        # отменяет обновление всех валют этого цикла.
        for code, value in rates.items():
            if (
                isinstance(value, bool)
                or not isinstance(value, Real)
                or not math.isfinite(value)
            ):
                raise DecodeError(
                    "OpenExchangeRates вернул нечисловой курс "
                    f"для '{code}': {value!r}",
                )

        prices = {
            code: float(rates[code])
            for code in cfg.rates_currencies
            if code in rates
        }
        return FetchResult(source=self.name, prices=prices)


class CoinMarketCapClient(BaseApiClient):
    """Клиент CoinMarketCap: цена 1 ETH в USD, сохраняется в инверсии."""

    name = "CoinMarketCap"

    def fetch(self) -> FetchResult:
        cfg = self.config
        payload = self._get_json(cfg.crypto_url)

        if not isinstance(payload, list):
            raise DecodeError(
                "Неожиданный формат ответа CoinMarketCap: "
                "ожидался массив JSON.",
            )
        if not payload:
            raise DataError("CoinMarketCap вернул пустой массив тикеров.")

        ticker = payload[0]
        if not isinstance(ticker, dict):
            raise DecodeError(
                "Неожиданный формат тикера CoinMarketCap: "
                "ожидался объект JSON.",
            )

        raw_price = ticker.get("price_usd")
        if not isinstance(raw_price, str):
            raise DecodeError(
                "В ответе CoinMarketCap нет строкового поля 'price_usd'.",
            )

        try:
            price_usd = float(raw_price)
        except ValueError as exc:
            raise DataError(
                f"Поле 'price_usd' не является числом: {raw_price!r}",
            ) from exc

        try:
            inverted = invert_price(price_usd)
        except ValueError as exc:
            raise DataError(
                f"Некорректная цена {cfg.crypto_currency} "
                f"от CoinMarketCap: {exc}",
            ) from exc

        return FetchResult(
            source=self.name,
            prices={cfg.crypto_currency: inverted},
            inverted=True,
        )
