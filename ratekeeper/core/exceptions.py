from __future__ import annotations


class CurrencyError(Exception):
    """Базовое исключение для ошибок, связанных с валютами."""


class CurrencyNotFoundError(CurrencyError):
    """Неизвестная или неподдерживаемая валюта."""


class RateUnavailableError(CurrencyError):
    """Валюта поддерживается, но курс для неё ещё не загружен."""


class ApiRequestError(CurrencyError):
    """Ошибка при обращении к внешнему источнику курсов."""


class TransportError(ApiRequestError):
    """Сетевая ошибка или HTTP-ответ со статусом не 2xx."""


class DecodeError(ApiRequestError):
    """Некорректный JSON или неожиданная структура ответа."""


class DataError(ApiRequestError):
    """Ответ разобран, но данные непригодны (пустой список, 0, не число)."""
