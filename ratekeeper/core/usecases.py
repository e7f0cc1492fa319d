from __future__ import annotations

from typing import Any, Dict

from ..decorators import log_action
from .currencies import get_currency
from .exceptions import RateUnavailableError
from .store import PriceEntry, PriceStore
from .utils import format_timestamp, validate_amount, validate_currency_code


def _require_entry(store: PriceStore, code: str) -> PriceEntry:
    """Вернуть запись кеша для уже проверенного кода или бросить ошибку."""
    entry = store.get_entry(code)
    if entry is None:
        raise RateUnavailableError(
            f"Курс для '{code}' ещё не загружен. "
            "Выполните 'update-rates' или дождитесь обновления.",
        )
    return entry


def _require_pair(
    store: PriceStore,
    from_code: str,
    to_code: str,
) -> tuple[PriceEntry, PriceEntry]:
    """Проверить оба кода и только потом читать кеш.

    Неподдерживаемая валюта всегда даёт CurrencyNotFoundError,
    даже если курс второй валюты ещё не загружен.
    """
    source_code = get_currency(validate_currency_code(from_code)).code
    target_code = get_currency(validate_currency_code(to_code)).code
    return (
        _require_entry(store, source_code),
        _require_entry(store, target_code),
    )


def _cross_rate(source: PriceEntry, target: PriceEntry) -> float:
    if source.price == 0:
        raise RateUnavailableError(
            f"Курс '{source.code}' равен нулю, конвертация невозможна.",
        )
    return target.price / source.price


@log_action("GET_RATE")
def get_rate(store: PriceStore, *, from_code: str, to_code: str) -> float:
    """Сколько единиц to_code стоит одна единица from_code.

    Все курсы в кеше выражены относительно 1 USD, поэтому
    кросс-курс считается как price[to] / price[from].
    """
    source, target = _require_pair(store, from_code, to_code)
    return _cross_rate(source, target)


@log_action("CONVERT", verbose=True)
def convert(
    store: PriceStore,
    *,
    from_code: str,
    to_code: str,
    amount: float,
) -> Dict[str, Any]:
    """Перевести amount из from_code в to_code по текущему кешу.

    Возвращает словарь:
    - rate: кросс-курс from→to
    - amount: исходная сумма
    - result: сумма в to_code
    - updated_at: момент обновления самого старого из двух курсов

    Курс и updated_at берутся из одной и той же пары записей.
    """
    value = validate_amount(amount)
    source, target = _require_pair(store, from_code, to_code)
    rate = _cross_rate(source, target)
    oldest = min(source.updated_at, target.updated_at)

    return {
        "rate": rate,
        "amount": value,
        "result": value * rate,
        "updated_at": format_timestamp(oldest),
    }
